# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
FastAPI application factory.

Responsibilities
----------------
* Instantiate the FastAPI app.
* Register CORS middleware and the request-logging middleware.
* Register the exception handlers that render the uniform envelope.
* Mount the feature routers (auth, users, comments, upload) under the
  versioned prefix (``/v1`` by default).
* Create the tables and the default admin on startup.
* Expose a /health endpoint for container liveness checks.

Production note
---------------
CORS origins come from ``settings.cors_origins``; set them to the exact
frontend origin before deploying.
"""

import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from auth.router import router as auth_router
from users.router import router as users_router
from comments.router import router as comments_router
from upload.router import router as upload_router
from core.bootstrap import init_db
from core.config import settings
from core.errors import register_exception_handlers
from core.logger import logger
from core.security import get_client_ip

app = FastAPI(title=settings.app_name, version="1.0.0")

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Request bodies (passwords, images) are NOT echoed – only the URL and
# metadata are recorded.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            get_client_ip(request),
            response.status_code,
            elapsed_ms,
        )
        return response


app.add_middleware(_RequestLogMiddleware)

# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------
register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(users_router, prefix=settings.api_prefix)
app.include_router(comments_router, prefix=settings.api_prefix)
app.include_router(upload_router, prefix=settings.api_prefix)

# ---------------------------------------------------------------------------
# Lifecycle + health check
# ---------------------------------------------------------------------------


@app.on_event("startup")
def _on_startup():
    logger.info("%s starting up (%s)", settings.app_name, settings.environment)
    init_db()


@app.on_event("shutdown")
def _on_shutdown():
    logger.info("%s shutting down", settings.app_name)


@app.get("/health")
def health():
    return {"status": "ok"}
