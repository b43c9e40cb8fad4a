# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Error taxonomy and the exception handlers that render every failure into
the uniform response envelope::

    {"status": false, "payload": null,
     "error": {"message": ..., "description": ..., "code": ...}}

Handlers raise ``ApiError`` (an ``HTTPException``) exactly where they would
raise ``HTTPException``; nothing reaches FastAPI's default error page.

Status mapping
--------------
400  bad request, duplicate / missing references, nothing to patch
401  no bearer token supplied
403  invalid or expired token, role / ownership mismatch, conflicts
404  record not found
422  field validation (types, lengths, password policy, image data)
500  anything unexpected – logged with traceback, never echoed
"""

from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.logger import logger


class ApiError(HTTPException):
    """An HTTP error carrying the envelope's message / description pair."""

    def __init__(
        self,
        status_code: int,
        message: str,
        description: Any = None,
        headers: Optional[dict[str, str]] = None,
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.message = message
        self.description = message if description is None else description


def bad_request(message: str, description: Any = None) -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, message, description)


def unauthorized(message: str = "Unauthorized", description: Any = "No token provided") -> ApiError:
    return ApiError(
        status.HTTP_401_UNAUTHORIZED,
        message,
        description,
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden(message: str, description: Any = None) -> ApiError:
    return ApiError(status.HTTP_403_FORBIDDEN, message, description)


def not_found(message: str) -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, message)


def unprocessable(message: str, description: Any = None) -> ApiError:
    return ApiError(status.HTTP_422_UNPROCESSABLE_ENTITY, message, description)


def error_envelope(code: int, message: str, description: Any) -> dict:
    return {
        "status": False,
        "payload": None,
        "error": {"message": message, "description": description, "code": code},
    }


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(error_envelope(exc.status_code, exc.message, exc.description)),
        headers=exc.headers,
    )


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(error_envelope(exc.status_code, message, exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    code = status.HTTP_422_UNPROCESSABLE_ENTITY
    # Errors may embed the offending input (passwords) – keep location and reason only
    description = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    logger.info("Validation failed on %s %s: %s", request.method, request.url.path, description)
    return JSONResponse(
        status_code=code,
        content=jsonable_encoder(error_envelope(code, "Some data fields are missed or invalid", description)),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=code,
        content=error_envelope(code, "Internal server error", type(exc).__name__),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
