# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Central security module.  All cryptographic primitives and auth guards live
here.  No other module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. JWT creation / decoding                  (PyJWT / HS256)
3. FastAPI dependency guards                (get_token_claims, require_admin …)

Failure kinds
-------------
* No bearer token at all          → 401
* Malformed / expired / bad sig   → 403
The role is trusted from the token for its whole lifetime; it is not
re-checked against the stored user.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import forbidden, not_found, unauthorized
from database import get_db

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing  (pure Python, no glibc constraint)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """
    Hash a plaintext password with PBKDF2-SHA256.  The salt is embedded in
    the returned passlib hash string ("$pbkdf2-sha256$...").
    """
    return _pbkdf2.using(rounds=settings.password_hash_rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """
    Constant-time verification of a plaintext password against a
    pbkdf2_sha256 hash produced by :func:`hash_password`.
    """
    try:
        return _pbkdf2.verify(plain, stored_hash)
    except ValueError:
        # Not a pbkdf2 hash at all
        return False


# ---------------------------------------------------------------------------
# 2.  JWT – access tokens
# ---------------------------------------------------------------------------

ROLE_ADMIN = "admin"
ROLE_USER = "user"


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def role_for(user_type: str) -> str:
    return ROLE_ADMIN if user_type == ROLE_ADMIN else ROLE_USER


def token_lifetime(role: str) -> timedelta:
    """Admins get the long window, everyone else the short one."""
    if role == ROLE_ADMIN:
        return timedelta(minutes=settings.jwt_long_expire_minutes)
    return timedelta(minutes=settings.jwt_expire_minutes)


def create_access_token(user_id: int, role: str) -> tuple[str, datetime]:
    """
    Sign a JWT with HS256 carrying ``sub``, ``user_id`` and ``role``.
    Returns the token and its expiry.
    """
    expire = datetime.now(timezone.utc) + token_lifetime(role)
    to_encode = {"sub": str(user_id), "user_id": user_id, "role": role, "exp": expire}
    return _jwt.encode(to_encode, settings.secret_key, algorithm="HS256"), expire


def decode_access_token(token: str) -> TokenClaims:
    """
    Decode and verify a JWT.  Raises 403 on any failure (expired, bad
    signature, malformed, missing claims).
    """
    try:
        payload = _jwt.decode(token, settings.secret_key, algorithms=["HS256"])
    except _jwt.ExpiredSignatureError as exc:
        raise forbidden("Invalid token", "Token has expired") from exc
    except _jwt.InvalidTokenError as exc:
        raise forbidden("Invalid token", str(exc)) from exc

    user_id = payload.get("user_id")
    role = payload.get("role")
    if not isinstance(user_id, int) or role not in (ROLE_ADMIN, ROLE_USER):
        raise forbidden("Invalid token", "Token is missing required claims")
    return TokenClaims(user_id=user_id, role=role)


# ---------------------------------------------------------------------------
# 3.  FastAPI dependency guards
# ---------------------------------------------------------------------------

# The tokenUrl here is only used by the auto-generated OpenAPI docs.
# auto_error=False so that a missing token can be told apart from a bad one.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_prefix}/auth/login", auto_error=False)


def get_optional_claims(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[TokenClaims]:
    """
    Dependency for routes where a token is optional.  No token → None;
    a token that does not verify is still rejected with 403.
    """
    if not token:
        return None
    return decode_access_token(token)


def get_token_claims(claims: Optional[TokenClaims] = Depends(get_optional_claims)) -> TokenClaims:
    """Dependency: a verified token is required (401 when absent)."""
    if claims is None:
        raise unauthorized("Unauthorized: Token not found")
    return claims


def require_admin(claims: TokenClaims = Depends(get_token_claims)) -> TokenClaims:
    """
    Dependency: wraps :func:`get_token_claims` and additionally asserts
    ``role == 'admin'``.  Raises 403 otherwise.
    """
    if not claims.is_admin:
        raise forbidden("Access denied. Only admin has access to this route.")
    return claims


def get_current_user(
    claims: TokenClaims = Depends(get_token_claims),
    db: Session = Depends(get_db),
):
    """
    Dependency: load the User row the token belongs to.  Raises 404 if the
    row no longer exists.
    """
    # Lazy import to avoid circular dependency at module load time
    from models.user import User  # noqa: E402

    user = db.get(User, claims.user_id)
    if user is None:
        raise not_found("User not found")
    return user


# -- IP Address extraction ----------------------------------------------------


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address from the request.
    Checks X-Forwarded-For header first (for proxies), then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first (original client)
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"
