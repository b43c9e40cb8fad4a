# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – registration and login.

Security notes
--------------
* Login returns the *same* error message whether the account doesn't exist
  or the password is wrong.  This prevents user-enumeration attacks.
* Only a caller holding an admin token may register an ``admin`` account;
  anonymous registration always creates a regular user.
* The stored password is always the pbkdf2 hash, never the plaintext.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from core.errors import bad_request, forbidden
from core.logger import logger
from core.query_builder import execute, insert_statement, patch_statement
from core.responses import ok
from core.security import (
    TokenClaims,
    create_access_token,
    get_optional_claims,
    hash_password,
    role_for,
    verify_password,
)
from models.user import USER, User
from auth.schemas import LoginRequest, LoginResponse, RegisterRequest
from users.service import check_user_fields, ensure_unique, normalize_image, user_payload

router = APIRouter(prefix="/auth", tags=["auth"])

# Generic message used for both "no such account" and "wrong password"
_LOGIN_FAIL = "Wrong email or password"


# ---------------------------------------------------------------------------
# POST /auth/register
# ---------------------------------------------------------------------------


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    claims: Optional[TokenClaims] = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    """Create a user account.  ``type="admin"`` needs an admin token."""
    check_user_fields(body.model_dump())

    if body.type == "admin" and (claims is None or not claims.is_admin):
        raise forbidden("Creating this type of user is not allowed")

    login = body.login.lower()
    email = body.email.lower()
    ensure_unique(db, login=login, email=email)

    stmt = insert_statement(
        USER,
        {
            "type": body.type,
            "login": login,
            "email": email,
            "password": hash_password(body.password),
            "user_name": body.user_name,
            "image": normalize_image(body.image),
            "active": True,
        },
    )
    if stmt is None:
        raise bad_request("Missing required field/s")

    result = execute(db, stmt, conflict_message="Login or Email already exists for another user")
    user = db.get(User, result.lastrowid)
    if user is None:
        raise bad_request("Error when trying to create a user")

    logger.info("User %d (%s) registered by %s", user.id, user.type, f"admin {claims.user_id}" if claims else "anonymous")
    return ok(user_payload(user))


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------


@router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate and return a signed JWT."""
    if body.email:
        column, identifier = User.email, body.email.lower()
    else:
        column, identifier = User.login, body.login.lower()

    user = db.query(User).filter(func.lower(column) == identifier).first()

    # Unified failure path – no information leaks about whether the account exists
    if not user or not verify_password(body.password, user.password):
        raise bad_request(_LOGIN_FAIL)

    if user.deleted is not None or not user.active:
        raise forbidden("User is not active or is locked")

    role = role_for(user.type)
    token, expires_at = create_access_token(user.id, role)

    # Record login timestamp
    execute(db, patch_statement(USER, user.id, {"last_login": datetime.now(timezone.utc)}))
    logger.info("User %d logged in as %s", user.id, role)

    return ok(
        LoginResponse(token=token, user_id=user.id, role=role, expires_at=expires_at).model_dump(
            mode="json", by_alias=True
        )
    )
