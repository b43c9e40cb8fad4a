# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
User rules shared by the auth and users routers: field validation,
case-insensitive uniqueness, image normalisation and row loading.
"""

from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.errors import forbidden, not_found, unprocessable
from core.images import ImageError, normalize_base64_image
from core.query_builder import public_payload
from core.validation import validate_length, validate_password
from models.user import USER, USER_TYPES, User
from users.schemas import UserRow

# Fields only an admin may write through update / patch
ADMIN_ONLY_FIELDS = ("type", "login", "active", "deleted")

_LENGTH_CHECKED = ("login", "email", "user_name", "password")


def user_payload(user: Optional[User]) -> Optional[dict]:
    return public_payload(user, UserRow, USER)


def load_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise not_found("User not found")
    return user


def check_user_fields(values: dict[str, Any]) -> None:
    """
    Validate whichever user fields are present in *values*.
    Raises 422 on the first violation.
    """
    for name in _LENGTH_CHECKED:
        value = values.get(name)
        if value is None:
            continue
        if not value.strip():
            raise unprocessable(f"Field '{name}' must not be empty")
        err = validate_length(name, value)
        if err:
            raise unprocessable(err)

    if "type" in values and values["type"] not in USER_TYPES:
        raise unprocessable("Invalid type. Must be 'admin' or 'user'")

    if values.get("password") is not None:
        err = validate_password(values["password"])
        if err:
            raise unprocessable("Password should satisfy rules", err)


def normalize_image(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        return normalize_base64_image(value)
    except ImageError as exc:
        raise unprocessable("Incorrect data type for image", str(exc)) from exc


def ensure_unique(
    db: Session,
    login: Optional[str] = None,
    email: Optional[str] = None,
    exclude_id: Optional[int] = None,
) -> None:
    """
    Reject a login / email already used by another row, deleted rows
    included.  Comparison is case-insensitive.
    """
    checks = (
        (email, User.email, "User with this email exists"),
        (login, User.login, "User with this login exists"),
    )
    for value, column, message in checks:
        if value is None:
            continue
        q = db.query(func.count(User.id)).filter(func.lower(column) == value.lower())
        if exclude_id is not None:
            q = q.filter(User.id != exclude_id)
        if q.scalar():
            raise forbidden(message)
