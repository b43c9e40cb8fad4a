# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
User endpoints – listing, lookup, full replace, self patch, soft delete.

Every endpoint except the ``/me`` pair is guarded by ``require_admin``.  A
request that carries a valid JWT but a ``user`` role receives 403 before
any business logic runs.  Password hashes never leave this module: every
payload goes through ``user_payload`` which nulls restricted fields.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from database import get_db
from core.config import settings
from core.errors import bad_request, forbidden
from core.logger import logger
from core.query_builder import (
    FieldRequiredError,
    execute,
    list_records,
    patch_statement,
    soft_delete_statement,
    update_statement,
)
from core.responses import ok, ok_page
from core.security import TokenClaims, get_current_user, get_token_claims, hash_password, require_admin
from models.fields import MAX_INT
from models.user import USER, User
from users.schemas import UserPatch, UserUpdate
from users.service import (
    ADMIN_ONLY_FIELDS,
    check_user_fields,
    ensure_unique,
    load_user,
    normalize_image,
    user_payload,
)

router = APIRouter(prefix="/users", tags=["users"])

_CONFLICT = "Login or Email already exists for another user"


def _set_password(db: Session, user_id: int, plain: str) -> None:
    # password is restricted, so it is only ever written through this path
    stmt = patch_statement(USER, user_id, {"password": hash_password(plain)}, allow_restricted=("password",))
    execute(db, stmt)


# ---------------------------------------------------------------------------
# GET /users  – paginated list
# ---------------------------------------------------------------------------


@router.get("")
def list_users(
    page: int = Query(1, ge=1, le=MAX_INT),
    deleted: bool = Query(False, description="true lists soft-deleted users"),
    reverse: bool = Query(False, description="true sorts oldest first"),
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = list_records(
        db, User, USER, deleted=deleted, page=page, reverse=reverse, page_size=settings.page_size
    )
    return ok_page(result, [user_payload(u) for u in result.rows])


# ---------------------------------------------------------------------------
# GET /users/me  – own profile
# ---------------------------------------------------------------------------


@router.get("/me")
def get_me(user: User = Depends(get_current_user)):
    return ok(user_payload(user))


# ---------------------------------------------------------------------------
# PATCH /users/me  – partial self-update
# ---------------------------------------------------------------------------


@router.patch("/me")
def patch_me(
    body: UserPatch,
    claims: TokenClaims = Depends(get_token_claims),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Apply only the fields present in the body.  Regular users may not touch
    ``type``, ``login``, ``active`` or ``deleted``.
    """
    fields = body.model_dump(exclude_unset=True)

    if not claims.is_admin:
        for name in ADMIN_ONLY_FIELDS:
            if name in fields:
                raise forbidden(
                    f"Access denied for updating the field '{name}'",
                    "Only admin is allowed to make those changes",
                )

    check_user_fields(fields)

    for name in ("login", "email"):
        if fields.get(name) is not None:
            fields[name] = fields[name].lower()
    ensure_unique(db, login=fields.get("login"), email=fields.get("email"), exclude_id=user.id)

    if "image" in fields:
        fields["image"] = normalize_image(fields["image"])
    password = fields.pop("password", None)
    # Soft delete has its own endpoint
    fields.pop("deleted", None)

    try:
        stmt = patch_statement(USER, user.id, fields)
    except FieldRequiredError as exc:
        raise bad_request(str(exc)) from exc

    if stmt is None and password is None:
        raise bad_request("Nothing to patch")

    if stmt is not None:
        execute(db, stmt, conflict_message=_CONFLICT)
    if password is not None:
        _set_password(db, user.id, password)

    logger.info("User %d patched own profile (%s)", user.id, ", ".join(sorted(fields)) or "password")
    return ok(user_payload(load_user(db, user.id)))


# ---------------------------------------------------------------------------
# GET /users/{id}
# ---------------------------------------------------------------------------


@router.get("/{user_id}")
def get_user(
    user_id: Annotated[int, Path(le=MAX_INT)],
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ok(user_payload(load_user(db, user_id)))


# ---------------------------------------------------------------------------
# PUT /users/{id}  – full replace
# ---------------------------------------------------------------------------


@router.put("/{user_id}")
def update_user(
    user_id: Annotated[int, Path(le=MAX_INT)],
    body: UserUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Replace every writable column.  Omitted optional fields fall back to
    their default (``active``) or NULL (``image``).  The password is only
    changed when supplied.
    """
    check_user_fields(body.model_dump())
    load_user(db, user_id)

    login = body.login.lower()
    email = body.email.lower()
    ensure_unique(db, login=login, email=email, exclude_id=user_id)

    values = {
        "type": body.type,
        "login": login,
        "email": email,
        "user_name": body.user_name,
        "image": normalize_image(body.image),
        "active": body.active,
    }
    try:
        stmt = update_statement(USER, user_id, values)
    except FieldRequiredError as exc:
        raise bad_request("Missed required field/s", str(exc)) from exc

    execute(db, stmt, conflict_message=_CONFLICT)
    if body.password is not None:
        _set_password(db, user_id, body.password)

    logger.info("User %d updated by admin %d", user_id, admin.user_id)
    return ok(user_payload(load_user(db, user_id)))


# ---------------------------------------------------------------------------
# DELETE /users/{id}  – soft delete
# ---------------------------------------------------------------------------


@router.delete("/{user_id}")
def delete_user(
    user_id: Annotated[int, Path(le=MAX_INT)],
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Stamp ``deleted`` and clear ``active``.  The account can no longer log
    in; tokens already issued stay valid until they expire.

    Guards: an admin cannot delete their own account, and a deleted
    account keeps its original ``deleted`` timestamp.
    """
    if user_id == admin.user_id:
        raise bad_request("Cannot delete yourself")

    if load_user(db, user_id).deleted is not None:
        raise bad_request("User is already deleted")

    execute(db, soft_delete_statement(USER, user_id))
    execute(db, patch_statement(USER, user_id, {"active": False}))

    logger.info("User %d was deleted by admin %d", user_id, admin.user_id)
    return ok(user_payload(load_user(db, user_id)))
