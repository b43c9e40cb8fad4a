# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Comment endpoints – create, list, own list, replace, patch, soft delete.

Invariants enforced by every handler
------------------------------------
* A comment carries text XOR image: ``resolve_comment_body`` rejects both
  and neither, caps text size and normalises images.
* ``replied`` must name an existing, non-deleted comment at write time.
* A signed-in author's ``userName`` / ``email`` come from the account, not
  the request body.
* Patching is limited to the owner (matching email) or an admin; replacing,
  deleting and viewing the deleted set are admin-only.
"""

from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from database import get_db
from core.config import settings
from core.errors import ApiError, bad_request, forbidden, not_found, unauthorized, unprocessable
from core.logger import logger
from core.query_builder import (
    FieldRequiredError,
    execute,
    insert_statement,
    list_records,
    patch_statement,
    public_payload,
    soft_delete_statement,
    update_statement,
)
from core.responses import ok, ok_page
from core.security import (
    TokenClaims,
    get_current_user,
    get_optional_claims,
    get_token_claims,
    require_admin,
)
from core.validation import (
    CommentBody,
    InvalidBody,
    TextBody,
    resolve_comment_body,
    validate_length,
    validate_url,
)
from models.comment import COMMENT, Comment
from models.fields import MAX_INT
from models.user import User
from comments.schemas import CommentCreate, CommentPatch, CommentRow, CommentUpdate
from users.service import load_user

router = APIRouter(prefix="/comments", tags=["comments"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def comment_payload(comment: Optional[Comment]) -> Optional[dict]:
    return public_payload(comment, CommentRow, COMMENT)


def _load_comment(db: Session, comment_id: int) -> Comment:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise not_found("Comment not found")
    return comment


def _resolve_body(text: Optional[str], image: Optional[str]) -> dict[str, Any]:
    """Run the text XOR image rule; return the two columns to write."""
    body: CommentBody = resolve_comment_body(text, image)
    if isinstance(body, InvalidBody):
        raise ApiError(body.code, body.message)
    if isinstance(body, TextBody):
        return {"text": body.text, "image": None}
    return {"text": None, "image": body.image}


def _check_author_fields(values: dict[str, Any]) -> None:
    for name in ("user_name", "email"):
        if name in values:
            value = values[name]
            if value is None or not value.strip():
                raise unprocessable(f"Field '{name}' must not be empty")
            err = validate_length(name, value)
            if err:
                raise unprocessable(err)
    err = validate_url(values.get("home_page"))
    if err:
        raise unprocessable(err)


def _ensure_replied_exists(db: Session, replied: Optional[int], self_id: Optional[int] = None) -> None:
    if replied is None:
        return
    if self_id is not None and replied == self_id:
        raise bad_request("A comment cannot reply to itself")
    exists = db.query(Comment.id).filter(Comment.id == replied, Comment.deleted.is_(None)).first()
    if not exists:
        raise bad_request("Comment does not exist", f"No comment with id {replied}")


def _require_deleted_view(claims: Optional[TokenClaims]) -> None:
    if claims is None:
        raise unauthorized("Unauthorized: Token not found")
    if not claims.is_admin:
        raise forbidden("Regular users cannot view deleted comments")


# ---------------------------------------------------------------------------
# POST /comments
# ---------------------------------------------------------------------------


@router.post("", status_code=status.HTTP_201_CREATED)
def create_comment(
    body: CommentCreate,
    claims: Optional[TokenClaims] = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    """
    Anonymous authors must supply ``userName`` and ``email``; signed-in
    authors get theirs from the account.
    """
    user_name, email = body.user_name, body.email
    if claims is not None:
        author = load_user(db, claims.user_id)
        user_name, email = author.user_name, author.email

    if not user_name or not email:
        raise unprocessable("Missing required fields", "userName and email are required")

    author_fields = {"user_name": user_name, "email": email, "home_page": body.home_page}
    _check_author_fields(author_fields)
    content = _resolve_body(body.text, body.image)
    _ensure_replied_exists(db, body.replied)

    stmt = insert_statement(
        COMMENT,
        {
            **author_fields,
            "email": email.lower(),
            **content,
            "data": body.data or {},
            "replied": body.replied,
        },
    )
    if stmt is None:
        raise bad_request("Missing required field/s")

    result = execute(db, stmt)
    comment = db.get(Comment, result.lastrowid)
    logger.info("Comment %d was added", comment.id)
    return ok(comment_payload(comment))


# ---------------------------------------------------------------------------
# GET /comments  – paginated list
# ---------------------------------------------------------------------------


@router.get("")
def list_comments(
    page: int = Query(1, ge=1, le=MAX_INT),
    deleted: bool = Query(False, description="true lists soft-deleted comments (admin only)"),
    reverse: bool = Query(False, description="true sorts oldest first"),
    claims: Optional[TokenClaims] = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    if deleted:
        _require_deleted_view(claims)

    result = list_records(
        db, Comment, COMMENT, deleted=deleted, page=page, reverse=reverse, page_size=settings.page_size
    )
    return ok_page(result, [comment_payload(c) for c in result.rows])


# ---------------------------------------------------------------------------
# GET /comments/me  – the caller's own comments
# ---------------------------------------------------------------------------


@router.get("/me")
def list_my_comments(
    page: int = Query(1, ge=1, le=MAX_INT),
    deleted: bool = Query(False),
    reverse: bool = Query(False),
    claims: TokenClaims = Depends(get_token_claims),
    me: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if deleted:
        _require_deleted_view(claims)

    result = list_records(
        db,
        Comment,
        COMMENT,
        deleted=deleted,
        page=page,
        reverse=reverse,
        page_size=settings.page_size,
        field_name="email",
        field_value=me.email.lower(),
    )
    return ok_page(result, [comment_payload(c) for c in result.rows])


# ---------------------------------------------------------------------------
# PUT /comments/{id}  – full replace
# ---------------------------------------------------------------------------


@router.put("/{comment_id}")
def update_comment(
    comment_id: Annotated[int, Path(le=MAX_INT)],
    body: CommentUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    _load_comment(db, comment_id)

    author_fields = {"user_name": body.user_name, "email": body.email, "home_page": body.home_page}
    _check_author_fields(author_fields)
    content = _resolve_body(body.text, body.image)
    _ensure_replied_exists(db, body.replied, self_id=comment_id)

    values = {
        **author_fields,
        "email": body.email.lower(),
        **content,
        "data": body.data,
        "replied": body.replied,
    }
    try:
        stmt = update_statement(COMMENT, comment_id, values)
    except FieldRequiredError as exc:
        raise bad_request("Missed required field/s", str(exc)) from exc

    execute(db, stmt)
    logger.info("Comment %d is updated by admin %d", comment_id, admin.user_id)
    return ok(comment_payload(_load_comment(db, comment_id)))


# ---------------------------------------------------------------------------
# PATCH /comments/{id}  – owner or admin
# ---------------------------------------------------------------------------


@router.patch("/{comment_id}")
def patch_comment(
    comment_id: Annotated[int, Path(le=MAX_INT)],
    body: CommentPatch,
    claims: TokenClaims = Depends(get_token_claims),
    db: Session = Depends(get_db),
):
    """
    Apply only the fields present in the body.  Setting ``text`` drops the
    image and vice versa, so the comment always carries exactly one.
    """
    comment = _load_comment(db, comment_id)
    fields = body.model_dump(exclude_unset=True)

    if not claims.is_admin:
        owner = load_user(db, claims.user_id)
        if owner.email.lower() != comment.email.lower():
            raise forbidden("Access denied", "Only the author or an admin can change this comment")
        if "email" in fields:
            raise forbidden(
                "Access denied for updating the field 'email'",
                "Only admin is allowed to make those changes",
            )

    _check_author_fields(fields)
    if fields.get("email") is not None:
        fields["email"] = fields["email"].lower()

    if "text" in fields or "image" in fields:
        text = fields["text"] if "text" in fields else comment.text
        image = fields["image"] if "image" in fields else comment.image
        if fields.get("text") and "image" not in fields:
            image = None
        if fields.get("image") and "text" not in fields:
            text = None
        fields.update(_resolve_body(text, image))

    if fields.get("replied") is not None:
        _ensure_replied_exists(db, fields["replied"], self_id=comment_id)

    try:
        stmt = patch_statement(COMMENT, comment_id, fields)
    except FieldRequiredError as exc:
        raise bad_request(str(exc)) from exc

    if stmt is None:
        raise bad_request("Nothing to patch")

    execute(db, stmt)
    logger.info("Comment %d is patched by user %d", comment_id, claims.user_id)
    return ok(comment_payload(_load_comment(db, comment_id)))


# ---------------------------------------------------------------------------
# DELETE /comments/{id}  – soft delete
# ---------------------------------------------------------------------------


@router.delete("/{comment_id}")
def delete_comment(
    comment_id: Annotated[int, Path(le=MAX_INT)],
    admin: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if _load_comment(db, comment_id).deleted is not None:
        raise bad_request("Comment is already deleted")

    execute(db, soft_delete_statement(COMMENT, comment_id))
    logger.info("Comment %d was deleted by admin %d", comment_id, admin.user_id)
    return ok(comment_payload(_load_comment(db, comment_id)))
