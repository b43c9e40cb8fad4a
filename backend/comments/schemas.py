# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the comment endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from core.responses import CamelModel
from models.fields import MAX_INT


# -- Requests --------------------------------------------------------------
# A comment carries text or an image (base64), never both and never neither.
# For a signed-in author user_name / email are taken from the account.


class CommentCreate(CamelModel):
    user_name: Optional[str] = None
    email: Optional[str] = None
    home_page: Optional[str] = None
    text: Optional[str] = None
    image: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    replied: Optional[int] = Field(None, ge=1, le=MAX_INT)


class CommentUpdate(CamelModel):
    """PUT /comments/{id} – full replace."""

    user_name: str
    email: str
    home_page: Optional[str] = None
    text: Optional[str] = None
    image: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    replied: Optional[int] = Field(None, ge=1, le=MAX_INT)


class CommentPatch(CamelModel):
    """PATCH /comments/{id} – only the keys actually sent are applied."""

    user_name: Optional[str] = None
    email: Optional[str] = None
    home_page: Optional[str] = None
    text: Optional[str] = None
    image: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    replied: Optional[int] = Field(None, ge=1, le=MAX_INT)


# -- Responses -------------------------------------------------------------


class CommentRow(CamelModel):
    id: int
    user_name: str
    email: str
    home_page: Optional[str] = None
    text: Optional[str] = None
    image: Optional[str] = None
    data: dict[str, Any] = {}
    replied: Optional[int] = None
    created: datetime
    updated: datetime
    deleted: Optional[datetime] = None
