# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the user endpoints."""

from datetime import datetime
from typing import Optional

from core.responses import CamelModel


# -- Requests --------------------------------------------------------------


class UserUpdate(CamelModel):
    """PUT /users/{id} – full replace.  Omitted optional fields are reset."""

    type: str
    login: str
    email: str
    user_name: str
    password: Optional[str] = None  # re-hashed when supplied
    image: Optional[str] = None
    active: Optional[bool] = None


class UserPatch(CamelModel):
    """
    PATCH /users/me – only the keys actually sent are applied (an explicit
    ``null`` clears a nullable column).  ``type``, ``login``, ``active`` and
    ``deleted`` are admin-only.
    """

    type: Optional[str] = None
    login: Optional[str] = None
    email: Optional[str] = None
    user_name: Optional[str] = None
    password: Optional[str] = None
    image: Optional[str] = None
    active: Optional[bool] = None
    deleted: Optional[bool] = None


# -- Responses -------------------------------------------------------------


class UserRow(CamelModel):
    id: int
    type: str
    login: str
    email: str
    # Always null on the wire
    password: Optional[str] = None
    user_name: str
    image: Optional[str] = None
    active: bool
    created: datetime
    updated: datetime
    deleted: Optional[datetime] = None
    last_login: Optional[datetime] = None
