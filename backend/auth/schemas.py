# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import model_validator

from core.responses import CamelModel


# -- Requests --------------------------------------------------------------


class RegisterRequest(CamelModel):
    type: str = "user"  # "admin" (admin token required) or "user"
    login: str
    email: str
    password: str
    user_name: str
    image: Optional[str] = None  # base64, jpg / jpeg / png / gif


class LoginRequest(CamelModel):
    # Either identifier works; both are matched case-insensitively
    email: Optional[str] = None
    login: Optional[str] = None
    password: str

    @model_validator(mode="after")
    def _needs_identifier(self):
        if not self.email and not self.login:
            raise ValueError("Either email or login is required")
        return self


# -- Responses -------------------------------------------------------------


class LoginResponse(CamelModel):
    token: str
    token_type: str = "bearer"
    user_id: int
    role: str
    expires_at: datetime
