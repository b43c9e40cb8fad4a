# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""User ORM model and its field descriptor."""

from sqlalchemy import Column, Integer, String, Boolean, Enum, DateTime, Text

from database import Base
from models.fields import Descriptor, FieldSpec

USER_TYPES = ("admin", "user")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(Enum(*USER_TYPES, name="user_type"), nullable=False, default="user")
    # Stored lower-case; uniqueness is therefore case-insensitive
    login = Column(String(255), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    # passlib embeds the salt in the hash string
    password = Column(String(255), nullable=False)
    user_name = Column(String(255), nullable=False)
    # base64 PNG data URI
    image = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created = Column(DateTime(timezone=True), nullable=False, index=True)
    updated = Column(DateTime(timezone=True), nullable=False)
    # Soft-delete marker
    deleted = Column(DateTime(timezone=True), nullable=True, index=True)
    last_login = Column(DateTime(timezone=True), nullable=True)


USER = Descriptor(
    table="users",
    fields=(
        FieldSpec("id", "key", primary_key=True),
        FieldSpec("type", "string", default="user"),
        FieldSpec("login", "string", unique=True),
        FieldSpec("email", "string", unique=True),
        FieldSpec("password", "string", restricted=True),
        FieldSpec("user_name", "string"),
        FieldSpec("image", "image", nullable=True),
        FieldSpec("active", "boolean", default=True),
        FieldSpec("created", "timestamp", system=True),
        FieldSpec("updated", "timestamp", system=True),
        FieldSpec("deleted", "timestamp", nullable=True, system=True),
        FieldSpec("last_login", "timestamp", nullable=True, system=True),
    ),
)
