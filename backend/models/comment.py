# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Comment ORM model and its field descriptor."""

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON

from database import Base
from models.fields import Descriptor, FieldSpec


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_name = Column(String(255), nullable=False)
    # Ownership: a comment belongs to the user whose email matches
    email = Column(String(255), nullable=False, index=True)
    home_page = Column(String(2048), nullable=True)
    # Exactly one of text / image is set
    text = Column(Text, nullable=True)
    image = Column(Text, nullable=True)
    data = Column(JSON, nullable=False, default=dict)
    # Id of the comment this one answers; checked at write time
    replied = Column(Integer, nullable=True, index=True)
    created = Column(DateTime(timezone=True), nullable=False, index=True)
    updated = Column(DateTime(timezone=True), nullable=False)
    deleted = Column(DateTime(timezone=True), nullable=True, index=True)


COMMENT = Descriptor(
    table="comments",
    fields=(
        FieldSpec("id", "key", primary_key=True),
        FieldSpec("user_name", "string"),
        FieldSpec("email", "string"),
        FieldSpec("home_page", "string", nullable=True),
        FieldSpec("text", "text", nullable=True),
        FieldSpec("image", "image", nullable=True),
        FieldSpec("data", "json", default={}),
        FieldSpec("replied", "integer", nullable=True),
        FieldSpec("created", "timestamp", system=True),
        FieldSpec("updated", "timestamp", system=True),
        FieldSpec("deleted", "timestamp", nullable=True, system=True),
    ),
)
