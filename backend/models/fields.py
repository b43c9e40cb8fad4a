# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Field descriptors.

Each entity module declares an explicit, ordered tuple of ``FieldSpec`` next
to its ORM class.  The generic query builder (``core.query_builder``) reads
only these descriptors – never the ORM class – to decide which columns an
INSERT / UPDATE / PATCH touches and how each value is bound.

Kinds
-----
key        generated integer primary key
string     short string (VARCHAR)
text       unbounded text
integer    plain integer
boolean    boolean flag
json       free-form JSON document
timestamp  timezone-aware datetime
image      base64 data URI (stored as text)
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.types import TypeEngine

# Columns managed by the server.  ``created`` and ``deleted`` are never
# written by update/patch; ``updated`` is stamped on every write.
CREATED = "created"
UPDATED = "updated"
DELETED = "deleted"

# Largest value a signed 32-bit INTEGER column holds (MySQL INT)
MAX_INT = 2**31 - 1

_BIND_TYPES: dict[str, TypeEngine] = {
    "key": Integer(),
    "string": String(255),
    "text": Text(),
    "integer": Integer(),
    "boolean": Boolean(),
    "json": JSON(),
    "timestamp": DateTime(timezone=True),
    "image": Text(),
}


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: str
    nullable: bool = False
    unique: bool = False
    primary_key: bool = False
    default: Any = None
    # Never returned to clients and never written by update/patch
    restricted: bool = False
    # Server-managed (timestamps); excluded from full-replace updates
    system: bool = False

    def __post_init__(self):
        if self.kind not in _BIND_TYPES:
            raise ValueError(f"Unknown field kind '{self.kind}' for field '{self.name}'")

    @property
    def bind_type(self) -> TypeEngine:
        return _BIND_TYPES[self.kind]


@dataclass(frozen=True)
class Descriptor:
    table: str
    fields: tuple[FieldSpec, ...] = field(default_factory=tuple)

    def __iter__(self):
        return iter(self.fields)

    def get(self, name: str) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    @property
    def names(self) -> list[str]:
        return [spec.name for spec in self.fields]

    @property
    def primary_key(self) -> FieldSpec:
        return next(spec for spec in self.fields if spec.primary_key)

    @property
    def restricted(self) -> list[str]:
        return [spec.name for spec in self.fields if spec.restricted]
