# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Generic, descriptor-driven data access.

The write builders turn a ``Descriptor`` plus a partial ``{field: value}``
map into a ``Statement``: SQL text with positional ``:p1 … :pN`` bind
parameters and the matching value list.  Identifiers only ever come from
the descriptor; user input only ever travels as a bound parameter.

Builders
--------
insert_statement       every non-PK field, resolved with fallbacks
update_statement       full replace of every writable field
patch_statement        only the fields present in the input
soft_delete_statement  stamp ``deleted``
delete_statement       physical removal

Readers
-------
list_records           one page of rows plus the total for the filter
public_payload         row -> response dict with restricted fields nulled
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import BaseModel
from sqlalchemy import bindparam, func, select, text
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.types import TypeEngine

from core.errors import forbidden
from core.logger import logger
from models.fields import CREATED, DELETED, UPDATED, Descriptor, FieldSpec


class FieldRequiredError(ValueError):
    """A non-nullable field without default was missing (or set to null)."""

    def __init__(self, field_name: str):
        super().__init__(f"Field '{field_name}' is required")
        self.field_name = field_name


class NothingToUpdateError(ValueError):
    """The descriptor has no writable fields."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Statement
# ---------------------------------------------------------------------------


@dataclass
class Statement:
    sql: str
    params: list[Any] = field(default_factory=list)
    types: list[Optional[TypeEngine]] = field(default_factory=list)

    def bind(self, value: Any, type_: Optional[TypeEngine] = None) -> str:
        """Append *value* and return its placeholder."""
        self.params.append(value)
        self.types.append(type_)
        return f":p{len(self.params)}"

    def to_clause(self) -> TextClause:
        binds = [
            bindparam(f"p{idx}", value=value, type_=type_)
            for idx, (value, type_) in enumerate(zip(self.params, self.types), start=1)
        ]
        return text(self.sql).bindparams(*binds)


# ---------------------------------------------------------------------------
# Insert
# ---------------------------------------------------------------------------


def _system_default(spec: FieldSpec, now: datetime) -> tuple[bool, Any]:
    if spec.name in (CREATED, UPDATED):
        return True, now
    if spec.system:
        # deleted / last_login start out empty
        return True, None
    if spec.kind == "boolean" and spec.default is not None:
        return True, spec.default
    return False, None


def insert_statement(descriptor: Descriptor, values: dict[str, Any]) -> Optional[Statement]:
    """
    Build an INSERT for every non-PK field of *descriptor*.

    Value resolution per field: explicit value → system default (timestamps,
    boolean flags) → descriptor default → NULL if nullable.  Returns ``None``
    when a required field cannot be resolved.
    """
    now = _now()
    stmt = Statement(sql="")
    columns, placeholders = [], []

    for spec in descriptor:
        if spec.primary_key:
            continue

        if values.get(spec.name) is not None:
            value = values[spec.name]
        else:
            found, value = _system_default(spec, now)
            if not found:
                if spec.default is not None:
                    value = copy.deepcopy(spec.default)
                elif spec.nullable:
                    value = None
                else:
                    logger.info("Insert into %s skipped: field '%s' is required", descriptor.table, spec.name)
                    return None

        columns.append(spec.name)
        placeholders.append(stmt.bind(value, spec.bind_type))

    stmt.sql = (
        f"INSERT INTO {descriptor.table} ({', '.join(columns)}) "
        f"VALUES ({', '.join(placeholders)})"
    )
    return stmt


# ---------------------------------------------------------------------------
# Update / patch
# ---------------------------------------------------------------------------


def _finish_update(descriptor: Descriptor, stmt: Statement, assignments: list[str], record_id: int) -> Statement:
    assignments.append(f"{UPDATED} = {stmt.bind(_now(), descriptor.get(UPDATED).bind_type)}")
    pk = descriptor.primary_key
    stmt.sql = (
        f"UPDATE {descriptor.table} SET {', '.join(assignments)} "
        f"WHERE {pk.name} = {stmt.bind(record_id, pk.bind_type)}"
    )
    return stmt


def update_statement(descriptor: Descriptor, record_id: int, values: dict[str, Any]) -> Statement:
    """
    Full replace: every non-restricted, non-PK, non-system field is written.
    Missing values fall back to the descriptor default, then NULL when
    allowed; otherwise ``FieldRequiredError`` is raised.
    """
    stmt = Statement(sql="")
    assignments = []

    for spec in descriptor:
        if spec.primary_key or spec.restricted or spec.system:
            continue

        if values.get(spec.name) is not None:
            value = values[spec.name]
        elif spec.default is not None:
            value = copy.deepcopy(spec.default)
        elif spec.nullable:
            value = None
        else:
            raise FieldRequiredError(spec.name)

        assignments.append(f"{spec.name} = {stmt.bind(value, spec.bind_type)}")

    if not assignments:
        raise NothingToUpdateError(f"No fields to update in {descriptor.table}")

    return _finish_update(descriptor, stmt, assignments, record_id)


def patch_statement(
    descriptor: Descriptor,
    record_id: int,
    values: dict[str, Any],
    allow_restricted: Iterable[str] = (),
) -> Optional[Statement]:
    """
    Partial update: only keys present in *values* are written (``None`` is an
    explicit NULL).  Unknown keys, the PK, ``created`` / ``deleted`` /
    ``updated`` and restricted fields (unless named in *allow_restricted*) are
    ignored.  Returns ``None`` when nothing is left to write.
    """
    allowed = set(allow_restricted)
    stmt = Statement(sql="")
    assignments = []

    for name, value in values.items():
        spec = descriptor.get(name)
        if spec is None or spec.primary_key or name in (CREATED, DELETED, UPDATED):
            continue
        if spec.restricted and name not in allowed:
            continue
        if value is None and not spec.nullable:
            raise FieldRequiredError(name)

        assignments.append(f"{name} = {stmt.bind(value, spec.bind_type)}")

    if not assignments:
        return None

    return _finish_update(descriptor, stmt, assignments, record_id)


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


def soft_delete_statement(descriptor: Descriptor, record_id: int) -> Statement:
    stmt = Statement(sql="")
    pk = descriptor.primary_key
    stamp = stmt.bind(_now(), descriptor.get(DELETED).bind_type)
    stmt.sql = (
        f"UPDATE {descriptor.table} SET {DELETED} = {stamp} "
        f"WHERE {pk.name} = {stmt.bind(record_id, pk.bind_type)}"
    )
    return stmt


def delete_statement(descriptor: Descriptor, record_id: int) -> Statement:
    stmt = Statement(sql="")
    pk = descriptor.primary_key
    stmt.sql = f"DELETE FROM {descriptor.table} WHERE {pk.name} = {stmt.bind(record_id, pk.bind_type)}"
    return stmt


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def execute(db: Session, statement: Statement, conflict_message: str = "Record conflicts with an existing one") -> CursorResult:
    """
    Run *statement* and commit.  Each statement commits on its own.

    A unique-constraint violation becomes a 403 ``ApiError``; any other
    database error is logged, rolled back and re-raised.
    """
    logger.debug("SQL %s | %d params", statement.sql, len(statement.params))
    try:
        result = db.execute(statement.to_clause())
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Integrity error on %s: %s", statement.sql.split(" (")[0], exc.orig)
        raise forbidden(conflict_message) from exc
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Statement failed: %s", statement.sql)
        raise
    return result


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


@dataclass
class Page:
    rows: list
    count: int
    page: int


def list_records(
    db: Session,
    model,
    descriptor: Descriptor,
    *,
    deleted: bool = False,
    page: int = 1,
    reverse: bool = False,
    page_size: int = 25,
    field_name: Optional[str] = None,
    field_value: Any = None,
) -> Page:
    """
    Return one page of *model* rows.

    * ``deleted``     – False: live rows only; True: soft-deleted rows only.
    * ``reverse``     – True sorts by ``created`` ascending, else descending.
    * ``field_name``  – optional single equality filter; must be a
                        descriptor field.
    """
    table = model.__table__
    conditions = [table.c[DELETED].is_not(None) if deleted else table.c[DELETED].is_(None)]

    if field_name is not None:
        if descriptor.get(field_name) is None:
            raise ValueError(f"Unknown field '{field_name}' for {descriptor.table}")
        conditions.append(table.c[field_name] == field_value)

    # id breaks ties between rows created in the same instant
    pk = table.c[descriptor.primary_key.name]
    order = (table.c[CREATED].asc(), pk.asc()) if reverse else (table.c[CREATED].desc(), pk.desc())
    page = max(page, 1)

    rows = db.scalars(
        select(model)
        .where(*conditions)
        .order_by(*order)
        .limit(page_size)
        .offset((page - 1) * page_size)
    ).all()
    count = db.scalar(select(func.count()).select_from(table).where(*conditions)) or 0

    return Page(rows=list(rows), count=int(count), page=page)


# ---------------------------------------------------------------------------
# Response shaping
# ---------------------------------------------------------------------------


def public_payload(row, schema: type[BaseModel], descriptor: Descriptor) -> Optional[dict]:
    """
    Serialise an ORM *row* through *schema* (camelCase JSON) and force every
    restricted field to ``None`` regardless of what the store returned.
    """
    if row is None:
        return None
    data = schema.model_validate(row).model_dump(mode="json", by_alias=True)
    for name in descriptor.restricted:
        alias = schema.model_fields[name].alias if name in schema.model_fields else None
        data[alias or name] = None
    return data
