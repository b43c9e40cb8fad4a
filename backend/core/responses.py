# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Success envelope and the camelCase base model shared by all schemas."""

from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from core.query_builder import Page


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire; both accepted on input."""

    model_config = {
        "from_attributes": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


def ok(payload: Any, **extra: Any) -> dict:
    body = {"status": True, "payload": payload, "error": None}
    body.update(extra)
    return body


def ok_page(page: Page, payload: list) -> dict:
    return ok(payload, count=page.count, page=page.page)
