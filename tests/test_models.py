"""Descriptors must stay in step with the ORM tables they describe."""

import pytest

from models.comment import COMMENT, Comment
from models.fields import FieldSpec
from models.user import USER, User


@pytest.mark.parametrize("model, descriptor", [(User, USER), (Comment, COMMENT)])
def test_descriptor_matches_table(model, descriptor):
    table = model.__table__
    assert descriptor.table == table.name
    assert descriptor.names == [c.name for c in table.columns]

    for spec in descriptor:
        column = table.c[spec.name]
        assert column.primary_key == spec.primary_key, spec.name
        if not spec.primary_key:
            assert column.nullable == spec.nullable, spec.name


def test_user_password_is_restricted():
    assert USER.restricted == ["password"]
    assert COMMENT.restricted == []


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        FieldSpec("x", "blob")
