from __future__ import annotations

from datetime import date

import pytest

from tabmap.core.column import Column, create_column
from tabmap.core.types import SemanticType
from tabmap.errors import ConversionError, SchemaError


def test_create_column_uses_type_defaults():
    assert create_column("a", "string").create_default_value() == ""
    assert create_column("b", "int").create_default_value() == 0
    assert create_column("c", "double").create_default_value() == 0.0
    assert create_column("d", "boolean").create_default_value() is False
    assert isinstance(create_column("e", "date").create_default_value(), date)


def test_create_column_with_explicit_default():
    col = create_column("n", "INT", 7)
    assert col.semantic_type is SemanticType.INT
    assert col.type_tag == "int"
    assert col.create_default_value() == 7


def test_column_rejects_blank_name_and_bad_default():
    with pytest.raises(SchemaError):
        create_column(" ", "string")
    with pytest.raises(SchemaError):
        Column("n", SemanticType.INT, "seven")


def test_column_is_immutable():
    col = create_column("n", "int")
    with pytest.raises(AttributeError):
        col.name = "m"  # type: ignore[misc]


def test_convert_from_and_to_string():
    col = create_column("ok", "boolean")
    assert col.convert_from_string("True") is True
    assert col.convert_to_string(False) == "false"
    with pytest.raises(ConversionError) as exc:
        col.convert_from_string("maybe")
    assert exc.value.column == "ok"


def test_create_cell_validates():
    col = create_column("n", "int")
    assert col.create_cell(3).value == 3
    assert col.create_cell(None).value is None
    with pytest.raises(SchemaError):
        col.create_cell("3")
    with pytest.raises(SchemaError):
        col.create_cell(True)
