from __future__ import annotations

import json

import psycopg2

from tabmap.errors import ConversionError, MissingColumnError, SourceReadError
from tabmap.models.error_record import ErrorRecord, error_type_of


def test_create_and_json_line():
    rec = ErrorRecord.create("people", "data/p.csv", 10, "CONVERSION_ERROR", "bad value", column="Years")
    data = json.loads(rec.to_json_line())
    assert data["job"] == "people"
    assert data["source"] == "data/p.csv"
    assert data["row"] == 10
    assert data["column"] == "Years"
    assert data["timestamp"].endswith("Z")
    assert set(data) == {"timestamp", "job", "source", "row", "column", "error_type", "message"}


def test_column_defaults_to_empty():
    assert ErrorRecord.create("j", "s", -1, "X", "m").column == ""


def test_error_type_of():
    assert error_type_of(ConversionError("x")) == "CONVERSION_ERROR"
    assert error_type_of(MissingColumnError("x")) == "MISSING_COLUMN_ERROR"
    assert error_type_of(SourceReadError("x")) == "SOURCE_READ_ERROR"
    assert error_type_of(psycopg2.OperationalError("x")) == "OPERATIONAL_ERROR"
    assert error_type_of(OSError("x")) == "OS_ERROR"


def test_from_exception_uses_exception_column():
    exc = ConversionError("Row 3: cannot convert", column="Years", value="forty")
    rec = ErrorRecord.from_exception("people", "data/p.csv", 3, exc)
    assert rec.column == "Years"
    assert rec.error_type == "CONVERSION_ERROR"
    assert rec.message == "Row 3: cannot convert"
    assert ErrorRecord.from_exception("j", "s", -1, OSError("disk full")).column == ""
