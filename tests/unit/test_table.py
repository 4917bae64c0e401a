from __future__ import annotations

import pytest

from tabmap.core.column import create_column
from tabmap.core.table import Table
from tabmap.errors import ConfigurationError, ConversionError, MissingColumnError, SchemaError


@pytest.fixture()
def table() -> Table:
    t = Table("people")
    t.set_columns({"colA": "string", "colB": "int", "colC": "double"})
    return t


def test_set_columns_defines_ordered_schema(table: Table):
    assert table.column_names == ["colA", "colB", "colC"]
    assert table.column_count == 3
    assert table.get_column_at(1).type_tag == "int"
    assert table.column_name(2) == "colC"
    with pytest.raises(IndexError):
        table.get_column_at(3)


def test_default_fill_on_raw_row(table: Table):
    table.add_raw_row({"colA": "x"})
    assert table.row_count == 1
    assert table.get_value_at(0, "colA") == "x"
    assert table.get_value_at(0, "colB") == "0"
    assert table.get_value_at(0, "colC") == "0.0"


def test_missing_column_without_default_policy():
    t = Table(create_default_value=False)
    t.set_columns({"a": "string", "b": "int"})
    with pytest.raises(MissingColumnError) as exc:
        t.add_raw_row({"a": "x"})
    assert exc.value.column == "b"
    assert t.row_count == 0


def test_set_columns_clears_rows_and_round_trip_store(table: Table):
    table.add_raw_row({"colA": "x", "colB": "1", "colC": "30000.00"})
    assert table.original_string(0, "colC") == "30000.00"
    table.set_columns({"colA": "string", "colC": "double"})
    assert table.row_count == 0
    assert table.original_string(0, "colC") is None


@pytest.mark.parametrize(
    "defs",
    [
        {"": "string"},
        {"  ": "int"},
        {"a": ""},
        {"a": None},
    ],
)
def test_set_columns_rejects_blank_names_or_types(defs):
    with pytest.raises(ConfigurationError):
        Table().set_columns(defs)


def test_set_columns_rejects_unsupported_type():
    with pytest.raises(SchemaError):
        Table().set_columns({"a": "money"})


def test_set_columns_failure_keeps_previous_schema(table: Table):
    table.add_raw_row({"colA": "x"})
    with pytest.raises(SchemaError):
        table.set_columns({"z": "money"})
    assert table.column_names == ["colA", "colB", "colC"]
    assert table.row_count == 1


def test_round_trip_of_fractional_double(table: Table):
    table.add_raw_row({"colA": "x", "colC": "30000.00"})
    assert table.get_value(0, "colC") == 30000.0
    assert table.get_value_at(0, "colC") == "30000.00"


def test_double_without_decimal_point_is_not_kept(table: Table):
    table.add_raw_row({"colC": "1e3"})
    assert table.original_string(0, "colC") is None
    assert table.get_value_at(0, "colC") == "1000.0"


def test_conversion_failure_leaves_table_unchanged(table: Table):
    with pytest.raises(ConversionError):
        table.add_raw_row({"colA": "x", "colB": "abc", "colC": "1.50"})
    assert table.row_count == 0
    assert table.original_string(0, "colC") is None


def test_unknown_column_is_schema_error(table: Table):
    with pytest.raises(SchemaError):
        table.add_raw_row({"nope": "1"})
    with pytest.raises(SchemaError):
        table.add_typed_row({"nope": 1})
    assert table.row_count == 0


def test_typed_rows_are_validated(table: Table):
    table.add_typed_row({"colA": "a", "colB": 2, "colC": 2.5})
    assert table.get_value(0, "colB") == 2
    with pytest.raises(SchemaError):
        table.add_typed_row({"colB": "2"})
    assert table.row_count == 1


def test_set_value_at_updates_round_trip_entry(table: Table):
    table.add_raw_row({"colC": "1.10"})
    table.set_value_at(0, "colC", "2.500")
    assert table.get_value_at(0, "colC") == "2.500"
    table.set_value_at(0, "colC", "3")
    assert table.original_string(0, "colC") is None
    assert table.get_value_at(0, "colC") == "3.0"


def test_typed_set_value_discards_round_trip_entry(table: Table):
    table.add_raw_row({"colC": "1.10"})
    table.set_value(0, "colC", 4.25)
    assert table.get_value_at(0, "colC") == "4.25"


def test_row_index_out_of_range(table: Table):
    with pytest.raises(IndexError):
        table.get_value_at(0, "colA")


def test_rows_reflect_columns_at_insertion_time(table: Table):
    table.add_raw_row({"colA": "x"})
    table.add_column(create_column("late", "string"))
    assert table.get_value_at(0, "late") is None
    table.add_raw_row({"colA": "y"})
    assert table.get_value_at(1, "late") == ""


def test_add_column_rejects_duplicate(table: Table):
    with pytest.raises(SchemaError):
        table.add_column(create_column("colA", "string"))


def test_rows_is_a_snapshot(table: Table):
    snapshot = table.rows
    table.add_raw_row({"colA": "x"})
    assert len(snapshot) == 0
    assert len(table.rows) == 1


def test_to_records(table: Table):
    table.add_raw_row({"colA": "x", "colB": "5", "colC": "7.50"})
    assert table.to_records() == [{"colA": "x", "colB": "5", "colC": "7.50"}]


def test_round_trip_entry_is_trimmed(table: Table):
    table.add_raw_row({"colA": "x", "colB": "1", "colC": " 30000.00 "})
    assert table.get_value_at(0, "colC") == "30000.00"
    table.set_value_at(0, "colC", "  1.50")
    assert table.get_value_at(0, "colC") == "1.50"


def test_typed_row_with_originals_keeps_double_text(table: Table):
    table.add_typed_row({"colA": "x", "colB": 1, "colC": 30000.0}, originals={"colC": "30000.00"})
    assert table.get_value_at(0, "colC") == "30000.00"
    assert table.get_value(0, "colC") == 30000.0
    table.add_typed_row({"colA": "y", "colB": 2, "colC": 2.0})
    assert table.original_string(1, "colC") is None


def test_row_cells_expose_typed_values(table: Table):
    row = table.add_raw_row({"colA": "x", "colB": "7", "colC": "1.5"})
    assert row.column_names == ["colA", "colB", "colC"]
    assert row.get_cell("colB").value == 7
    assert row.get_cell("missing") is None
    assert row.to_dict() == {"colA": "x", "colB": 7, "colC": 1.5}
