from __future__ import annotations

import pytest

from tabmap.core.table import Table
from tabmap.errors import ConversionError
from tabmap.mapping.model import ColumnMapping, MappingConfiguration
from tabmap.mapping.resolution import (
    build_header_index,
    output_header,
    resolve_output_row,
    resolve_row,
)


def _config(*mappings: ColumnMapping) -> MappingConfiguration:
    return MappingConfiguration(source_location="mem", column_mappings=mappings)


PEOPLE = _config(
    ColumnMapping.by_name("Name", "FullName", "string"),
    ColumnMapping.by_name("Age", "Years", "int"),
    ColumnMapping.by_name("Occupation", "Job", "string"),
)


def test_build_header_index_first_occurrence_wins():
    index = build_header_index(["a", "b", "a"])
    assert index == {"a": 0, "b": 1}
    assert build_header_index(None) == {}
    assert build_header_index(["ID", "Name"], case_sensitive=False) == {"id": 0, "name": 1}


def test_alice_scenario():
    headers = build_header_index(["Name", "Age", "Occupation"])
    resolved = resolve_row(PEOPLE, ["Alice", "30", "Engineer"], headers)
    assert resolved.values == {"FullName": "Alice", "Years": 30, "Job": "Engineer"}
    assert resolved.raw_values == {"FullName": "Alice", "Years": "30", "Job": "Engineer"}
    assert resolved.warnings == ()


def test_missing_header_uses_default():
    cfg = _config(
        ColumnMapping.by_name("Name", "FullName", "string"),
        ColumnMapping.by_name("Occupation", "Job", "string", "Unknown"),
    )
    resolved = resolve_row(cfg, ["Alice"], build_header_index(["Name"]))
    assert resolved.values["Job"] == "Unknown"
    assert len(resolved.warnings) == 1
    assert "Occupation" in resolved.warnings[0]
    assert "Unknown" in resolved.warnings[0]


def test_empty_value_uses_default():
    cfg = _config(ColumnMapping.by_index(0, "Age", "int", "18"))
    assert resolve_row(cfg, [""]).values == {"Age": 18}
    assert resolve_row(cfg, [None]).values == {"Age": 18}


def test_index_out_of_range_resolves_to_default():
    cfg = _config(ColumnMapping.by_index(5, "Extra", "string", "n/a"))
    resolved = resolve_row(cfg, ["a", "b", "c"])
    assert resolved.values == {"Extra": "n/a"}
    assert "index 5" in resolved.warnings[0]


def test_index_out_of_range_without_default_is_omitted():
    cfg = _config(ColumnMapping.by_index(5, "Extra", "string"))
    resolved = resolve_row(cfg, ["a", "b", "c"])
    assert resolved.values == {}
    assert resolved.raw_values == {}


def test_name_lookup_without_header_is_absent():
    cfg = _config(ColumnMapping.by_name("Name", "FullName", "string", "anon"))
    resolved = resolve_row(cfg, ["Alice"], None)
    assert resolved.values == {"FullName": "anon"}


def test_case_insensitive_lookup():
    cfg = _config(ColumnMapping.by_name("full_name", "FullName", "string"))
    headers = build_header_index(["ID", "FULL_NAME"], case_sensitive=False)
    resolved = resolve_row(cfg, ["1", "Ann"], headers, case_sensitive=False)
    assert resolved.values == {"FullName": "Ann"}


def test_exact_match_is_case_sensitive_by_default():
    cfg = _config(ColumnMapping.by_name("name", "FullName", "string"))
    resolved = resolve_row(cfg, ["Ann"], build_header_index(["Name"]))
    assert resolved.values == {}


def test_conversion_error_names_mapping_and_row():
    headers = build_header_index(["Name", "Age", "Occupation"])
    with pytest.raises(ConversionError) as exc:
        resolve_row(PEOPLE, ["Bob", "forty", "Cook"], headers, row_number=7)
    err = exc.value
    assert err.column == "Years"
    assert err.value == "forty"
    assert "Row 7" in str(err)
    assert "name 'Age'" in str(err)


def test_bad_default_is_conversion_error():
    cfg = _config(ColumnMapping.by_index(0, "Age", "int", "old"))
    with pytest.raises(ConversionError):
        resolve_row(cfg, [""])


def _filled_table() -> Table:
    t = Table()
    t.set_columns({"FullName": "string", "Years": "int", "Salary": "double"})
    t.add_raw_row({"FullName": "Alice", "Years": "30", "Salary": "30000.00"})
    t.add_raw_row({"FullName": "", "Years": "41"})
    return t


def test_reverse_direction_by_name_and_index():
    cfg = _config(
        ColumnMapping.by_name("FullName", "name", "string", "anon"),
        ColumnMapping.by_index(2, "salary", "double"),
        ColumnMapping.by_name("Years", "age", "int"),
    )
    table = _filled_table()
    assert output_header(cfg) == ["name", "salary", "age"]
    assert resolve_output_row(cfg, table, 0).values == ["Alice", "30000.00", "30"]
    assert resolve_output_row(cfg, table, 1).values == ["anon", "0.0", "41"]


def test_reverse_missing_table_column_uses_default_or_empty():
    cfg = _config(
        ColumnMapping.by_name("Occupation", "job", "string", "Unknown"),
        ColumnMapping.by_index(9, "extra", "string"),
    )
    emitted = resolve_output_row(cfg, _filled_table(), 0)
    assert emitted.values == ["Unknown", ""]
    assert len(emitted.warnings) == 2


def test_reverse_value_must_fit_target_type():
    cfg = _config(ColumnMapping.by_name("FullName", "age", "int"))
    with pytest.raises(ConversionError) as exc:
        resolve_output_row(cfg, _filled_table(), 0)
    assert "Row 1" in str(exc.value)
