from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from tabmap.errors import SinkWriteError, SourceReadError
from tabmap.io.contracts import RowSink, RowSource
from tabmap.io.json_file import JsonRowSink, JsonRowSource


def _write(tmp_path: Path, text: str, name: str = "in.json") -> Path:
    f = tmp_path / name
    f.write_text(text, encoding="utf-8")
    return f


def test_reads_first_object_keys_as_header(tmp_path: Path):
    f = _write(
        tmp_path,
        '[{"Name": "Alice", "Salary": 30000.00, "Active": true, "Id": 7},'
        ' {"Salary": 1250.5, "Name": "Bob", "Active": false, "Id": 8}]',
    )
    src = JsonRowSource(f)
    assert isinstance(src, RowSource)
    assert src.header_names == ["Name", "Salary", "Active", "Id"]
    assert src.next_raw_row() == ["Alice", "30000.00", "true", "7"]
    assert src.next_raw_row() == ["Bob", "1250.5", "false", "8"]
    assert src.next_raw_row() is None


def test_missing_keys_and_nulls_are_absent_and_extra_keys_ignored(tmp_path: Path):
    f = _write(tmp_path, '[{"a": "1", "b": "2"}, {"b": null, "c": "x"}]')
    assert list(JsonRowSource(f)) == [["1", "2"], [None, None]]


def test_nested_values_are_kept_as_json_text(tmp_path: Path):
    f = _write(tmp_path, '[{"tags": ["x", "y"], "meta": {"k": 1}}]')
    assert JsonRowSource(f).next_raw_row() == ['["x","y"]', '{"k":1}']


def test_root_element_selects_nested_array(tmp_path: Path):
    f = _write(tmp_path, '{"people": [{"Name": "Alice"}]}')
    assert list(JsonRowSource(f, root_element="people")) == [["Alice"]]
    with pytest.raises(SourceReadError, match="Root element 'staff'"):
        JsonRowSource(f, root_element="staff")


def test_non_object_elements_are_skipped(tmp_path: Path, caplog):
    f = _write(tmp_path, '[1, {"a": "x"}]')
    with caplog.at_level(logging.WARNING):
        rows = list(JsonRowSource(f))
    assert rows == [["x"]]
    assert "not an object" in caplog.text


@pytest.mark.parametrize("text", ['{"a": 1}', "not json", '"scalar"'])
def test_invalid_documents_raise(tmp_path: Path, text: str):
    with pytest.raises(SourceReadError):
        JsonRowSource(_write(tmp_path, text))


def test_missing_file(tmp_path: Path):
    with pytest.raises(SourceReadError):
        JsonRowSource(tmp_path / "nope.json")


def test_empty_array_has_no_rows(tmp_path: Path):
    src = JsonRowSource(_write(tmp_path, "[]"))
    assert src.header_names == []
    assert src.next_raw_row() is None


def test_sink_writes_array_on_close(tmp_path: Path):
    out = tmp_path / "nested" / "out.json"
    sink = JsonRowSink(out)
    assert isinstance(sink, RowSink)
    sink.write_header(["name", "salary"])
    sink.write_row(["Alice", "30000.00"])
    sink.write_row(["Bob", ""])
    assert not out.exists()
    sink.close()
    assert json.loads(out.read_text(encoding="utf-8")) == [
        {"name": "Alice", "salary": "30000.00"},
        {"name": "Bob", "salary": None},
    ]
    with pytest.raises(SinkWriteError):
        sink.write_row(["late", "1"])


def test_sink_pretty_print_and_discard_on_error(tmp_path: Path):
    out = tmp_path / "out.json"
    with JsonRowSink(out, pretty_print=True) as sink:
        sink.write_header(["a"])
        sink.write_row(["1"])
    assert out.read_text(encoding="utf-8").startswith('[\n  {\n    "a": "1"')

    failed = tmp_path / "failed.json"
    with pytest.raises(RuntimeError):
        with JsonRowSink(failed) as sink:
            sink.write_header(["a"])
            sink.write_row(["1"])
            raise RuntimeError("boom")
    assert not failed.exists()
