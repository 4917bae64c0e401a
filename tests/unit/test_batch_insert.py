from __future__ import annotations

import pytest

from tabmap.db.batch_insert import BatchInsertError, BatchMetrics, InsertResult, batch_insert


class DummyCursor:
    def __init__(self) -> None:
        self.queries: list = []
        self.rows: list = []
        self.page_sizes: list[int] = []


# execute_values is patched inside the module so no live connection is needed
@pytest.fixture(autouse=True)
def patch_execute_values(monkeypatch):
    import tabmap.db.batch_insert as bi

    def fake_execute_values(cursor, statement, rows, page_size=1000, template=None):
        cursor.queries.append(statement)
        cursor.rows.extend(rows)
        cursor.page_sizes.append(page_size)

    monkeypatch.setattr(bi, "execute_values", fake_execute_values)
    return fake_execute_values


def test_batch_insert_basic():
    cur = DummyCursor()
    res = batch_insert(cur, table="customers", columns=["id", "name"], rows=[["1", "Alice"], ["2", "Bob"]])
    assert isinstance(res, InsertResult)
    assert res.inserted_rows == 2
    assert cur.rows == [["1", "Alice"], ["2", "Bob"]]
    statement = repr(cur.queries[0])
    assert "Identifier('customers')" in statement
    assert "Identifier('name')" in statement


def test_batch_insert_passes_page_size():
    cur = DummyCursor()
    batch_insert(cur, table="t", columns=["c"], rows=[["1"]], page_size=50)
    assert cur.page_sizes == [50]


def test_batch_insert_empty_rows_skips_driver_and_callback():
    cur = DummyCursor()
    captured: list[BatchMetrics] = []
    res = batch_insert(cur, table="t", columns=["c"], rows=[], metrics_callback=captured.append)
    assert res.inserted_rows == 0
    assert cur.queries == []
    assert captured == []


def test_batch_insert_with_metrics_callback():
    cur = DummyCursor()
    captured: list[BatchMetrics] = []
    batch_insert(cur, table="t", columns=["c"], rows=[["1"], ["2"], ["3"]], metrics_callback=captured.append)
    assert len(captured) == 1
    metrics = captured[0]
    assert metrics.batch_size == 3
    assert metrics.elapsed_seconds >= 0
    assert metrics.end_time >= metrics.start_time


def test_batch_insert_driver_error_is_wrapped_and_still_reported(monkeypatch):
    import tabmap.db.batch_insert as bi

    def boom(*args, **kwargs):
        raise RuntimeError("duplicate key")

    monkeypatch.setattr(bi, "execute_values", boom)
    captured: list[BatchMetrics] = []
    with pytest.raises(BatchInsertError, match="duplicate key"):
        batch_insert(DummyCursor(), table="t", columns=["c"], rows=[["1"]], metrics_callback=captured.append)
    assert len(captured) == 1


def test_db_package_keeps_batch_insert_submodule_reachable():
    import inspect

    import tabmap.db
    import tabmap.db.batch_insert as bi

    assert inspect.ismodule(bi)
    assert inspect.ismodule(tabmap.db.batch_insert)
    assert hasattr(bi, "execute_values")
    assert "batch_insert" not in tabmap.db.__all__
