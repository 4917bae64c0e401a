from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2 import sql
from psycopg2.extras import execute_values

from ..errors import SinkWriteError

"""Batched INSERT via psycopg2.extras.execute_values.

Identifiers are composed with ``psycopg2.sql`` so table and column names coming from a
mapping file are always quoted. Each call reports its timing through an optional
``metrics_callback`` which the DB sink feeds into ``BatchStatsAccumulator``.
"""

__all__ = [
    "BatchInsertError",
    "BatchMetrics",
    "InsertResult",
    "batch_insert",
]


class BatchInsertError(SinkWriteError):
    pass


@dataclass(frozen=True)
class BatchMetrics:
    """Metrics data for a single batch insert operation."""
    batch_size: int  # Number of rows in this batch
    elapsed_seconds: float  # Time spent on execute_values call
    start_time: float  # Start timestamp (time.time())
    end_time: float  # End timestamp (time.time())


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> InsertResult:
    """Perform a batched INSERT of ``rows`` into ``table``.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table name (quoted as an identifier)
    columns: insert columns, in row value order
    rows: row value sequences
    page_size: execute_values page_size
    metrics_callback: receives one BatchMetrics per call. Not invoked for an empty ``rows``.
    """
    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0)

    statement = sql.SQL("INSERT INTO {} ({}) VALUES %s").format(
        sql.Identifier(table),
        sql.SQL(",").join(sql.Identifier(c) for c in columns),
    )

    start_time = time.time()
    try:
        execute_values(cursor, statement, rows_list, page_size=page_size)
    except Exception as e:
        raise BatchInsertError(f"insert into {table} failed: {e}") from e
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    batch_size=len(rows_list),
                    elapsed_seconds=end_time - start_time,
                    start_time=start_time,
                    end_time=end_time,
                )
            )

    return InsertResult(inserted_rows=len(rows_list))
