from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import psycopg2
from psycopg2 import sql

from ..core.types import SemanticType
from ..errors import ConfigurationError, SinkWriteError
from ..models.processing_result import BatchStatsAccumulator
from .batch_insert import BatchMetrics, batch_insert

"""Row sink writing into a PostgreSQL table.

Rows arrive as strings from the mapping layer and are buffered until ``page_size`` rows are
pending, then inserted with ``batch_insert``. Empty strings are sent as NULL; PostgreSQL
casts the remaining literals to the column types.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "SQL_TYPES",
    "DbRowSink",
]

SQL_TYPES: dict[SemanticType, str] = {
    SemanticType.STRING: "VARCHAR(255)",
    SemanticType.INT: "INTEGER",
    SemanticType.DOUBLE: "DOUBLE PRECISION",
    SemanticType.BOOLEAN: "BOOLEAN",
    SemanticType.DATE: "DATE",
    SemanticType.TIME: "TIME",
    SemanticType.DATETIME: "TIMESTAMP",
}


class DbRowSink:
    def __init__(
        self,
        cursor: Any,
        table_name: str | None,
        column_types: Mapping[str, str | SemanticType] | None = None,
        *,
        create_table: bool = False,
        page_size: int = 1000,
        stats: BatchStatsAccumulator | None = None,
    ) -> None:
        if not table_name or not table_name.strip():
            raise ConfigurationError("Table name must be provided in options (tableName)")
        if page_size < 1:
            raise ConfigurationError(f"pageSize must be positive: {page_size}")
        self._cursor = cursor
        self.table_name = table_name
        self.column_types = {k: SemanticType.from_tag(v) for k, v in (column_types or {}).items()}
        self.create_table = create_table
        self.page_size = page_size
        self.stats = stats if stats is not None else BatchStatsAccumulator()
        self.rows_written = 0
        self._columns: list[str] = []
        self._pending: list[list[str | None]] = []

    def create_table_statement(self, names: Sequence[str]) -> sql.Composed:
        columns = [
            sql.SQL("{} {}").format(
                sql.Identifier(name),
                sql.SQL(SQL_TYPES[self.column_types.get(name, SemanticType.STRING)]),
            )
            for name in names
        ]
        return sql.SQL("CREATE TABLE IF NOT EXISTS {} ({})").format(
            sql.Identifier(self.table_name), sql.SQL(", ").join(columns)
        )

    def write_header(self, names: Sequence[str]) -> None:
        self._columns = list(names)
        if self.create_table:
            try:
                self._cursor.execute(self.create_table_statement(self._columns))
            except psycopg2.Error as e:
                raise SinkWriteError(f"create table {self.table_name} failed: {e}") from e
            logger.info("table ready: %s", self.table_name)

    def write_row(self, values: Sequence[str]) -> None:
        if not self._columns:
            raise SinkWriteError("write_header must be called before write_row")
        self._pending.append([None if v == "" else v for v in values])
        if len(self._pending) >= self.page_size:
            self.flush()

    def _record(self, metrics: BatchMetrics) -> None:
        self.stats.add_batch_time(metrics.elapsed_seconds)

    def flush(self) -> None:
        if not self._pending:
            return
        rows, self._pending = self._pending, []
        result = batch_insert(
            self._cursor,
            self.table_name,
            self._columns,
            rows,
            page_size=self.page_size,
            metrics_callback=self._record,
        )
        self.rows_written += result.inserted_rows

    def close(self) -> None:
        self.flush()
