from __future__ import annotations

import logging
from typing import Any

import psycopg2
from psycopg2 import sql

from ..core.types import stringify
from ..errors import ConfigurationError, SourceReadError

"""Row source over a psycopg2 result set.

Either ``query`` or ``table_name`` must be given; ``query`` wins when both are. Result column
names become the header and are matched case-insensitively. Driver values are rendered with
``stringify`` so the table model re-parses them like any other raw text.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "DbRowSource",
]


class DbRowSource:
    has_header = True
    case_sensitive_headers = False

    def __init__(self, cursor: Any, *, table_name: str | None = None, query: str | None = None) -> None:
        if not query and not table_name:
            raise ConfigurationError("Either 'query' or 'tableName' option must be provided")
        self._cursor = cursor
        if query:
            statement: Any = query
        else:
            statement = sql.SQL("SELECT * FROM {}").format(sql.Identifier(table_name))
        logger.debug("executing source query for %s", table_name or "query")
        try:
            cursor.execute(statement)
        except psycopg2.Error as e:
            raise SourceReadError(f"database read failed: {e}") from e
        self._header = [d[0] for d in (cursor.description or ())]

    @property
    def header_names(self) -> list[str] | None:
        return list(self._header)

    def next_raw_row(self) -> list[str | None] | None:
        try:
            record = self._cursor.fetchone()
        except psycopg2.Error as e:
            raise SourceReadError(f"database read failed: {e}") from e
        if record is None:
            return None
        return [stringify(v) for v in record]

    def __iter__(self):
        while (row := self.next_raw_row()) is not None:
            yield row
