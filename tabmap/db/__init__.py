"""PostgreSQL collaborators (psycopg2): connection, row source, row sink and batch insert.

The ``batch_insert`` function stays under :mod:`tabmap.db.batch_insert`; it is
not re-exported here so the submodule keeps its name on the package.
"""

from .batch_insert import BatchInsertError, BatchMetrics, InsertResult
from .connection import db_connection, resolve_dsn
from .sink import SQL_TYPES, DbRowSink
from .source import DbRowSource

__all__ = [
    "BatchInsertError",
    "BatchMetrics",
    "InsertResult",
    "db_connection",
    "resolve_dsn",
    "DbRowSource",
    "DbRowSink",
    "SQL_TYPES",
]
