from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2

from ..errors import ConfigurationError, DatabaseConnectionError

"""psycopg2 connection handling.

Credential resolution (first hit wins):
1. ``username`` / ``password`` mapping options
2. ``PGUSER`` / ``PGPASSWORD`` environment variables (``.env`` is loaded by the CLI first)

A source location of the form ``env:NAME`` takes the whole DSN from environment variable NAME.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "resolve_dsn",
    "db_connection",
]


def resolve_dsn(location: str) -> str:
    if location.startswith("env:"):
        name = location[4:]
        dsn = os.getenv(name)
        if not dsn:
            raise ConfigurationError(f"environment variable {name} is not set")
        return dsn
    return location


@contextmanager
def db_connection(
    dsn: str, username: str | None = None, password: str | None = None
) -> Iterator[Any]:
    """Yield a cursor; commit on success, roll back on failure, always close."""
    params: dict[str, str] = {}
    user = username or os.getenv("PGUSER")
    secret = password or os.getenv("PGPASSWORD")
    if user:
        params["user"] = user
    if secret:
        params["password"] = secret
    try:
        conn = psycopg2.connect(resolve_dsn(dsn), **params)
    except psycopg2.Error as e:
        raise DatabaseConnectionError(f"database connection failed: {e}") from e
    conn.autocommit = False
    cur = conn.cursor()
    try:
        yield cur
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        try:
            cur.close()
        finally:
            conn.close()
