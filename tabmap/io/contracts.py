from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Protocol, runtime_checkable

"""Row source / row sink contracts.

Readers pull raw rows (ordered lists of ``str | None``) from a RowSource; writers push string
rows into a RowSink. Concrete collaborators live in ``tabmap.io.csv_file``,
``tabmap.io.json_file``, ``tabmap.io.xml_file``, ``tabmap.io.memory`` and ``tabmap.db``.
"""

__all__ = [
    "RowSource",
    "RowSink",
    "iter_rows",
]


@runtime_checkable
class RowSource(Protocol):
    has_header: bool
    case_sensitive_headers: bool

    @property
    def header_names(self) -> list[str] | None: ...

    def next_raw_row(self) -> list[str | None] | None:
        """Next raw row, or None at end of input."""
        ...


@runtime_checkable
class RowSink(Protocol):
    def write_header(self, names: Sequence[str]) -> None: ...

    def write_row(self, values: Sequence[str]) -> None: ...

    def close(self) -> None: ...


def iter_rows(source: RowSource) -> Iterator[list[str | None]]:
    """Drain a source until EOF."""
    while True:
        row = source.next_raw_row()
        if row is None:
            return
        yield row
