from __future__ import annotations

from collections.abc import Iterable, Sequence

"""In-memory row collaborators, for embedding tabmap in other code and for tests."""

__all__ = [
    "ListRowSource",
    "ListRowSink",
]


class ListRowSource:
    def __init__(
        self,
        rows: Iterable[Sequence[str | None]],
        header: Sequence[str] | None = None,
        *,
        case_sensitive_headers: bool = True,
    ) -> None:
        self._rows = [list(r) for r in rows]
        self._header = list(header) if header is not None else None
        self.has_header = header is not None
        self.case_sensitive_headers = case_sensitive_headers
        self._position = 0

    @property
    def header_names(self) -> list[str] | None:
        return list(self._header) if self._header is not None else None

    def next_raw_row(self) -> list[str | None] | None:
        if self._position >= len(self._rows):
            return None
        row = self._rows[self._position]
        self._position += 1
        return list(row)

    def __iter__(self):
        while (row := self.next_raw_row()) is not None:
            yield row


class ListRowSink:
    def __init__(self) -> None:
        self.header: list[str] | None = None
        self.rows: list[list[str]] = []
        self.closed = False

    def write_header(self, names: Sequence[str]) -> None:
        self.header = list(names)

    def write_row(self, values: Sequence[str]) -> None:
        self.rows.append(list(values))

    def close(self) -> None:
        self.closed = True

    def as_records(self) -> list[dict[str, str]]:
        """Rows as dicts keyed by the written header."""
        if self.header is None:
            return []
        return [dict(zip(self.header, row, strict=False)) for row in self.rows]
