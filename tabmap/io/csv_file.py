from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from ..core.inference import infer_schema
from ..core.table import Table
from ..errors import ROW_LEVEL_ERRORS, SinkWriteError, SourceReadError

"""CSV collaborators built on pandas.

Every field is read as a raw string (``dtype=object``, ``na_filter=False``) so that the table
model, not pandas, decides how ``"30000.00"`` or ``"NA"`` is interpreted.

Row shape rules:
- blank lines are skipped
- a row shorter than the first line leaves its trailing cells absent
- a row longer than the first line is truncated to that width (WARN)
- with ``allow_empty_values`` off, trailing empty fields are treated as absent
"""

logger = logging.getLogger(__name__)

__all__ = [
    "CsvRowSource",
    "CsvRowSink",
    "read_csv_inferred",
]


class CsvRowSource:
    def __init__(
        self,
        path: str | Path,
        *,
        has_header: bool = False,
        allow_empty_values: bool = False,
        delimiter: str = ",",
    ) -> None:
        self.path = Path(path)
        self.has_header = has_header
        self.allow_empty_values = allow_empty_values
        self.delimiter = delimiter
        self.case_sensitive_headers = True
        self._header: list[str] | None = None
        self._rows: list[list[str | None]] = []
        self._position = 0
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            raise SourceReadError(f"CSV file not found: {self.path}")
        if not self.path.is_file():
            raise SourceReadError(f"CSV path is not a file: {self.path}")

        width: list[int] = []

        def _truncate(bad_line: list[str]) -> list[str]:
            logger.warning(
                "%s: row with %d fields truncated to %d", self.path.name, len(bad_line), width[0]
            )
            return bad_line[: width[0]]

        options = dict(
            sep=self.delimiter,
            header=None,
            dtype=object,
            na_filter=False,
            skip_blank_lines=True,
            engine="python",
            encoding="utf-8",
        )
        try:
            # Width of the first line decides the row width
            width.append(pd.read_csv(self.path, nrows=1, **options).shape[1])
            df = pd.read_csv(self.path, on_bad_lines=_truncate, **options)
        except pd.errors.EmptyDataError:
            return
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
            raise SourceReadError(f"Failed to read CSV file {self.path}: {e}") from e

        rows = [self._clean(values) for values in df.itertuples(index=False, name=None)]
        if self.has_header and rows:
            self._header = ["" if v is None else v for v in rows.pop(0)]
        self._rows = rows

    def _clean(self, values: Sequence[object]) -> list[str | None]:
        cells: list[str | None] = [v if isinstance(v, str) else None for v in values]
        while cells and (cells[-1] is None or (not self.allow_empty_values and cells[-1] == "")):
            cells.pop()
        return cells

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


class CsvRowSink:
    """Buffer rows and write them in one ``DataFrame.to_csv`` call on close."""

    def __init__(self, path: str | Path, *, with_header_row: bool = False, delimiter: str = ",") -> None:
        self.path = Path(path)
        self.with_header_row = with_header_row
        self.delimiter = delimiter
        self._header: list[str] | None = None
        self._rows: list[list[str]] = []
        self._closed = False

    def write_header(self, names: Sequence[str]) -> None:
        self._header = list(names)

    def write_row(self, values: Sequence[str]) -> None:
        if self._closed:
            raise SinkWriteError(f"CSV sink already closed: {self.path}")
        self._rows.append(["" if v is None else str(v) for v in values])

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        df = pd.DataFrame(self._rows, columns=self._header, dtype=object)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            df.to_csv(
                self.path,
                sep=self.delimiter,
                index=False,
                header=self.with_header_row and self._header is not None,
                lineterminator="\n",
            )
        except OSError as e:
            raise SinkWriteError(f"Failed to write CSV file {self.path}: {e}") from e

    def __enter__(self) -> CsvRowSink:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            # a failed write leaves no partial file behind
            self._closed = True
            self._rows.clear()
            return
        self.close()


def read_csv_inferred(path: str | Path, *, has_header: bool = True, delimiter: str = ",") -> Table:
    """Read a CSV file into a Table whose column types are inferred from the first data row.

    Headerless files get ``Column1..N``. Rows that do not fit the inferred types are logged and
    skipped.
    """
    source = CsvRowSource(path, has_header=has_header, allow_empty_values=True, delimiter=delimiter)
    first = source.next_raw_row()
    table = Table(Path(path).stem)
    if first is None:
        if source.header_names:
            table.set_columns({name: "string" for name in source.header_names})
        return table
    headers = source.header_names or [f"Column{i + 1}" for i in range(len(first))]
    table.set_columns(infer_schema(headers, first))
    row_number = 0
    row: list[str | None] | None = first
    while row is not None:
        row_number += 1
        values = {name: row[i] for i, name in enumerate(headers) if i < len(row) and row[i] is not None}
        try:
            table.add_raw_row(values)
        except ROW_LEVEL_ERRORS as e:
            logger.error("%s row %d skipped: %s", Path(path).name, row_number, e)
        row = source.next_raw_row()
    return table
