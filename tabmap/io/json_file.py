from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ..core.types import stringify
from ..errors import SinkWriteError, SourceReadError

"""JSON record collaborators: a file holding an array of flat objects.

The key order of the first object is the header. Later objects are matched by key; a key the
first object lacks is ignored, a missing key is an absent cell. Numbers keep their literal
text (``30000.00`` stays ``"30000.00"``), ``null`` is absent and nested values are kept as
compact JSON text.

``rootElement`` names a top-level key holding the array when the file root is an object.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "JsonRowSource",
    "JsonRowSink",
]


def _text(value: Any) -> str | None:
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return stringify(value)


class JsonRowSource:
    def __init__(self, path: str | Path, *, root_element: str | None = None) -> None:
        self.path = Path(path)
        self.root_element = root_element
        self.has_header = True
        self.case_sensitive_headers = True
        self._header: list[str] = []
        self._rows: list[list[str | None]] = []
        self._position = 0
        self._load()

    def _load(self) -> None:
        if not self.path.is_file():
            raise SourceReadError(f"JSON file not found: {self.path}")
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                document = json.load(fh, parse_float=str, parse_constant=str)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SourceReadError(f"Failed to read JSON file {self.path}: {e}") from e

        if self.root_element:
            if not isinstance(document, dict) or self.root_element not in document:
                raise SourceReadError(
                    f"Root element '{self.root_element}' not found in JSON file {self.path}"
                )
            document = document[self.root_element]
        if not isinstance(document, list):
            raise SourceReadError(f"JSON root must be an array of objects: {self.path}")

        records = []
        for position, item in enumerate(document):
            if isinstance(item, dict):
                records.append(item)
            else:
                logger.warning("%s: element %d is not an object, skipped", self.path.name, position)
        if not records:
            return
        self._header = [str(key) for key in records[0]]
        self._rows = [[_text(record.get(key)) for key in self._header] for record in records]

    @property
    def header_names(self) -> list[str] | None:
        return list(self._header)

    def next_raw_row(self) -> list[str | None] | None:
        if self._position >= len(self._rows):
            return None
        row = self._rows[self._position]
        self._position += 1
        return list(row)

    def __iter__(self):
        while (row := self.next_raw_row()) is not None:
            yield row


class JsonRowSink:
    """Buffer rows as objects and dump the array on close; empty strings become ``null``."""

    def __init__(self, path: str | Path, *, pretty_print: bool = False) -> None:
        self.path = Path(path)
        self.pretty_print = pretty_print
        self._header: list[str] = []
        self._records: list[dict[str, str | None]] = []
        self._closed = False

    def write_header(self, names: Sequence[str]) -> None:
        self._header = list(names)

    def write_row(self, values: Sequence[str]) -> None:
        if self._closed:
            raise SinkWriteError(f"JSON sink already closed: {self.path}")
        self._records.append(
            {
                name: value if value not in (None, "") else None
                for name, value in zip(self._header, values, strict=False)
            }
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as fh:
                json.dump(self._records, fh, indent=2 if self.pretty_print else None, ensure_ascii=False)
                fh.write("\n")
        except OSError as e:
            raise SinkWriteError(f"Failed to write JSON file {self.path}: {e}") from e

    def __enter__(self) -> JsonRowSink:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self._closed = True
            self._records.clear()
            return
        self.close()
