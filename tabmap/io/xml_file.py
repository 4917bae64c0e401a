from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path
from xml.etree import ElementTree as ET

from ..errors import SinkWriteError, SourceReadError

"""XML record collaborators built on ElementTree.

Layout (element names configurable through ``rootElement`` / ``rowElement``)::

    <data>
      <row><Name>Alice</Name><Age>30</Age></row>
    </data>

The child element names of the first row are the header; element text is trimmed. Later rows
are matched by element name, the first occurrence of a repeated name wins.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_ROOT_ELEMENT",
    "DEFAULT_ROW_ELEMENT",
    "XmlRowSource",
    "XmlRowSink",
]

DEFAULT_ROOT_ELEMENT = "data"
DEFAULT_ROW_ELEMENT = "row"

_XML_NAME = re.compile(r"^[A-Za-z_][\w.\-]*$")


class XmlRowSource:
    def __init__(
        self,
        path: str | Path,
        *,
        root_element: str = DEFAULT_ROOT_ELEMENT,
        row_element: str = DEFAULT_ROW_ELEMENT,
    ) -> None:
        self.path = Path(path)
        self.root_element = root_element
        self.row_element = row_element
        self.has_header = True
        self.case_sensitive_headers = True
        self._header: list[str] = []
        self._rows: list[list[str | None]] = []
        self._position = 0
        self._load()

    def _load(self) -> None:
        if not self.path.is_file():
            raise SourceReadError(f"XML file not found: {self.path}")
        try:
            document = ET.parse(self.path).getroot()
        except (OSError, ET.ParseError) as e:
            raise SourceReadError(f"Failed to read XML file {self.path}: {e}") from e

        root = document
        if document.tag != self.root_element:
            root = document.find(f".//{self.root_element}")
        if root is None:
            raise SourceReadError(
                f"Root element '{self.root_element}' not found in XML file {self.path}"
            )

        records: list[dict[str, str]] = []
        for element in root.findall(self.row_element):
            record: dict[str, str] = {}
            for child in element:
                record.setdefault(child.tag, (child.text or "").strip())
            records.append(record)
        if not records:
            logger.debug("%s: no <%s> elements under <%s>", self.path.name, self.row_element, root.tag)
            return
        self._header = list(records[0])
        self._rows = [[record.get(name) for name in self._header] for record in records]

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


class XmlRowSink:
    """Build the element tree row by row and write it on close."""

    def __init__(
        self,
        path: str | Path,
        *,
        root_element: str = DEFAULT_ROOT_ELEMENT,
        row_element: str = DEFAULT_ROW_ELEMENT,
        indent_output: bool = False,
    ) -> None:
        for name in (root_element, row_element):
            if not _XML_NAME.match(name or ""):
                raise SinkWriteError(f"Not a valid XML element name: {name!r}")
        self.path = Path(path)
        self.row_element = row_element
        self.indent_output = indent_output
        self._root = ET.Element(root_element)
        self._header: list[str] = []
        self._closed = False

    def write_header(self, names: Sequence[str]) -> None:
        invalid = [name for name in names if not _XML_NAME.match(name)]
        if invalid:
            raise SinkWriteError(f"Column names are not valid XML element names: {invalid}")
        self._header = list(names)

    def write_row(self, values: Sequence[str]) -> None:
        if self._closed:
            raise SinkWriteError(f"XML sink already closed: {self.path}")
        row = ET.SubElement(self._root, self.row_element)
        for name, value in zip(self._header, values, strict=False):
            ET.SubElement(row, name).text = "" if value is None else str(value)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        tree = ET.ElementTree(self._root)
        if self.indent_output:
            ET.indent(tree, space="  ")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tree.write(self.path, encoding="UTF-8", xml_declaration=True)
        except OSError as e:
            raise SinkWriteError(f"Failed to write XML file {self.path}: {e}") from e

    def __enter__(self) -> XmlRowSink:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self._closed = True
            self._root.clear()
            return
        self.close()
