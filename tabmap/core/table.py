from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..errors import ConfigurationError, MissingColumnError, SchemaError
from .column import Column, create_column
from .row import Row
from .types import SemanticType

"""In-memory typed table.

The table owns an ordered name -> Column mapping, an ordered list of rows and a
round-trip store that keeps the original text of fractional numbers ingested from
strings, so ``get_value_at`` can reproduce ``"30000.00"`` verbatim instead of
``"30000.0"``.

Policies:
- ``set_columns`` is destructive: it replaces the schema and drops every row and every
  round-trip entry.
- Rows see the column set of the table at insertion time only.
- A failed ``add_*row`` call leaves the table unchanged.
"""

__all__ = [
    "Table",
]


class Table:
    def __init__(self, name: str = "Table", *, create_default_value: bool = True) -> None:
        self.name = name
        self.create_default_value = create_default_value
        self._columns: dict[str, Column] = {}
        self._rows: list[Row] = []
        # (column name, row index) -> original string of a fractional double
        self._round_trip: dict[tuple[str, int], str] = {}

    # ------------------------------------------------------------------ schema
    @property
    def columns(self) -> list[Column]:
        return list(self._columns.values())

    @property
    def column_names(self) -> list[str]:
        return list(self._columns.keys())

    @property
    def column_count(self) -> int:
        return len(self._columns)

    def get_column(self, name: str) -> Column | None:
        return self._columns.get(name)

    def get_column_at(self, index: int) -> Column:
        if index < 0 or index >= len(self._columns):
            raise IndexError(f"Invalid column index: {index}")
        return list(self._columns.values())[index]

    def column_name(self, index: int) -> str:
        return self.get_column_at(index).name

    def add_column(self, column: Column) -> None:
        """Append a column. Existing rows are not back-filled."""
        if column is None:
            raise SchemaError("Column cannot be null")
        if column.name in self._columns:
            raise SchemaError(f"Column already exists: {column.name}")
        self._columns[column.name] = column

    def set_columns(self, definitions: Mapping[str, str | SemanticType]) -> None:
        """Replace the whole schema with ``definitions`` (name -> type tag).

        WARNING: destructive. All existing rows and round-trip entries are removed.

        Raises:
            ConfigurationError: on a None mapping, blank names/types or duplicate names
            SchemaError: on an unsupported type tag
        """
        if definitions is None:
            raise ConfigurationError("Columns map cannot be null")
        seen: set[str] = set()
        for name, type_tag in definitions.items():
            if name is None or not str(name).strip():
                raise ConfigurationError("Column names cannot be null or blank")
            if type_tag is None or (isinstance(type_tag, str) and not type_tag.strip()):
                raise ConfigurationError(f"Column type for '{name}' cannot be null or blank")
            if name in seen:
                raise ConfigurationError(f"Duplicate column names are not allowed: {name}")
            seen.add(name)
        new_columns = {name: create_column(name, type_tag) for name, type_tag in definitions.items()}
        self._columns = new_columns
        self._rows.clear()
        self._round_trip.clear()

    # -------------------------------------------------------------------- rows
    @property
    def rows(self) -> tuple[Row, ...]:
        """Snapshot of the current rows."""
        return tuple(self._rows)

    @property
    def row_count(self) -> int:
        return len(self._rows)

    def row(self, index: int) -> Row:
        if index < 0 or index >= len(self._rows):
            raise IndexError(f"Invalid row index: {index}")
        return self._rows[index]

    def create_row(self) -> Row:
        return Row(self)

    def _missing_columns(self, present: set[str]) -> list[Column]:
        missing = [c for c in self._columns.values() if c.name not in present]
        if missing and not self.create_default_value:
            raise MissingColumnError(
                f"Row is missing column: {missing[0].name}", column=missing[0].name
            )
        return missing

    def add_row(self, row: Row) -> None:
        """Append a typed row, filling absent columns with their defaults."""
        if row is None:
            raise SchemaError("Row cannot be null")
        for cell in row.cells:
            column = self._columns.get(cell.column.name)
            if column is None:
                raise SchemaError(f"Column does not exist: {cell.column.name}")
            if not column.is_valid_value(cell.value):
                raise SchemaError(f"Invalid value for column: {column.name}")
        for column in self._missing_columns(set(row.column_names)):
            row.set_value(column.name, column.create_default_value())
        self._rows.append(row)

    def add_typed_row(
        self, values: Mapping[str, Any], originals: Mapping[str, str | None] | None = None
    ) -> Row:
        """Build a row from already typed values and append it.

        ``originals`` holds the raw text each value was parsed from; doubles keep it as their
        round-trip string, so the values are not converted a second time.
        """
        if values is None:
            raise SchemaError("Row values cannot be null")
        row = self.create_row()
        for name, value in values.items():
            row.set_value(name, value)
        self.add_row(row)
        if originals:
            index = len(self._rows) - 1
            for name, value in values.items():
                raw = originals.get(name)
                if _keeps_original(self._columns[name], value, raw):
                    self._round_trip[(name, index)] = raw.strip()  # type: ignore[union-attr]
        return row

    def add_raw_row(self, values: Mapping[str, str | None]) -> Row:
        """Convert a name -> raw string mapping and append it as a row.

        Conversion, default fill and validation happen in one step; a conversion
        failure propagates as ``ConversionError`` and nothing is appended.
        """
        if values is None:
            raise SchemaError("Row map cannot be null")
        missing = self._missing_columns(set(values.keys()))
        row = self.create_row()
        index = len(self._rows)
        originals: dict[tuple[str, int], str] = {}
        for name, raw in values.items():
            column = self._columns.get(name)
            if column is None:
                raise SchemaError(f"Column '{name}' does not exist")
            converted = column.convert_from_string(raw)
            row.set_value(name, converted)
            if _keeps_original(column, converted, raw):
                originals[(name, index)] = raw.strip()  # type: ignore[union-attr]
        for column in missing:
            row.set_value(column.name, column.create_default_value())
        self._rows.append(row)
        self._round_trip.update(originals)
        return row

    # ------------------------------------------------------------------ values
    def _require_column(self, name: str) -> Column:
        column = self._columns.get(name)
        if column is None:
            raise SchemaError(f"Column '{name}' does not exist")
        return column

    def get_value(self, row_index: int, column_name: str) -> Any:
        self._require_column(column_name)
        return self.row(row_index).get_value(column_name)

    def set_value(self, row_index: int, column_name: str, value: Any) -> None:
        self._require_column(column_name)
        self.row(row_index).set_value(column_name, value)
        self._round_trip.pop((column_name, row_index), None)

    def get_value_at(self, row_index: int, column_name: str) -> str | None:
        """String form of a cell, inverse of ingestion.

        Doubles prefer the original ingested text; temporal values use the fixed ISO
        patterns; a cell absent from the row yields None.
        """
        column = self._require_column(column_name)
        value = self.row(row_index).get_value(column_name)
        if value is None:
            return None
        if column.semantic_type is SemanticType.DOUBLE:
            original = self._round_trip.get((column_name, row_index))
            if original is not None:
                return original
        return column.convert_to_string(value)

    def set_value_at(self, row_index: int, column_name: str, raw: str | None) -> None:
        column = self._require_column(column_name)
        row = self.row(row_index)
        converted = column.convert_from_string(raw)
        row.set_value(column_name, converted)
        if _keeps_original(column, converted, raw):
            self._round_trip[(column_name, row_index)] = raw.strip()  # type: ignore[union-attr]
        else:
            self._round_trip.pop((column_name, row_index), None)

    def original_string(self, row_index: int, column_name: str) -> str | None:
        """Round-trip entry for a cell, if any."""
        return self._round_trip.get((column_name, row_index))

    def to_records(self) -> list[dict[str, str | None]]:
        return [
            {name: self.get_value_at(i, name) for name in self._columns}
            for i in range(len(self._rows))
        ]

    def __repr__(self) -> str:  # pragma: no cover (debug aid)
        return f"Table(name={self.name!r}, columns={self.column_names!r}, rows={len(self._rows)})"


def _keeps_original(column: Column, converted: Any, raw: str | None) -> bool:
    return (
        column.semantic_type is SemanticType.DOUBLE
        and converted is not None
        and raw is not None
        and "." in raw
    )
