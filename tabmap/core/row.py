from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..errors import SchemaError
from .column import Column

if TYPE_CHECKING:
    from .table import Table

"""Row and Cell.

A Row is created against the column set its table has at creation time and keeps a
back-reference to that table. Columns added to the table later are not back-filled.
"""

__all__ = [
    "Cell",
    "Row",
]


@dataclass
class Cell:
    """One typed value for one (row, column) pair."""
    column: Column
    value: Any = None

    def set_value(self, value: Any) -> None:
        if not self.column.is_valid_value(value):
            raise SchemaError(
                f"Invalid value {value!r} for column '{self.column.name}' ({self.column.type_tag})"
            )
        self.value = value


class Row:
    def __init__(self, table: Table) -> None:
        self._table = table
        self._cells: dict[str, Cell] = {}

    @property
    def table(self) -> Table:
        return self._table

    @property
    def cells(self) -> list[Cell]:
        return list(self._cells.values())

    @property
    def column_names(self) -> list[str]:
        return list(self._cells.keys())

    def get_cell(self, column_name: str) -> Cell | None:
        return self._cells.get(column_name)

    def get_value(self, column_name: str) -> Any:
        cell = self._cells.get(column_name)
        return None if cell is None else cell.value

    def set_value(self, column_name: str, value: Any) -> None:
        """Set a typed value, creating the cell on first use.

        Raises:
            SchemaError: if the column does not exist in the owning table or the value
                is not valid for its type
        """
        column = self._table.get_column(column_name)
        if column is None:
            raise SchemaError(f"Column does not exist: {column_name}")
        cell = self._cells.get(column_name)
        if cell is None:
            self._cells[column_name] = column.create_cell(value)
        else:
            cell.set_value(value)

    def to_dict(self) -> dict[str, Any]:
        return {name: cell.value for name, cell in self._cells.items()}

    def __repr__(self) -> str:  # pragma: no cover (debug aid)
        return f"Row({self.to_dict()!r})"
