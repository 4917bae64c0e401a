from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..core.table import Table
from ..errors import ConversionError
from ..models.resolved_row import ResolvedRow
from .model import ByIndex, ByName, ColumnMapping, MappingConfiguration

"""Mapping resolution, shared by every reader and writer.

Forward (external row -> table row), per mapping:
1. look the source value up by header name (exact match, first occurrence wins) or by
   index; out of range or unknown name means "absent"
2. absent or empty -> the mapping's default value (which may itself be unset)
3. a value that is available is coerced to the target type; failure raises
   ConversionError naming the mapping and the row
4. the converted value is emitted under the target column name; with no value at all
   the target column is omitted and the table's default policy backstops it

Reverse (table row -> external row) walks the same mappings against the table's columns
and substitutes ``default_value`` (or ``""``) for absent/empty values.
"""

__all__ = [
    "EmittedRow",
    "build_header_index",
    "lookup_source_value",
    "resolve_row",
    "output_header",
    "resolve_output_row",
]


@dataclass(frozen=True)
class EmittedRow:
    """One external row produced by the reverse direction."""
    row_index: int  # 0-based table row index
    values: list[str]  # One string per mapping, in mapping order
    warnings: tuple[str, ...] = ()


def build_header_index(headers: Sequence[str] | None, *, case_sensitive: bool = True) -> dict[str, int]:
    """Header name -> position. The first occurrence of a duplicated name wins."""
    index: dict[str, int] = {}
    if not headers:
        return index
    for i, name in enumerate(headers):
        if name is None:
            continue
        key = name if case_sensitive else name.casefold()
        index.setdefault(key, i)
    return index


def _missing_message(mapping: ColumnMapping, what: str) -> str:
    if mapping.default_value is not None:
        return f"{what}; using default value '{mapping.default_value}' for '{mapping.target_column_name}'"
    return f"{what}; no default value for '{mapping.target_column_name}'"


def lookup_source_value(
    mapping: ColumnMapping,
    raw_row: Sequence[str | None],
    header_index: dict[str, int] | None,
    *,
    case_sensitive: bool = True,
) -> tuple[str | None, str | None]:
    """Return ``(value, warning)`` for one mapping against one raw row.

    ``value`` is None when the source column is absent; ``warning`` then explains why.
    """
    source = mapping.source
    if isinstance(source, ByName):
        if not header_index:
            return None, _missing_message(mapping, f"Column '{source.name}' not found: source has no header row")
        key = source.name if case_sensitive else source.name.casefold()
        position = header_index.get(key)
        if position is None:
            return None, _missing_message(mapping, f"Column '{source.name}' not found in source header")
        if position >= len(raw_row):
            return None, _missing_message(mapping, f"Column '{source.name}' (index {position}) out of bounds")
        return raw_row[position], None
    if isinstance(source, ByIndex):
        if source.index >= len(raw_row):
            return None, _missing_message(mapping, f"Column index {source.index} out of bounds")
        return raw_row[source.index], None
    raise TypeError(f"unsupported source selector: {source!r}")  # pragma: no cover


def resolve_row(
    config: MappingConfiguration,
    raw_row: Sequence[str | None],
    header_index: dict[str, int] | None = None,
    *,
    row_number: int = 1,
    case_sensitive: bool = True,
) -> ResolvedRow:
    """Resolve one external row into typed target values.

    Raises:
        ConversionError: when an available value cannot be coerced to its target type
    """
    values: dict[str, object] = {}
    raw_values: dict[str, str] = {}
    warnings: list[str] = []
    for mapping in config.column_mappings:
        value, warning = lookup_source_value(
            mapping, raw_row, header_index, case_sensitive=case_sensitive
        )
        if warning:
            warnings.append(warning)
        if value is None or value == "":
            value = mapping.default_value
        if value is None:
            continue
        target = mapping.target_column_name
        try:
            values[target] = mapping.target_column_type.parse(value, column=target)
        except ConversionError as e:
            raise ConversionError(
                f"Row {row_number}: cannot convert '{value}' for mapping {mapping.describe()}: {e}",
                column=target,
                value=value,
                expected=e.expected,
            ) from e
        raw_values[target] = value
    return ResolvedRow(
        row_number=row_number,
        values=values,
        raw_values=raw_values,
        warnings=tuple(warnings),
    )


def output_header(config: MappingConfiguration) -> list[str]:
    return [m.target_column_name for m in config.column_mappings]


def _table_value(mapping: ColumnMapping, table: Table, row_index: int) -> tuple[str | None, str | None]:
    source = mapping.source
    if isinstance(source, ByName):
        if table.get_column(source.name) is None:
            return None, _missing_message(mapping, f"Column '{source.name}' not found in table")
        return table.get_value_at(row_index, source.name), None
    if source.index >= table.column_count:
        return None, _missing_message(
            mapping, f"Column index {source.index} out of bounds (0-{table.column_count - 1})"
        )
    return table.get_value_at(row_index, table.column_name(source.index)), None


def resolve_output_row(config: MappingConfiguration, table: Table, row_index: int) -> EmittedRow:
    """Produce one external row (strings in mapping order) from a table row.

    Raises:
        ConversionError: when a table value cannot be read as the mapping's target type
    """
    values: list[str] = []
    warnings: list[str] = []
    for mapping in config.column_mappings:
        value, warning = _table_value(mapping, table, row_index)
        if warning:
            warnings.append(warning)
        if value is None or value == "":
            value = mapping.default_value if mapping.default_value is not None else ""
        if value != "":
            try:
                mapping.target_column_type.parse(value, column=mapping.target_column_name)
            except ConversionError as e:
                raise ConversionError(
                    f"Row {row_index + 1}: value '{value}' does not fit mapping {mapping.describe()}: {e}",
                    column=mapping.target_column_name,
                    value=value,
                    expected=e.expected,
                ) from e
        values.append(value)
    return EmittedRow(row_index=row_index, values=values, warnings=tuple(warnings))
