from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from ..core.types import SemanticType
from ..errors import ConfigurationError

"""Declarative mapping model.

A ColumnMapping maps one external column, selected either by name or by position, to one
target column with a type and an optional default. A MappingConfiguration groups the
mappings of one conversion pass together with a source location and free-form options.

Both are immutable once built. Overrides (``with_option``, ``with_source_location``,
``with_default`` ...) return new instances so a configuration shared between a reader and
a writer is never mutated behind the other's back.
"""

__all__ = [
    "ByName",
    "ByIndex",
    "SourceSelector",
    "ColumnMapping",
    "MappingConfiguration",
    "MappingConfigurationBuilder",
]


@dataclass(frozen=True)
class ByName:
    """Select the source column by exact header name."""
    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ConfigurationError("Source column name cannot be null or empty")

    def describe(self) -> str:
        return f"name '{self.name}'"


@dataclass(frozen=True)
class ByIndex:
    """Select the source column by 0-based position."""
    index: int

    def __post_init__(self) -> None:
        if isinstance(self.index, bool) or not isinstance(self.index, int) or self.index < 0:
            raise ConfigurationError(f"Source column index must be a non-negative int: {self.index!r}")

    def describe(self) -> str:
        return f"index {self.index}"


SourceSelector = ByName | ByIndex


@dataclass(frozen=True)
class ColumnMapping:
    source: SourceSelector
    target_column_name: str
    target_column_type: SemanticType
    default_value: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.source, (ByName, ByIndex)):
            raise ConfigurationError(f"Invalid source selector: {self.source!r}")
        if not isinstance(self.target_column_name, str) or not self.target_column_name.strip():
            raise ConfigurationError("Target column name cannot be null or blank")
        object.__setattr__(
            self, "target_column_type", SemanticType.from_tag(self.target_column_type)
        )

    @classmethod
    def by_name(
        cls,
        source_column_name: str,
        target_column_name: str,
        target_column_type: str | SemanticType,
        default_value: str | None = None,
    ) -> ColumnMapping:
        return cls(ByName(source_column_name), target_column_name, target_column_type, default_value)  # type: ignore[arg-type]

    @classmethod
    def by_index(
        cls,
        source_column_index: int,
        target_column_name: str,
        target_column_type: str | SemanticType,
        default_value: str | None = None,
    ) -> ColumnMapping:
        return cls(ByIndex(source_column_index), target_column_name, target_column_type, default_value)  # type: ignore[arg-type]

    @property
    def uses_source_column_name(self) -> bool:
        return isinstance(self.source, ByName)

    @property
    def uses_source_column_index(self) -> bool:
        return isinstance(self.source, ByIndex)

    @property
    def source_column_name(self) -> str | None:
        return self.source.name if isinstance(self.source, ByName) else None

    @property
    def source_column_index(self) -> int | None:
        return self.source.index if isinstance(self.source, ByIndex) else None

    def with_default(self, default_value: str | None) -> ColumnMapping:
        return replace(self, default_value=default_value)

    def describe(self) -> str:
        return f"source {self.source.describe()} -> '{self.target_column_name}' ({self.target_column_type.tag})"


@dataclass(frozen=True)
class MappingConfiguration:
    """Immutable mapping set for one reader or writer pass.

    Unhashable: ``options`` is a read-only mapping, so instances compare by value but cannot
    be used as dict keys or set members.
    """

    source_location: str = ""
    column_mappings: tuple[ColumnMapping, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)

    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        object.__setattr__(self, "column_mappings", tuple(self.column_mappings))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @staticmethod
    def builder() -> MappingConfigurationBuilder:
        return MappingConfigurationBuilder()

    def get_option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)

    def get_bool_option(self, *keys: str, default: bool = False) -> bool:
        """First present option among ``keys`` interpreted as a boolean."""
        for key in keys:
            if key in self.options:
                value = self.options[key]
                if isinstance(value, str):
                    return value.strip().lower() in {"true", "1", "yes"}
                return bool(value)
        return default

    def with_option(self, key: str, value: Any) -> MappingConfiguration:
        options = dict(self.options)
        options[key] = value
        return replace(self, options=options)

    def with_source_location(self, source_location: str) -> MappingConfiguration:
        return replace(self, source_location=source_location)

    def with_column_mapping(self, mapping: ColumnMapping) -> MappingConfiguration:
        return replace(self, column_mappings=(*self.column_mappings, mapping))

    def create_column_definitions(self) -> dict[str, str]:
        """Ordered target schema (target column name -> type tag)."""
        definitions: dict[str, str] = {}
        for mapping in self.column_mappings:
            if mapping.target_column_name in definitions:
                raise ConfigurationError(
                    f"Duplicate target column in mapping: {mapping.target_column_name}"
                )
            definitions[mapping.target_column_name] = mapping.target_column_type.tag
        return definitions

    def validate(self) -> None:
        """Reject configurations that cannot drive a conversion pass.

        Raises:
            ConfigurationError: on a blank source location or an empty mapping list
        """
        if not self.source_location or not self.source_location.strip():
            raise ConfigurationError(
                "Source location in mapping configuration cannot be null or empty"
            )
        if not self.column_mappings:
            raise ConfigurationError("Column mappings cannot be null or empty")


class MappingConfigurationBuilder:
    """Fluent builder; ``build()`` freezes the result."""

    def __init__(self) -> None:
        self._source_location = ""
        self._mappings: list[ColumnMapping] = []
        self._options: dict[str, Any] = {}

    def source_location(self, location: str) -> MappingConfigurationBuilder:
        self._source_location = location
        return self

    def add_column_mapping(self, mapping: ColumnMapping) -> MappingConfigurationBuilder:
        self._mappings.append(mapping)
        return self

    def add_column_mappings(self, mappings: Iterable[ColumnMapping]) -> MappingConfigurationBuilder:
        self._mappings.extend(mappings)
        return self

    def option(self, key: str, value: Any) -> MappingConfigurationBuilder:
        self._options[key] = value
        return self

    def build(self) -> MappingConfiguration:
        return MappingConfiguration(
            source_location=self._source_location,
            column_mappings=tuple(self._mappings),
            options=dict(self._options),
        )
