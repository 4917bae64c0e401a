from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..errors import SchemaError
from .types import SemanticType

if TYPE_CHECKING:
    from .row import Cell

"""Column descriptor and factory."""

__all__ = [
    "Column",
    "create_column",
]


@dataclass(frozen=True)
class Column:
    """Typed column descriptor.

    Attributes:
        name: Column name, non-blank and unique within its table
        semantic_type: One of the closed set of :class:`SemanticType` members
        default_value: Value injected for rows that omit this column
    """
    name: str
    semantic_type: SemanticType
    default_value: Any = field(default=None)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise SchemaError("Column name cannot be null or blank")
        object.__setattr__(self, "semantic_type", SemanticType.from_tag(self.semantic_type))
        if not self.semantic_type.is_instance(self.default_value):
            raise SchemaError(
                f"Default value {self.default_value!r} is not a valid "
                f"{self.semantic_type.tag} for column '{self.name}'"
            )

    @property
    def type_tag(self) -> str:
        return self.semantic_type.tag

    def create_default_value(self) -> Any:
        return self.default_value

    def is_valid_value(self, value: Any) -> bool:
        return self.semantic_type.is_instance(value)

    def convert_from_string(self, value: str | None) -> Any:
        return self.semantic_type.parse(value, column=self.name)

    def convert_to_string(self, value: Any) -> str | None:
        return self.semantic_type.format(value)

    def create_cell(self, value: Any) -> Cell:
        from .row import Cell

        if not self.is_valid_value(value):
            raise SchemaError(f"Invalid value {value!r} for column '{self.name}' ({self.type_tag})")
        return Cell(self, value)


def create_column(name: str, type_tag: str | SemanticType, default_value: Any = None) -> Column:
    """Create a column from a (name, type tag) pair.

    When ``default_value`` is omitted the type's default is used (``""``, ``0``, ``0.0``,
    ``False``, or the current date/time for temporal types).
    """
    semantic_type = SemanticType.from_tag(type_tag)
    if default_value is None:
        default_value = semantic_type.default_value()
    return Column(name=name, semantic_type=semantic_type, default_value=default_value)
