"""Declarative column mappings and the resolution algorithm shared by readers and writers."""

from .model import (
    ByIndex,
    ByName,
    ColumnMapping,
    MappingConfiguration,
    MappingConfigurationBuilder,
    SourceSelector,
)
from .resolution import (
    EmittedRow,
    build_header_index,
    lookup_source_value,
    output_header,
    resolve_output_row,
    resolve_row,
)

__all__ = [
    # Model
    "ByName",
    "ByIndex",
    "SourceSelector",
    "ColumnMapping",
    "MappingConfiguration",
    "MappingConfigurationBuilder",
    # Resolution
    "EmittedRow",
    "build_header_index",
    "lookup_source_value",
    "resolve_row",
    "output_header",
    "resolve_output_row",
]
