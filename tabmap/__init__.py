"""tabmap: typed in-memory tables and declarative column mappings to CSV files and PostgreSQL."""

from .core import Column, Row, SemanticType, Table, create_column, infer_schema, infer_type
from .errors import (
    ConfigurationError,
    ConversionError,
    MissingColumnError,
    SchemaError,
    SinkWriteError,
    SourceReadError,
    TabmapError,
)
from .mapping import ColumnMapping, MappingConfiguration

__version__ = "0.1.0"

__all__ = [
    "SemanticType",
    "Column",
    "create_column",
    "Row",
    "Table",
    "infer_type",
    "infer_schema",
    "ColumnMapping",
    "MappingConfiguration",
    "TabmapError",
    "ConfigurationError",
    "SchemaError",
    "ConversionError",
    "MissingColumnError",
    "SourceReadError",
    "SinkWriteError",
]
