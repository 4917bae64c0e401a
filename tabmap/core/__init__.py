"""Typed table model: semantic types, type inference, columns, rows and tables."""

from .column import Column, create_column
from .inference import infer_schema, infer_type
from .row import Cell, Row
from .table import Table
from .types import SemanticType, format_double, stringify

__all__ = [
    # Types
    "SemanticType",
    "format_double",
    "stringify",
    "infer_type",
    "infer_schema",
    # Model
    "Column",
    "create_column",
    "Cell",
    "Row",
    "Table",
]
