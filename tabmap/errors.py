from __future__ import annotations

"""Exception hierarchy shared by the table model, mapping engine and collaborators.

Configuration and schema errors are raised to the immediate caller. Conversion and
missing-column errors are row-level: the conversion pass rejects the row (see
``tabmap.services.conversion``) unless it runs in strict mode.
"""

__all__ = [
    "TabmapError",
    "ConfigurationError",
    "SchemaError",
    "ConversionError",
    "MissingColumnError",
    "SourceReadError",
    "SinkWriteError",
    "DatabaseConnectionError",
    "ROW_LEVEL_ERRORS",
]


class TabmapError(Exception):
    """Base class for every error raised by tabmap."""


class ConfigurationError(TabmapError, ValueError):
    """Invalid table/mapping/pipeline configuration. Always fatal to the call."""


class SchemaError(TabmapError, ValueError):
    """Unsupported type tag, unknown or duplicate column, type-invalid value."""


class ConversionError(TabmapError, ValueError):
    """A raw string could not be converted to the requested semantic type."""

    def __init__(
        self,
        message: str,
        *,
        column: str | None = None,
        value: str | None = None,
        expected: str | None = None,
    ) -> None:
        super().__init__(message)
        self.column = column
        self.value = value
        self.expected = expected


class MissingColumnError(TabmapError, ValueError):
    """A declared column has no value and the default policy cannot fill it."""

    def __init__(self, message: str, *, column: str | None = None) -> None:
        super().__init__(message)
        self.column = column


class SourceReadError(TabmapError):
    """Raised by row sources when the underlying file or result set cannot be read."""


class SinkWriteError(TabmapError):
    """Raised by row sinks when rows cannot be written."""


class DatabaseConnectionError(TabmapError):
    """The database named by a mapping could not be reached."""


# Errors that reject a single row instead of aborting the pass
ROW_LEVEL_ERRORS: tuple[type[Exception], ...] = (ConversionError, MissingColumnError)
