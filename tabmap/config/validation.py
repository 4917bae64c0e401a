from __future__ import annotations

import json
from functools import cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema.exceptions import ValidationError

from ..errors import ConfigurationError

"""JSON Schema validation for mapping and pipeline documents.

Schemas ship as package data under ``tabmap/config/schemas``.
"""

__all__ = [
    "ConfigError",
    "SCHEMA_DIR",
    "load_schema",
    "validate_document",
]

SCHEMA_DIR = Path(__file__).parent / "schemas"


class ConfigError(ConfigurationError):
    """Invalid or unreadable configuration file."""


@cache
def load_schema(name: str) -> dict[str, Any]:
    path = SCHEMA_DIR / name
    if not path.exists():
        raise ConfigError(f"config schema not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e


def validate_document(data: Any, schema_name: str, what: str = "config") -> None:
    """Validate ``data`` against the named schema.

    Raises:
        ConfigError: when the schema is unusable or the document does not conform
    """
    schema = load_schema(schema_name)
    try:
        jsonschema.validate(data, schema)
    except ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path)
        where = f" at {location}" if location else ""
        raise ConfigError(f"{what} validation failed{where}: {e.message}") from e
