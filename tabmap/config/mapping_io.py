from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from ..errors import ConfigurationError, SchemaError
from ..mapping.model import ColumnMapping, MappingConfiguration
from .validation import ConfigError, validate_document

"""Persisted mapping configurations.

External representation::

    sourceLocation: data/people.csv
    columnMappings:
      - {sourceColumnName: Name, targetColumnName: FullName, targetColumnType: string}
      - {sourceColumnIndex: 2, targetColumnName: Job, targetColumnType: string, defaultValue: Unknown}
    options: {hasHeaderRow: true}

The format follows the file extension: ``.yml``/``.yaml`` (PyYAML) or ``.json``.
"""

__all__ = [
    "mapping_from_dict",
    "mapping_to_dict",
    "load_mapping",
    "dump_mapping",
]

_YAML_SUFFIXES = {".yml", ".yaml"}
_JSON_SUFFIXES = {".json"}


def mapping_from_dict(data: Any) -> MappingConfiguration:
    """Validate and build a MappingConfiguration from its external representation."""
    validate_document(data, "mapping_schema.json", what="mapping")
    mappings = []
    for item in data["columnMappings"]:
        try:
            if "sourceColumnName" in item:
                mapping = ColumnMapping.by_name(
                    item["sourceColumnName"],
                    item["targetColumnName"],
                    item["targetColumnType"],
                    item.get("defaultValue"),
                )
            else:
                mapping = ColumnMapping.by_index(
                    item["sourceColumnIndex"],
                    item["targetColumnName"],
                    item["targetColumnType"],
                    item.get("defaultValue"),
                )
        except (ConfigurationError, SchemaError) as e:
            raise ConfigError(f"invalid column mapping {item}: {e}") from e
        mappings.append(mapping)
    return MappingConfiguration(
        source_location=data["sourceLocation"],
        column_mappings=tuple(mappings),
        options=dict(data.get("options") or {}),
    )


def mapping_to_dict(config: MappingConfiguration) -> dict[str, Any]:
    items: list[dict[str, Any]] = []
    for m in config.column_mappings:
        item: dict[str, Any] = {}
        if m.uses_source_column_name:
            item["sourceColumnName"] = m.source_column_name
        else:
            item["sourceColumnIndex"] = m.source_column_index
        item["targetColumnName"] = m.target_column_name
        item["targetColumnType"] = m.target_column_type.tag
        if m.default_value is not None:
            item["defaultValue"] = m.default_value
        items.append(item)
    return {
        "sourceLocation": config.source_location,
        "columnMappings": items,
        "options": dict(config.options),
    }


def _suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in _YAML_SUFFIXES | _JSON_SUFFIXES:
        raise ConfigError(f"unsupported mapping file format: {path.name} (use .yml, .yaml or .json)")
    return suffix


def load_mapping(path: str | Path) -> MappingConfiguration:
    path = Path(path)
    suffix = _suffix(path)
    if not path.exists():
        raise ConfigError(f"mapping file not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text) if suffix in _JSON_SUFFIXES else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"invalid mapping file {path}: {e}") from e
    return mapping_from_dict(data or {})


def dump_mapping(config: MappingConfiguration, path: str | Path) -> None:
    path = Path(path)
    suffix = _suffix(path)
    data = mapping_to_dict(config)
    if suffix in _JSON_SUFFIXES:
        text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    else:
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
