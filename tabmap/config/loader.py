from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ..models.config_models import EndpointConfig, JobConfig, PipelineConfig
from .mapping_io import load_mapping, mapping_from_dict
from .validation import ConfigError, validate_document

"""Pipeline config loader.

Responsibilities:
- Load YAML config/pipeline.yml
- Validate it against schemas/pipeline_schema.json
- Resolve each endpoint mapping (inline object, or a path relative to the pipeline file)
- Apply defaults (logs_directory=./logs, strict=False)
"""

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ConfigError",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("config/pipeline.yml")


def _endpoint(raw: dict[str, Any], base_dir: Path, job_name: str, role: str) -> EndpointConfig:
    mapping_ref = raw["mapping"]
    try:
        if isinstance(mapping_ref, str):
            mapping = load_mapping(base_dir / mapping_ref)
        else:
            mapping = mapping_from_dict(mapping_ref)
    except ConfigError as e:
        raise ConfigError(f"job '{job_name}' {role}: {e}") from e
    return EndpointConfig(kind=raw["kind"], mapping=mapping)


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> PipelineConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    validate_document(data, "pipeline_schema.json")

    base_dir = path.parent
    jobs: list[JobConfig] = []
    seen: set[str] = set()
    for raw in data["jobs"]:
        name = raw["name"]
        if name in seen:
            raise ConfigError(f"duplicate job name: {name}")
        seen.add(name)
        writer = raw.get("writer")
        jobs.append(
            JobConfig(
                name=name,
                reader=_endpoint(raw["reader"], base_dir, name, "reader"),
                writer=_endpoint(writer, base_dir, name, "writer") if writer else None,
                strict=bool(raw.get("strict", False)),
            )
        )
    return PipelineConfig(
        jobs=tuple(jobs),
        logs_directory=Path(data.get("logs_directory", "logs")),
        source_path=path,
    )
