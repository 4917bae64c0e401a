from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..mapping.model import MappingConfiguration

"""Pipeline configuration models.

A pipeline is a list of jobs. Each job reads one external source into a fresh Table through
its reader endpoint and, optionally, writes that Table out through its writer endpoint.
"""

__all__ = [
    "ENDPOINT_KINDS",
    "EndpointConfig",
    "JobConfig",
    "PipelineConfig",
]

ENDPOINT_KINDS = ("csv", "json", "xml", "db")


@dataclass(frozen=True)
class EndpointConfig:
    kind: str  # one of ENDPOINT_KINDS
    mapping: MappingConfiguration


@dataclass(frozen=True)
class JobConfig:
    """One reader -> Table -> (writer) pass."""
    name: str
    reader: EndpointConfig
    writer: EndpointConfig | None = None
    strict: bool = False  # Abort the job on the first rejected row


@dataclass(frozen=True)
class PipelineConfig:
    """Root configuration object loaded from config/pipeline.yml."""
    jobs: tuple[JobConfig, ...]
    logs_directory: Path = Path("logs")
    source_path: Path | None = None  # File the config was loaded from
