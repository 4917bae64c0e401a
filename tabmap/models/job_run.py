from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..core.table import Table
from .processing_result import ConversionResult

"""JobRun model: the processing context and outcome of one pipeline job."""

__all__ = [
    "JobStatus",
    "JobRun",
]


class JobStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class JobRun:
    """Outcome of one job.

    A job fails when it raised a configuration/schema/IO error, or when any row was rejected.
    """
    job_name: str
    status: JobStatus
    table: Table | None = None  # Table filled by the reader, None when the read never started
    read_result: ConversionResult | None = None
    write_result: ConversionResult | None = None
    error: str | None = None  # Job-level error message
    elapsed_seconds: float = 0.0

    @property
    def rows_read(self) -> int:
        return self.read_result.rows_accepted if self.read_result else 0

    @property
    def rows_written(self) -> int:
        return self.write_result.rows_accepted if self.write_result else 0

    @property
    def rows_rejected(self) -> int:
        return sum(r.rows_rejected for r in (self.read_result, self.write_result) if r is not None)
