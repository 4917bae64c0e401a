from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

Keys are fixed (see ``tabmap/config/schemas/error_log_schema.json``). ``row`` is the 1-based
data row number, or -1 for job-level errors where no single row is to blame.
"""

__all__ = [
    "ErrorRecord",
    "error_type_of",
]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def error_type_of(exc: BaseException) -> str:
    """UPPER_SNAKE classification of an exception, e.g. ``CONVERSION_ERROR``."""
    return _CAMEL_BOUNDARY.sub("_", type(exc).__name__).upper()


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        job: pipeline job name
        source: source or sink location being processed
        row: row number (1-based), -1 when unknown
        column: target column involved, empty when not column specific
        error_type: UPPER_SNAKE_CASE classification
        message: human readable description
    """
    timestamp: str
    job: str
    source: str
    row: int
    column: str
    error_type: str
    message: str

    @staticmethod
    def create(
        job: str, source: str, row: int, error_type: str, message: str, column: str | None = None
    ) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            job=job,
            source=source,
            row=row,
            column=column or "",
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_exception(job: str, source: str, row: int, exc: BaseException) -> ErrorRecord:
        return ErrorRecord.create(
            job, source, row, error_type_of(exc), str(exc), column=getattr(exc, "column", None)
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
