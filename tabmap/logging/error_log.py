from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Error log buffering.

- JSON Lines with a fixed schema (no extra keys)
- one ``errors-YYYYMMDD-HHMMSS.log`` (UTC) per run, created on first flush
- records are buffered and appended on ``flush()``
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush appends JSON Lines to the run's file."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self.logs_dir = Path(logs_dir) if logs_dir is not None else LOGS_DIR
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self.total_records = 0

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self.logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)
        self.total_records += 1

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write pending records. Returns the log path, or None if nothing was ever logged."""
        if not self._records:
            return self._file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
