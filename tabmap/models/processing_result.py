from __future__ import annotations

import statistics
from dataclasses import dataclass
from datetime import datetime

"""Processing result models.

ConversionResult describes one read or write pass over a Table; JobStat and ProcessingResult
aggregate passes per pipeline job and per run for the SUMMARY line.
"""

__all__ = [
    "ConversionResult",
    "JobStat",
    "ProcessingResult",
    "BatchStatsAccumulator",
]


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of one conversion pass (external -> Table or Table -> external)."""
    direction: str  # read/write
    rows_processed: int  # Rows seen (source rows for read, table rows for write)
    rows_accepted: int  # Rows added to the table / emitted to the sink
    rows_rejected: int  # Rows rejected under the reject-row policy
    warnings: tuple[str, ...] = ()  # Distinct warnings raised during the pass

    @property
    def succeeded(self) -> bool:
        return self.rows_rejected == 0


@dataclass(frozen=True)
class JobStat:
    """Per-job processing statistics (internal helper for ProcessingResult).

    Includes batch-level timing statistics when the job writes to a database.
    """
    job_name: str
    status: str  # success/failed
    rows_read: int
    rows_written: int
    rows_rejected: int
    elapsed_seconds: float
    total_batches: int = 0
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results for one pipeline run; everything the SUMMARY line needs."""
    success_jobs: int
    failed_jobs: int
    total_rows_read: int
    total_rows_written: int
    total_rows_rejected: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float  # end - start
    throughput_rows_per_sec: float  # total_rows_read / elapsed
    job_stats: list[JobStat] | None = None

    @property
    def total_jobs(self) -> int:
        return self.success_jobs + self.failed_jobs


class BatchStatsAccumulator:
    """Collects individual batch timings and summarizes them for JobStat."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Calculate batch statistics.

        Returns:
            tuple: (total_batches, avg_batch_seconds, p95_batch_seconds)
        """
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)

        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            # 19th of 20 inclusive quantiles
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method="inclusive"
            )[18]

        return (total_batches, avg_batch_seconds, p95_batch_seconds)
