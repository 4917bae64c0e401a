from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering.

Format::

    SUMMARY jobs={total}/{total} success={s} failed={f} rows_read={r} rows_written={w}
    rejected={x} elapsed_sec={e} throughput_rps={t}
"""

__all__ = [
    "format_number",
    "render_summary_line",
]


def format_number(value: float) -> str:
    """Integral values without a fraction, tiny values without scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line for a run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2023, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2023, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_jobs=1, failed_jobs=0, total_rows_read=1000, total_rows_written=1000,
        ...     total_rows_rejected=0, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0, throughput_rows_per_sec=500.0
        ... )
        >>> render_summary_line(result)  # doctest: +ELLIPSIS
        'SUMMARY jobs=1/1 success=1 failed=0 rows_read=1000 rows_written=1000 rejected=0 ...'
    """
    total = result.total_jobs
    return (
        f"SUMMARY jobs={total}/{total} "
        f"success={result.success_jobs} "
        f"failed={result.failed_jobs} "
        f"rows_read={result.total_rows_read} "
        f"rows_written={result.total_rows_written} "
        f"rejected={result.total_rows_rejected} "
        f"elapsed_sec={format_number(result.elapsed_seconds)} "
        f"throughput_rps={format_number(result.throughput_rows_per_sec)}"
    )
