from __future__ import annotations

import logging
import time
from datetime import UTC, datetime

import psycopg2

from ..core.table import Table
from ..db.connection import db_connection
from ..errors import TabmapError
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import EndpointConfig, JobConfig, PipelineConfig
from ..models.error_record import ErrorRecord
from ..models.job_run import JobRun, JobStatus
from ..models.processing_result import (
    BatchStatsAccumulator,
    ConversionResult,
    JobStat,
    ProcessingResult,
)
from .conversion import (
    Connect,
    read_csv,
    read_db,
    read_json,
    read_xml,
    write_csv,
    write_db,
    write_json,
    write_xml,
)
from .progress import ProgressTracker

"""Pipeline orchestration.

Each job runs in isolation: read the reader endpoint into a fresh Table, then (optionally)
write that Table through the writer endpoint. A job that raises a tabmap, driver or OS error
is marked failed with a job-level error record (row -1) and the run continues with the next
job. Rejected rows also mark their job failed. The error log is flushed once at the end.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ProcessingError",
    "run_job",
    "process_all",
]

# Errors that fail a single job without stopping the run
JOB_ERRORS: tuple[type[BaseException], ...] = (TabmapError, psycopg2.Error, OSError)


class ProcessingError(TabmapError):
    """Fatal error that prevents the whole run."""


def _read(endpoint: EndpointConfig, table: Table, connect: Connect, **kwargs) -> ConversionResult:
    if endpoint.kind == "csv":
        return read_csv(table, endpoint.mapping, **kwargs)
    if endpoint.kind == "json":
        return read_json(table, endpoint.mapping, **kwargs)
    if endpoint.kind == "xml":
        return read_xml(table, endpoint.mapping, **kwargs)
    if endpoint.kind == "db":
        return read_db(table, endpoint.mapping, connect=connect, **kwargs)
    raise ProcessingError(f"unsupported reader kind: {endpoint.kind}")


def _write(
    endpoint: EndpointConfig,
    table: Table,
    connect: Connect,
    stats: BatchStatsAccumulator,
    **kwargs,
) -> ConversionResult:
    if endpoint.kind == "csv":
        return write_csv(table, endpoint.mapping, **kwargs)
    if endpoint.kind == "json":
        return write_json(table, endpoint.mapping, **kwargs)
    if endpoint.kind == "xml":
        return write_xml(table, endpoint.mapping, **kwargs)
    if endpoint.kind == "db":
        return write_db(table, endpoint.mapping, connect=connect, stats=stats, **kwargs)
    raise ProcessingError(f"unsupported writer kind: {endpoint.kind}")


def run_job(
    job: JobConfig,
    *,
    connect: Connect = db_connection,
    error_log: ErrorLogBuffer | None = None,
    stats: BatchStatsAccumulator | None = None,
) -> JobRun:
    """Run one job and report its outcome. Never raises for job-level failures."""
    started = time.perf_counter()
    table = Table(job.name)
    stats = stats if stats is not None else BatchStatsAccumulator()
    options = dict(strict=job.strict, error_log=error_log, job_name=job.name)
    read_result: ConversionResult | None = None
    write_result: ConversionResult | None = None
    location = job.reader.mapping.source_location
    try:
        read_result = _read(job.reader, table, connect, **options)
        logger.info(
            "%s: read %d rows (%d rejected) from %s",
            job.name, read_result.rows_accepted, read_result.rows_rejected, location,
        )
        if job.writer is not None:
            location = job.writer.mapping.source_location
            write_result = _write(job.writer, table, connect, stats, **options)
            logger.info(
                "%s: wrote %d rows (%d rejected) to %s",
                job.name, write_result.rows_accepted, write_result.rows_rejected, location,
            )
    except JOB_ERRORS as e:
        logger.error("%s: job failed: %s", job.name, e)
        if error_log is not None:
            error_log.append(ErrorRecord.from_exception(job.name, location, -1, e))
        return JobRun(
            job_name=job.name,
            status=JobStatus.FAILED,
            table=table,
            read_result=read_result,
            write_result=write_result,
            error=str(e),
            elapsed_seconds=time.perf_counter() - started,
        )

    rejected = sum(r.rows_rejected for r in (read_result, write_result) if r is not None)
    return JobRun(
        job_name=job.name,
        status=JobStatus.SUCCESS if rejected == 0 else JobStatus.FAILED,
        table=table,
        read_result=read_result,
        write_result=write_result,
        error=f"{rejected} rows rejected" if rejected else None,
        elapsed_seconds=time.perf_counter() - started,
    )


def process_all(config: PipelineConfig, connect: Connect = db_connection) -> ProcessingResult:
    """Run every job of the pipeline and aggregate the results.

    Args:
        config: loaded pipeline configuration
        connect: connection factory for ``db`` endpoints (tests inject fakes)

    Returns:
        ProcessingResult with per-job stats
    """
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer(config.logs_directory)

    job_stats: list[JobStat] = []
    success_count = 0
    failed_count = 0
    rows_read = 0
    rows_written = 0
    rows_rejected = 0

    with ProgressTracker(len(config.jobs)) as progress:
        for job in config.jobs:
            progress.start_job(job.name)
            stats = BatchStatsAccumulator()
            run = run_job(job, connect=connect, error_log=error_log, stats=stats)

            if run.status is JobStatus.SUCCESS:
                success_count += 1
            else:
                failed_count += 1
            rows_read += run.rows_read
            rows_written += run.rows_written
            rows_rejected += run.rows_rejected

            progress.set_postfix(success=success_count, failed=failed_count, rows=rows_read)
            progress.finish_job(success=run.status is JobStatus.SUCCESS)

            total_batches, avg_batch, p95_batch = stats.get_stats()
            job_stats.append(
                JobStat(
                    job_name=job.name,
                    status=run.status.value,
                    rows_read=run.rows_read,
                    rows_written=run.rows_written,
                    rows_rejected=run.rows_rejected,
                    elapsed_seconds=run.elapsed_seconds,
                    total_batches=total_batches,
                    avg_batch_seconds=avg_batch,
                    p95_batch_seconds=p95_batch,
                )
            )

    try:
        path = error_log.flush()
    except OSError as e:
        logger.warning("error log could not be written: %s", e)
    else:
        if path is not None:
            logger.info("error log: %s", path)

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    throughput_rps = rows_read / elapsed_seconds if elapsed_seconds > 0 else 0.0

    return ProcessingResult(
        success_jobs=success_count,
        failed_jobs=failed_count,
        total_rows_read=rows_read,
        total_rows_written=rows_written,
        total_rows_rejected=rows_rejected,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_rows_per_sec=throughput_rps,
        job_stats=job_stats,
    )
