"""Conversion passes, pipeline orchestration, progress and SUMMARY rendering."""

from .conversion import (
    read_csv,
    read_db,
    read_json,
    read_table,
    read_xml,
    write_csv,
    write_db,
    write_json,
    write_table,
    write_xml,
)
from .orchestrator import ProcessingError, process_all, run_job
from .summary import render_summary_line

__all__ = [
    "read_table",
    "write_table",
    "read_csv",
    "write_csv",
    "read_json",
    "write_json",
    "read_xml",
    "write_xml",
    "read_db",
    "write_db",
    "ProcessingError",
    "process_all",
    "run_job",
    "render_summary_line",
]
