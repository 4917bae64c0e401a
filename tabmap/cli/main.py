from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..core.inference import infer_schema
from ..db.connection import db_connection
from ..db.source import DbRowSource
from ..errors import TabmapError
from ..io.contracts import RowSource
from ..io.csv_file import CsvRowSource
from ..io.json_file import JsonRowSource
from ..io.xml_file import DEFAULT_ROOT_ELEMENT, DEFAULT_ROW_ELEMENT, XmlRowSource
from ..logging.init import log_summary, setup_logging
from ..models.config_models import EndpointConfig, PipelineConfig
from ..services.conversion import Connect
from ..services.orchestrator import ProcessingError, process_all
from ..services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- load ``.env`` (overrides the process environment, so PG* settings in it win)
- load and validate the pipeline config
- ``--inspect-data``: print inferred types and sample rows of every reader, then exit
- otherwise run every job and log the SUMMARY line
"""

__all__ = [
    "EXIT_SUCCESS_ALL",
    "EXIT_PARTIAL_FAILURE",
    "EXIT_FATAL",
    "main",
]

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = True) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="tabmap", description="Mapping-driven CSV / PostgreSQL table conversion")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Pipeline config file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--inspect-data", action="store_true", help="Print inferred source types & first rows then exit"
    )
    return p.parse_args(argv)


def _print_sample(source: RowSource) -> None:
    rows = []
    while len(rows) < INSPECT_SAMPLE_ROWS:
        row = source.next_raw_row()
        if row is None:
            break
        rows.append(row)
    if not rows:
        print("  no data rows")
        return
    headers = source.header_names or [f"Column{i + 1}" for i in range(len(rows[0]))]
    print(f"  types={infer_schema(headers, rows[0])}")
    for row in rows:
        print(f"  row={dict(zip(headers, row, strict=False))}")


def _inspect_endpoint(endpoint: EndpointConfig, connect: Connect) -> None:
    mapping = endpoint.mapping
    if endpoint.kind == "csv":
        _print_sample(
            CsvRowSource(
                mapping.source_location,
                has_header=mapping.get_bool_option("hasHeaderRow"),
                allow_empty_values=True,
                delimiter=mapping.get_option("delimiter", ","),
            )
        )
        return
    if endpoint.kind == "json":
        _print_sample(JsonRowSource(mapping.source_location, root_element=mapping.get_option("rootElement")))
        return
    if endpoint.kind == "xml":
        _print_sample(
            XmlRowSource(
                mapping.source_location,
                root_element=mapping.get_option("rootElement", DEFAULT_ROOT_ELEMENT),
                row_element=mapping.get_option("rowElement", DEFAULT_ROW_ELEMENT),
            )
        )
        return
    with connect(mapping.source_location, mapping.get_option("username"), mapping.get_option("password")) as cur:
        _print_sample(
            DbRowSource(cur, table_name=mapping.get_option("tableName"), query=mapping.get_option("query"))
        )


def _inspect_data(cfg: PipelineConfig, connect: Connect) -> int:
    for job in cfg.jobs:
        print(f"JOB: {job.name} reader={job.reader.kind} source={job.reader.mapping.source_location}")
        try:
            _inspect_endpoint(job.reader, connect)
        except TabmapError as e:
            print(f"  read_error: {e}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None, connect: Connect = db_connection) -> int:
    # Only read sys.argv when argv is None, so main([]) in tests ignores pytest's own flags
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg, connect)

    logger.info(f"Running {len(cfg.jobs)} job(s) from: {args.config}")
    try:
        result = process_all(cfg, connect=connect)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.failed_jobs > 0 or result.total_rows_rejected > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
