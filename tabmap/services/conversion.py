from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Any

from ..core.table import Table
from ..db.connection import db_connection
from ..db.sink import DbRowSink
from ..db.source import DbRowSource
from ..errors import ROW_LEVEL_ERRORS, ConfigurationError
from ..io.contracts import RowSink, RowSource, iter_rows
from ..io.csv_file import CsvRowSink, CsvRowSource
from ..io.json_file import JsonRowSink, JsonRowSource
from ..io.xml_file import DEFAULT_ROOT_ELEMENT, DEFAULT_ROW_ELEMENT, XmlRowSink, XmlRowSource
from ..logging.error_log import ErrorLogBuffer
from ..mapping.model import MappingConfiguration
from ..mapping.resolution import build_header_index, output_header, resolve_output_row, resolve_row
from ..models.error_record import ErrorRecord
from ..models.processing_result import BatchStatsAccumulator, ConversionResult

"""Conversion passes between external row collaborators and a Table.

Reject-row policy (both directions, every collaborator):
- a row raising ConversionError or MissingColumnError is rejected as a whole, never
  half-inserted and never null-substituted
- the rejection is logged at ERROR, appended to the error log (if one is given) and counted
- ``strict=True`` re-raises the first rejection instead

Configuration problems (None table/config, blank source location, empty mappings) raise
ConfigurationError before any row is touched. Missing-source-column warnings are logged once
per distinct message per pass.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "Connect",
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
]

Connect = Callable[[str, str | None, str | None], AbstractContextManager[Any]]


def _check(table: Table | None, config: MappingConfiguration | None) -> None:
    if table is None:
        raise ConfigurationError("Table cannot be null")
    if config is None:
        raise ConfigurationError("Mapping configuration cannot be null")
    config.validate()


class _PassLog:
    """Per-pass bookkeeping of rejections and distinct warnings."""

    def __init__(
        self, config: MappingConfiguration, job_name: str | None, error_log: ErrorLogBuffer | None
    ) -> None:
        self.config = config
        self.label = job_name or config.source_location
        self.job_name = job_name or ""
        self.error_log = error_log
        self.rejected = 0
        self._warnings: dict[str, None] = {}

    def warn(self, messages: tuple[str, ...]) -> None:
        for message in messages:
            if message not in self._warnings:
                self._warnings[message] = None
                logger.warning("%s: %s", self.label, message)

    def reject(self, row_number: int, exc: Exception) -> None:
        self.rejected += 1
        logger.error("%s: row %d rejected: %s", self.label, row_number, exc)
        if self.error_log is not None:
            self.error_log.append(
                ErrorRecord.from_exception(self.job_name, self.config.source_location, row_number, exc)
            )

    @property
    def warnings(self) -> tuple[str, ...]:
        return tuple(self._warnings)


def read_table(
    table: Table,
    config: MappingConfiguration,
    source: RowSource,
    *,
    strict: bool = False,
    error_log: ErrorLogBuffer | None = None,
    job_name: str | None = None,
) -> ConversionResult:
    """Fill ``table`` from ``source`` through ``config``.

    The table schema is replaced by the mapping's target columns (destructive, see
    ``Table.set_columns``). The ``createDefaultValue`` option, when present, sets the table's
    default-fill policy for the pass.
    """
    _check(table, config)
    table.set_columns(config.create_column_definitions())
    table.create_default_value = config.get_bool_option(
        "createDefaultValue", default=table.create_default_value
    )

    case_sensitive = source.case_sensitive_headers
    header_index = (
        build_header_index(source.header_names, case_sensitive=case_sensitive)
        if source.has_header
        else None
    )
    if source.has_header and not header_index:
        logger.warning("%s: expected a header row but found none", job_name or config.source_location)

    log = _PassLog(config, job_name, error_log)
    processed = 0
    for processed, raw in enumerate(iter_rows(source), start=1):
        try:
            resolved = resolve_row(
                config, raw, header_index, row_number=processed, case_sensitive=case_sensitive
            )
            log.warn(resolved.warnings)
            table.add_typed_row(resolved.values, originals=resolved.raw_values)
        except ROW_LEVEL_ERRORS as e:
            if strict:
                raise
            log.reject(processed, e)

    if processed == 0:
        logger.warning("%s: no data rows found", log.label)
    return ConversionResult(
        direction="read",
        rows_processed=processed,
        rows_accepted=processed - log.rejected,
        rows_rejected=log.rejected,
        warnings=log.warnings,
    )


def write_table(
    table: Table,
    config: MappingConfiguration,
    sink: RowSink,
    *,
    strict: bool = False,
    error_log: ErrorLogBuffer | None = None,
    job_name: str | None = None,
) -> ConversionResult:
    """Emit every row of ``table`` into ``sink`` through ``config``.

    The header (target column names) is always offered to the sink; whether it is written is
    the sink's decision. The sink is not closed here.
    """
    _check(table, config)
    sink.write_header(output_header(config))

    log = _PassLog(config, job_name, error_log)
    for index in range(table.row_count):
        try:
            emitted = resolve_output_row(config, table, index)
        except ROW_LEVEL_ERRORS as e:
            if strict:
                raise
            log.reject(index + 1, e)
            continue
        log.warn(emitted.warnings)
        sink.write_row(emitted.values)

    return ConversionResult(
        direction="write",
        rows_processed=table.row_count,
        rows_accepted=table.row_count - log.rejected,
        rows_rejected=log.rejected,
        warnings=log.warnings,
    )


def read_csv(table: Table, config: MappingConfiguration, **kwargs: Any) -> ConversionResult:
    """Read the CSV file at ``config.source_location``.

    Options: ``hasHeaderRow`` (default false), ``allowEmptyValues`` (default false),
    ``delimiter`` (default ``,``).
    """
    _check(table, config)
    source = CsvRowSource(
        config.source_location,
        has_header=config.get_bool_option("hasHeaderRow"),
        allow_empty_values=config.get_bool_option("allowEmptyValues"),
        delimiter=config.get_option("delimiter", ","),
    )
    return read_table(table, config, source, **kwargs)


def write_csv(table: Table, config: MappingConfiguration, **kwargs: Any) -> ConversionResult:
    """Write ``table`` to the CSV file at ``config.source_location``.

    Options: ``withHeaderRow`` (default false), ``delimiter`` (default ``,``).
    """
    _check(table, config)
    sink = CsvRowSink(
        config.source_location,
        with_header_row=config.get_bool_option("withHeaderRow"),
        delimiter=config.get_option("delimiter", ","),
    )
    with sink:
        return write_table(table, config, sink, **kwargs)


def read_json(table: Table, config: MappingConfiguration, **kwargs: Any) -> ConversionResult:
    """Read the JSON array of objects at ``config.source_location``.

    Options: ``rootElement`` (key of the array when the file root is an object).
    """
    _check(table, config)
    source = JsonRowSource(config.source_location, root_element=config.get_option("rootElement"))
    return read_table(table, config, source, **kwargs)


def write_json(table: Table, config: MappingConfiguration, **kwargs: Any) -> ConversionResult:
    """Write ``table`` as a JSON array of objects keyed by target column name.

    Options: ``prettyPrint`` (default false).
    """
    _check(table, config)
    sink = JsonRowSink(config.source_location, pretty_print=config.get_bool_option("prettyPrint"))
    with sink:
        return write_table(table, config, sink, **kwargs)


def read_xml(table: Table, config: MappingConfiguration, **kwargs: Any) -> ConversionResult:
    """Read the XML file at ``config.source_location``.

    Options: ``rootElement`` (default ``data``), ``rowElement`` (default ``row``).
    """
    _check(table, config)
    source = XmlRowSource(
        config.source_location,
        root_element=config.get_option("rootElement", DEFAULT_ROOT_ELEMENT),
        row_element=config.get_option("rowElement", DEFAULT_ROW_ELEMENT),
    )
    return read_table(table, config, source, **kwargs)


def write_xml(table: Table, config: MappingConfiguration, **kwargs: Any) -> ConversionResult:
    """Write ``table`` to the XML file at ``config.source_location``.

    Options: ``rootElement`` (default ``data``), ``rowElement`` (default ``row``),
    ``indentOutput`` (default false).
    """
    _check(table, config)
    sink = XmlRowSink(
        config.source_location,
        root_element=config.get_option("rootElement", DEFAULT_ROOT_ELEMENT),
        row_element=config.get_option("rowElement", DEFAULT_ROW_ELEMENT),
        indent_output=config.get_bool_option("indentOutput"),
    )
    with sink:
        return write_table(table, config, sink, **kwargs)


def read_db(
    table: Table,
    config: MappingConfiguration,
    cursor: Any = None,
    *,
    connect: Connect = db_connection,
    **kwargs: Any,
) -> ConversionResult:
    """Read rows from the database at ``config.source_location``.

    Options: ``query`` or ``tableName``, ``username``/``password``. With ``cursor`` given the
    caller owns the connection; otherwise one is opened through ``connect``.
    """
    _check(table, config)
    query = config.get_option("query")
    table_name = config.get_option("tableName")
    if not query and not table_name:
        raise ConfigurationError("Either 'query' or 'tableName' option must be provided")
    if cursor is not None:
        return read_table(table, config, DbRowSource(cursor, table_name=table_name, query=query), **kwargs)
    with connect(
        config.source_location, config.get_option("username"), config.get_option("password")
    ) as cur:
        return read_table(table, config, DbRowSource(cur, table_name=table_name, query=query), **kwargs)


def write_db(
    table: Table,
    config: MappingConfiguration,
    cursor: Any = None,
    *,
    connect: Connect = db_connection,
    stats: BatchStatsAccumulator | None = None,
    **kwargs: Any,
) -> ConversionResult:
    """Insert ``table`` rows into ``tableName`` at ``config.source_location``.

    Options: ``tableName`` (required), ``createTable`` (default false), ``pageSize``
    (default 1000), ``username``/``password``.
    """
    _check(table, config)

    def _run(cur: Any) -> ConversionResult:
        sink = DbRowSink(
            cur,
            config.get_option("tableName"),
            config.create_column_definitions(),
            create_table=config.get_bool_option("createTable"),
            page_size=int(config.get_option("pageSize", 1000)),
            stats=stats,
        )
        result = write_table(table, config, sink, **kwargs)
        sink.close()
        return result

    if cursor is not None:
        return _run(cursor)
    with connect(
        config.source_location, config.get_option("username"), config.get_option("password")
    ) as cur:
        return _run(cur)
