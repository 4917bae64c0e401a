"""Row sources and sinks: the contracts plus CSV, JSON, XML and in-memory collaborators."""

from .contracts import RowSink, RowSource, iter_rows
from .csv_file import CsvRowSink, CsvRowSource, read_csv_inferred
from .json_file import JsonRowSink, JsonRowSource
from .memory import ListRowSink, ListRowSource
from .xml_file import XmlRowSink, XmlRowSource

__all__ = [
    "RowSource",
    "RowSink",
    "iter_rows",
    "CsvRowSource",
    "CsvRowSink",
    "read_csv_inferred",
    "JsonRowSource",
    "JsonRowSink",
    "XmlRowSource",
    "XmlRowSink",
    "ListRowSource",
    "ListRowSink",
]
