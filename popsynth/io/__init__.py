"""Grid file input and population output."""

from .grid_file import (
    BSE_SCHEMA,
    SSE_SCHEMA,
    BinaryGridRow,
    GridFile,
    GridHeader,
    HeaderState,
    KickParameters,
    SingleGridRow,
    open_grid,
    parse_header,
    read_grid,
    read_record,
)
from .records import RecordCursor, normalize_record, split_fields
from .writer import OutputLog, write_parquet, write_summary

__all__ = [
    "BSE_SCHEMA",
    "SSE_SCHEMA",
    "BinaryGridRow",
    "GridFile",
    "GridHeader",
    "HeaderState",
    "KickParameters",
    "SingleGridRow",
    "open_grid",
    "parse_header",
    "read_grid",
    "read_record",
    "RecordCursor",
    "normalize_record",
    "split_fields",
    "OutputLog",
    "write_parquet",
    "write_summary",
]
