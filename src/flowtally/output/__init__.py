"""Output format handlers for count reports."""

from __future__ import annotations

from .formats import (
    PORT_PROTOCOL_COUNT_COLUMNS,
    TAG_COUNT_COLUMNS,
    count_rows,
    to_csv,
    to_csv_stream,
    to_dataframe,
    write_port_protocol_counts,
    write_tag_counts,
)

__all__ = [
    "PORT_PROTOCOL_COUNT_COLUMNS",
    "TAG_COUNT_COLUMNS",
    "count_rows",
    "to_csv",
    "to_csv_stream",
    "to_dataframe",
    "write_port_protocol_counts",
    "write_tag_counts",
]
