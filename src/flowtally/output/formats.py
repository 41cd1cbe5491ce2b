"""Report writers for frequency tables."""

from __future__ import annotations

import csv
import os
import tempfile
from collections.abc import Hashable, Mapping, Sequence
from pathlib import Path
from typing import Any, TextIO

import pandas as pd

TAG_COUNT_COLUMNS = ("Tag", "Count")
PORT_PROTOCOL_COUNT_COLUMNS = ("Port", "Protocol", "Count")


def _key_fields(key: Hashable) -> list[Any]:
    if isinstance(key, tuple):
        return list(key)
    return [key]


def count_rows(counts: Mapping[Hashable, int]) -> list[list[Any]]:
    """Flatten a frequency table into rows, most frequent first.

    Tuple keys are expanded into one column per element. Ties are broken by
    key so the output is stable across runs.

    Args:
        counts: Frequency table.

    Returns:
        Rows of key fields followed by the count.
    """
    ordered = sorted(counts.items(), key=lambda item: (-item[1], tuple(map(str, _key_fields(item[0])))))
    return [[*_key_fields(key), count] for key, count in ordered]


def to_csv_stream(
    counts: Mapping[Hashable, int],
    file: TextIO,
    columns: Sequence[str],
    include_header: bool = True,
) -> None:
    """Write a frequency table as CSV to an open text stream.

    Args:
        counts: Frequency table.
        file: File object to write to.
        columns: Header columns, key fields first and the count last.
        include_header: Whether to write the header line.
    """
    writer = csv.writer(file, lineterminator="\n")
    if include_header:
        writer.writerow(columns)
    writer.writerows(count_rows(counts))


def to_csv(
    counts: Mapping[Hashable, int],
    path: str | Path,
    columns: Sequence[str],
    encoding: str = "utf-8",
) -> None:
    """Write a frequency table to a CSV file atomically.

    Rows go to a temporary file next to the destination, which then replaces
    the destination. A failed write leaves no partial report behind.

    Args:
        counts: Frequency table.
        path: Output file path.
        columns: Header columns.
        encoding: Output text encoding.

    Raises:
        OSError: If the file cannot be written.
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            to_csv_stream(counts, f, columns)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def write_tag_counts(counts: Mapping[str, int], path: str | Path, encoding: str = "utf-8") -> None:
    """Write the tag count report (``Tag,Count``)."""
    to_csv(counts, path, TAG_COUNT_COLUMNS, encoding=encoding)


def write_port_protocol_counts(
    counts: Mapping[Hashable, int],
    path: str | Path,
    encoding: str = "utf-8",
) -> None:
    """Write the port/protocol count report (``Port,Protocol,Count``)."""
    to_csv(counts, path, PORT_PROTOCOL_COUNT_COLUMNS, encoding=encoding)


def to_dataframe(counts: Mapping[Hashable, int], columns: Sequence[str]) -> pd.DataFrame:
    """Convert a frequency table to a DataFrame.

    Args:
        counts: Frequency table.
        columns: Column names, key fields first and the count last.

    Returns:
        DataFrame sorted by descending count.
    """
    df = pd.DataFrame(count_rows(counts), columns=list(columns))
    if df.empty:
        return df.astype({columns[-1]: "int64"})
    return df
