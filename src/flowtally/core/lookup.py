"""Port/protocol to tag lookup table.

The lookup source is a CSV-like text file whose first line is a header and
whose remaining lines read ``port,protocol,tag``. The table is built once,
before any worker starts, and is only read afterwards.
"""

from __future__ import annotations

import errno
import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import NamedTuple

logger = logging.getLogger(__name__)

DEFAULT_TAG = "Untagged"


class ClassificationKey(NamedTuple):
    """Destination port and canonical protocol name of a flow record.

    Attributes:
        port: Destination port, verbatim from the source.
        protocol: Lowercase protocol name ("tcp", "udp", "icmp").
    """

    port: str
    protocol: str

    def __str__(self) -> str:
        return f"{self.port},{self.protocol}"


class LookupTable(Mapping[ClassificationKey, str]):
    """Read-only mapping from ClassificationKey to tag.

    Instances have no mutators, so worker threads read them without locking.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[ClassificationKey, str] | None = None) -> None:
        self._entries: dict[ClassificationKey, str] = dict(entries or {})

    def __getitem__(self, key: ClassificationKey) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[ClassificationKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"LookupTable({len(self._entries)} entries)"

    def get_tag(self, key: ClassificationKey, default: str = DEFAULT_TAG) -> str:
        """Get the tag for a key.

        Args:
            key: Port/protocol key.
            default: Tag returned when the key has no entry.

        Returns:
            The mapped tag, or default.
        """
        return self._entries.get(key, default)

    @property
    def unique_tags(self) -> list[str]:
        """Sorted list of distinct tags in the table."""
        return sorted(set(self._entries.values()))


def decode_error(path: Path, encoding: str, error: UnicodeDecodeError) -> OSError:
    """Wrap a decoding failure as an OSError naming the file."""
    reason = f"not valid {encoding} text ({error.reason} at byte {error.start})"
    return OSError(errno.EILSEQ, reason, str(path))


def build_lookup_table(lines: Iterable[str]) -> LookupTable:
    """Build a lookup table from raw lines.

    The first line is a header and is skipped without inspection. Lines with
    fewer than three comma-separated fields are logged and skipped. When a key
    appears more than once the last occurrence wins.

    Args:
        lines: Lines of the lookup source, header first.

    Returns:
        The populated LookupTable.
    """
    entries: dict[ClassificationKey, str] = {}

    for line_number, line in enumerate(lines, start=1):
        if line_number == 1:
            continue

        fields = line.rstrip("\r\n").split(",")
        if len(fields) < 3:
            logger.warning(f"Skipping malformed lookup line {line_number}: {line.rstrip()!r}")
            continue

        key = ClassificationKey(fields[0].strip(), fields[1].strip().lower())
        entries[key] = fields[2].strip()

    return LookupTable(entries)


def load_lookup_table(path: str | Path, encoding: str = "utf-8") -> LookupTable:
    """Read and build a lookup table from a file.

    Args:
        path: Path to the lookup file.
        encoding: Text encoding of the file.

    Returns:
        The populated LookupTable.

    Raises:
        OSError: If the file cannot be read or decoded.
    """
    path = Path(path)
    try:
        with path.open("r", encoding=encoding) as f:
            table = build_lookup_table(f)
    except UnicodeDecodeError as e:
        raise decode_error(path, encoding, e) from e

    logger.info(f"Loaded {len(table)} lookup entries from {path}")
    return table
