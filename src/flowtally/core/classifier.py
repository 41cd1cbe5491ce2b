"""Per-record classification of flow-log lines."""

from __future__ import annotations

from .lookup import DEFAULT_TAG, ClassificationKey, LookupTable
from .protocol import translate_protocol

MIN_FIELDS = 8
DST_PORT_FIELD = 5
PROTOCOL_FIELD = 7


def parse_key(line: str) -> ClassificationKey | None:
    """Extract the port/protocol key from a flow-log line.

    Args:
        line: One flow-log record, fields separated by single spaces.

    Returns:
        The key, or None if the line is too short or its protocol
        number is not recognized.
    """
    fields = line.rstrip("\r\n").split(" ")
    if len(fields) < MIN_FIELDS:
        return None

    protocol = translate_protocol(fields[PROTOCOL_FIELD])
    if protocol is None:
        return None

    return ClassificationKey(fields[DST_PORT_FIELD], protocol)


def classify(
    line: str,
    lookup: LookupTable,
    default_tag: str = DEFAULT_TAG,
) -> tuple[ClassificationKey, str] | None:
    """Classify a flow-log line and resolve its tag.

    Malformed and unclassifiable lines are skipped without logging; they are
    routine in flow data.

    Args:
        line: One flow-log record.
        lookup: Port/protocol to tag table.
        default_tag: Tag used when the key has no lookup entry.

    Returns:
        (key, tag), or None when the record should be skipped.
    """
    key = parse_key(line)
    if key is None:
        return None
    return key, lookup.get_tag(key, default_tag)
