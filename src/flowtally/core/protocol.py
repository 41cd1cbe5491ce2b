"""IP protocol number translation for flow-log records."""

from __future__ import annotations

# IANA protocol numbers recognized in flow logs.
PROTOCOL_NAMES: dict[str, str] = {
    "6": "tcp",
    "17": "udp",
    "1": "icmp",
}


def translate_protocol(number: str) -> str | None:
    """Translate a protocol number to its canonical lowercase name.

    Args:
        number: Protocol number exactly as it appears in the log.

    Returns:
        "tcp", "udp" or "icmp", or None if the number is not recognized.
    """
    return PROTOCOL_NAMES.get(number)


def is_known_protocol(number: str) -> bool:
    """Check whether a protocol number can be classified."""
    return number in PROTOCOL_NAMES
