"""Pytest fixtures and configuration for FlowTally tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from flowtally.core.lookup import LookupTable, build_lookup_table

LOOKUP_LINES = [
    "dstport,protocol,tag",
    "80,tcp,tag1",
    "53,udp,tag2",
]

# Two classifiable records and one malformed line.
SCENARIO_RECORDS = [
    "a b c d e 80 f 6",
    "a b c d e 53 f 17",
    "bad line",
]

# Version 2 flow-log records in the common 14-field layout.
FLOW_LOG_LINES = [
    "2 123456789012 eni-0a1b2c3d 10.0.1.201 198.51.100.2 443 49153 6 25 20000 1620140761 1620140821 ACCEPT OK",
    "2 123456789012 eni-4d3c2b1a 192.168.1.100 203.0.113.101 23 49154 6 15 12000 1620140761 1620140821 REJECT OK",
    "2 123456789012 eni-5e6f7g8h 192.168.1.101 198.51.100.3 25 49155 6 10 8000 1620140761 1620140821 ACCEPT OK",
    "2 123456789012 eni-9h8g7f6e 172.16.0.100 203.0.113.102 110 49156 6 12 9000 1620140761 1620140821 ACCEPT OK",
    "2 123456789012 eni-7i8j9k0l 172.16.0.101 192.0.2.203 993 49157 6 8 5000 1620140761 1620140821 ACCEPT OK",
    "2 123456789012 eni-6m7n8o9p 10.0.2.200 198.51.100.4 143 49158 6 18 14000 1620140761 1620140821 ACCEPT OK",
    "2 123456789012 eni-1a2b3c4d 192.168.0.1 203.0.113.12 1024 80 6 10 5000 1620140661 1620140721 ACCEPT OK",
    "2 123456789012 eni-1a2b3c4d 203.0.113.12 192.168.0.1 80 1024 6 12 6000 1620140661 1620140721 ACCEPT OK",
    "2 123456789012 eni-1a2b3c4d 10.0.1.102 172.217.7.228 1030 443 6 8 4000 1620140661 1620140721 ACCEPT OK",
    "2 123456789012 eni-5f6g7h8i 10.0.2.103 52.26.198.183 56000 23 17 15 7500 1620140661 1620140721 REJECT OK",
    "2 123456789012 eni-9k10l11m 192.168.1.5 51.15.99.115 49321 25 47 20 10000 1620140661 1620140721 ACCEPT OK",
    "malformed",
]

FLOW_LOOKUP_LINES = [
    "dstport,protocol,tag",
    "25,tcp,sv_P1",
    "68,udp,sv_P2",
    "23,tcp,sv_P1",
    "31,udp,SV_P3",
    "443,tcp,sv_P2",
    "22,tcp,sv_P4",
    "3389,tcp,sv_P5",
    "0,icmp,sv_P5",
    "110,tcp,email",
    "993,tcp,email",
    "143,tcp,email",
]


@pytest.fixture
def lookup_table() -> LookupTable:
    """Lookup table with 80/tcp -> tag1 and 53/udp -> tag2."""
    return build_lookup_table(LOOKUP_LINES)


@pytest.fixture
def scenario_records() -> list[str]:
    """Two valid records and one malformed line."""
    return list(SCENARIO_RECORDS)


@pytest.fixture
def flow_log_records() -> list[str]:
    """Realistic flow-log records."""
    return list(FLOW_LOG_LINES)


@pytest.fixture
def flow_lookup_table() -> LookupTable:
    """Lookup table matching the realistic flow-log records."""
    return build_lookup_table(FLOW_LOOKUP_LINES)


@pytest.fixture
def input_files(tmp_path: Path) -> tuple[Path, Path]:
    """Flow-log and lookup files on disk."""
    flow_log = tmp_path / "flow_logs.txt"
    flow_log.write_text("\n".join(FLOW_LOG_LINES) + "\n", encoding="utf-8")
    lookup = tmp_path / "lookup_table.csv"
    lookup.write_text("\n".join(FLOW_LOOKUP_LINES) + "\n", encoding="utf-8")
    return flow_log, lookup
