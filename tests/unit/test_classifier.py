"""Tests for flow-log record classification."""

from __future__ import annotations

import pytest

from flowtally.core.classifier import classify, parse_key
from flowtally.core.lookup import ClassificationKey, LookupTable


class TestParseKey:
    """Tests for parse_key."""

    def test_fields_5_and_7(self) -> None:
        """Test the port and protocol come from fields 5 and 7."""
        assert parse_key("a b c d e 80 f 6") == ClassificationKey("80", "tcp")

    def test_port_used_verbatim(self) -> None:
        """Test the port is not validated as numeric."""
        assert parse_key("a b c d e http f 17") == ClassificationKey("http", "udp")

    def test_exactly_seven_fields(self) -> None:
        """Test records shorter than 8 fields are skipped."""
        assert parse_key("a b c d e 80 6") is None

    def test_trailing_newline_stripped(self) -> None:
        """Test line terminators do not leak into the protocol field."""
        assert parse_key("a b c d e 80 f 6\n") == ClassificationKey("80", "tcp")
        assert parse_key("a b c d e 80 f 1\r\n") == ClassificationKey("80", "icmp")

    def test_double_space_shifts_fields(self) -> None:
        """Test fields are split on single spaces."""
        assert parse_key("a  b c d e 80 f 6") is None
        assert parse_key("a b c d e 80  6 1") == ClassificationKey("80", "tcp")

    def test_unknown_protocol(self) -> None:
        """Test an unmapped protocol number is skipped."""
        assert parse_key("a b c d e 80 f 7") is None


class TestClassify:
    """Tests for classify."""

    def test_tagged(self, lookup_table: LookupTable) -> None:
        """Test a key found in the lookup table."""
        assert classify("a b c d e 80 f 6", lookup_table) == (ClassificationKey("80", "tcp"), "tag1")
        assert classify("a b c d e 53 f 17", lookup_table) == (ClassificationKey("53", "udp"), "tag2")

    def test_untagged(self, lookup_table: LookupTable) -> None:
        """Test a missing key defaults to Untagged."""
        line = "2 123456789012 eni-2d2e2f3g 192.168.2.7 77.88.55.80 49153 993 6 7 3500 1620140661 1620140721 ACCEPT OK"
        assert classify(line, lookup_table) == (ClassificationKey("49153", "tcp"), "Untagged")

    def test_custom_default_tag(self, lookup_table: LookupTable) -> None:
        """Test the default tag can be overridden."""
        assert classify("a b c d e 22 f 6", lookup_table, "other") == (
            ClassificationKey("22", "tcp"),
            "other",
        )

    @pytest.mark.parametrize(
        "line",
        ["bad line", "", "a b c d e 80 f 7", "a b c d e 80 f", "invalid log line without enough fields"],
    )
    def test_skipped(self, line: str, lookup_table: LookupTable) -> None:
        """Test malformed and unclassifiable records are skipped."""
        assert classify(line, lookup_table) is None

    def test_deterministic(self, flow_log_records: list[str], flow_lookup_table: LookupTable) -> None:
        """Test repeated classification gives the same answer."""
        first = [classify(line, flow_lookup_table) for line in flow_log_records]
        second = [classify(line, flow_lookup_table) for line in flow_log_records]
        assert first == second
