"""End-to-end processing tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

import flowtally as ft
from flowtally import Config, FlowLogProcessor
from flowtally.core import pipeline
from flowtally.core.lookup import ClassificationKey

EXPECTED_TAG_COUNTS = {"Untagged": 4, "email": 3, "sv_P1": 2, "sv_P2": 1}


class TestFlowLogProcessor:
    """End-to-end tests for FlowLogProcessor."""

    @pytest.fixture
    def config(self, input_files: tuple[Path, Path], tmp_path: Path) -> Config:
        """Configuration pointing at the sample inputs."""
        flow_log, lookup = input_files
        return Config(
            flow_log_path=str(flow_log),
            lookup_path=str(lookup),
            output_dir=str(tmp_path / "output"),
            num_workers=3,
        )

    def test_processor_default_config(self) -> None:
        """Test a processor can be created without config."""
        assert FlowLogProcessor().config == Config()

    def test_run(self, config: Config) -> None:
        """Test counts and written reports."""
        result = FlowLogProcessor(config).run()

        assert result.tag_counts == EXPECTED_TAG_COUNTS
        assert result.port_protocol_counts[ClassificationKey("443", "tcp")] == 1
        assert result.port_protocol_counts[ClassificationKey("56000", "udp")] == 1
        assert ClassificationKey("49321", "gre") not in result.port_protocol_counts
        assert result.records_total == 12
        assert result.records_counted == 10

        tag_report = config.tag_counts_path.read_text().splitlines()
        assert tag_report == ["Tag,Count", "Untagged,4", "email,3", "sv_P1,2", "sv_P2,1"]
        pair_report = config.port_protocol_counts_path.read_text().splitlines()
        assert len(pair_report) == 1 + len(result.port_protocol_counts)

    @pytest.mark.parametrize("workers", [1, 2, 5, 40])
    def test_worker_count_does_not_change_result(self, config: Config, workers: int) -> None:
        """Test the same input gives the same counts for any worker count."""
        config.num_workers = workers
        processor = FlowLogProcessor(config)
        result = processor.aggregate(processor.read_flow_log(), processor.load_lookup())
        assert result.tag_counts == EXPECTED_TAG_COUNTS

    def test_empty_flow_log_writes_headers(self, config: Config) -> None:
        """Test empty input still produces both reports."""
        Path(config.flow_log_path).write_text("")

        FlowLogProcessor(config).run()

        assert config.tag_counts_path.read_text() == "Tag,Count\n"
        assert config.port_protocol_counts_path.read_text() == "Port,Protocol,Count\n"

    def test_custom_default_tag(self, config: Config) -> None:
        """Test the configured default tag replaces Untagged."""
        config.default_tag = "unknown"
        processor = FlowLogProcessor(config)
        result = processor.aggregate(processor.read_flow_log(), processor.load_lookup())
        assert result.tag_counts["unknown"] == 4
        assert "Untagged" not in result.tag_counts

    def test_missing_lookup(self, config: Config) -> None:
        """Test a missing lookup file fails before any output."""
        config.lookup_path = str(Path(config.lookup_path).with_name("missing.csv"))

        with pytest.raises(FileNotFoundError) as exc_info:
            FlowLogProcessor(config).run()

        assert str(exc_info.value.filename) == config.lookup_path
        assert not Path(config.output_dir).exists()

    def test_second_report_failure_removes_first(self, config: Config) -> None:
        """Test a failed report write leaves no report behind."""
        with patch.object(
            pipeline, "write_port_protocol_counts", side_effect=PermissionError(13, "denied")
        ):
            with pytest.raises(PermissionError):
                FlowLogProcessor(config).run()

        assert not config.tag_counts_path.exists()
        assert not config.port_protocol_counts_path.exists()

    def test_undecodable_flow_log(self, config: Config) -> None:
        """Test a decoding failure names the flow log and writes nothing."""
        Path(config.flow_log_path).write_bytes(b"a b c d e 80 f 6\n\xff\xfe\n")

        with pytest.raises(OSError) as exc_info:
            FlowLogProcessor(config).run()

        assert exc_info.value.filename == config.flow_log_path
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
        assert not Path(config.output_dir).exists()

    def test_only_newlines_separate_records(self, config: Config) -> None:
        """Test form feeds and other Unicode separators stay inside a record."""
        Path(config.flow_log_path).write_text(
            "a b c d e 80 f 6\x0cx y z w v 53 u 17\nq q q q q 25 q 6\x1cq\r\n",
            encoding="utf-8",
        )
        processor = FlowLogProcessor(config)

        records = processor.read_flow_log()
        result = processor.aggregate(records, processor.load_lookup())

        assert records == [
            "a b c d e 80 f 6\x0cx y z w v 53 u 17",
            "q q q q q 25 q 6\x1cq",
        ]
        assert result.records_total == 2
        assert result.records_counted == 0
        assert result.tag_counts == {}


class TestProcessFunction:
    """Tests for the process convenience function."""

    def test_process(self, input_files: tuple[Path, Path]) -> None:
        """Test aggregation without writing."""
        flow_log, lookup = input_files
        result = ft.process(flow_log, lookup, num_workers=2)
        assert result.tag_counts == EXPECTED_TAG_COUNTS

    def test_process_write(self, input_files: tuple[Path, Path], tmp_path: Path) -> None:
        """Test aggregation with reports."""
        flow_log, lookup = input_files
        out = tmp_path / "reports"
        ft.process(flow_log, lookup, write=True, output_dir=str(out))
        assert (out / "tag_counts.csv").exists()
        assert (out / "port_protocol_counts.csv").exists()
