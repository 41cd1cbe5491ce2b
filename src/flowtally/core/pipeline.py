"""End-to-end processing of a flow log against a lookup table."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

from ..output.formats import write_port_protocol_counts, write_tag_counts
from .aggregator import AggregationResult, Aggregator
from .config import Config
from .lookup import LookupTable, decode_error, load_lookup_table
from .scheduler import BatchCallback, partition, run_batches

logger = logging.getLogger(__name__)


class FlowLogProcessor:
    """Orchestrates reading, aggregation and reporting for one run.

    Example:
        >>> processor = FlowLogProcessor(Config(num_workers=4))
        >>> result = processor.run()
        >>> result.tag_counts["Untagged"]
    """

    def __init__(self, config: Config | None = None) -> None:
        """Initialize the processor.

        Args:
            config: Run configuration. Defaults to Config().
        """
        self.config = config or Config()

    def read_flow_log(self, path: str | Path | None = None) -> list[str]:
        """Read all flow-log records into memory.

        Args:
            path: Flow-log file. Defaults to config.flow_log_path.

        Returns:
            Lines without their terminators.

        Raises:
            OSError: If the file cannot be read or decoded.
        """
        path = Path(path or self.config.flow_log_path)
        try:
            with path.open("r", encoding=self.config.encoding) as f:
                records = [line.rstrip("\r\n") for line in f]
        except UnicodeDecodeError as e:
            error = decode_error(path, self.config.encoding, e)
            logger.error(f"Failed to read flow log {path}: {error}")
            raise error from e
        except OSError as e:
            logger.error(f"Failed to read flow log {path}: {e}")
            raise

        logger.info(f"Read {len(records)} flow-log records from {path}")
        return records

    def load_lookup(self, path: str | Path | None = None) -> LookupTable:
        """Build the lookup table from file.

        Args:
            path: Lookup file. Defaults to config.lookup_path.

        Returns:
            The lookup table.

        Raises:
            OSError: If the file cannot be read or decoded.
        """
        path = Path(path or self.config.lookup_path)
        try:
            return load_lookup_table(path, encoding=self.config.encoding)
        except OSError as e:
            logger.error(f"Failed to read lookup table {path}: {e}")
            raise

    def aggregate(
        self,
        records: list[str],
        lookup: LookupTable,
        on_batch_done: BatchCallback | None = None,
    ) -> AggregationResult:
        """Count records in parallel.

        Args:
            records: Flow-log lines.
            lookup: Port/protocol to tag table.
            on_batch_done: Progress callback, called once per batch.

        Returns:
            Final frequency tables.

        Raises:
            RuntimeError: If any worker failed.
        """
        worker_count = self.config.worker_count
        aggregator = Aggregator()
        batches = partition(records, worker_count)

        start = time.perf_counter()
        logger.info(f"Aggregating {len(records)} records with {worker_count} workers")
        run_batches(
            batches,
            lookup,
            aggregator,
            default_tag=self.config.default_tag,
            on_batch_done=on_batch_done,
        )
        result = aggregator.result(records_total=len(records))

        logger.info(
            f"Counted {result.records_counted} of {result.records_total} records "
            f"into {len(result.tag_counts)} tags and "
            f"{len(result.port_protocol_counts)} port/protocol pairs "
            f"in {time.perf_counter() - start:.2f}s"
        )
        return result

    def write_reports(self, result: AggregationResult) -> tuple[Path, Path]:
        """Write both count reports.

        If the second report cannot be written the first one is removed, so
        a failed run never leaves a single fresh report behind.

        Args:
            result: Completed aggregation.

        Returns:
            Paths of the tag report and the port/protocol report.

        Raises:
            OSError: If a report cannot be written.
        """
        tag_path = self.config.tag_counts_path
        port_protocol_path = self.config.port_protocol_counts_path

        try:
            Path(self.config.output_dir).mkdir(parents=True, exist_ok=True)
            write_tag_counts(result.tag_counts, tag_path, encoding=self.config.encoding)
        except OSError as e:
            logger.error(f"Failed to write {tag_path}: {e}")
            raise

        try:
            write_port_protocol_counts(
                result.port_protocol_counts,
                port_protocol_path,
                encoding=self.config.encoding,
            )
        except OSError as e:
            logger.error(f"Failed to write {port_protocol_path}: {e}")
            tag_path.unlink(missing_ok=True)
            raise

        logger.info(f"Wrote {tag_path} and {port_protocol_path}")
        return tag_path, port_protocol_path

    def run(self, on_batch_done: BatchCallback | None = None) -> AggregationResult:
        """Read inputs, aggregate and write both reports.

        Reports are written only after aggregation succeeded.

        Args:
            on_batch_done: Progress callback, called once per batch.

        Returns:
            Final frequency tables.
        """
        lookup = self.load_lookup()
        records = self.read_flow_log()
        result = self.aggregate(records, lookup, on_batch_done=on_batch_done)
        self.write_reports(result)
        return result


def process(
    flow_log_path: str | Path,
    lookup_path: str | Path,
    write: bool = False,
    **config_kwargs: Any,
) -> AggregationResult:
    """Aggregate a flow log against a lookup table.

    Convenience wrapper around FlowLogProcessor.

    Args:
        flow_log_path: Flow-log file.
        lookup_path: Lookup table file.
        write: Also write both reports to config.output_dir.
        **config_kwargs: Additional options passed to Config.

    Returns:
        Final frequency tables.

    Example:
        >>> import flowtally as ft
        >>> result = ft.process("flow_logs.txt", "lookup_table.csv", num_workers=3)
    """
    config = Config(flow_log_path=str(flow_log_path), lookup_path=str(lookup_path), **config_kwargs)
    processor = FlowLogProcessor(config)
    if write:
        return processor.run()
    return processor.aggregate(processor.read_flow_log(), processor.load_lookup())
