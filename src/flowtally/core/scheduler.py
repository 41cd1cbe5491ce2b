"""Static batch partitioning and parallel aggregation."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from .aggregator import Aggregator
from .classifier import classify
from .lookup import DEFAULT_TAG, ClassificationKey, LookupTable

logger = logging.getLogger(__name__)

BatchCallback = Callable[[int, int], None]


def default_worker_count() -> int:
    """Number of workers to use when none is configured."""
    return os.cpu_count() or 1


def partition(records: Sequence[str], worker_count: int) -> list[Sequence[str]]:
    """Split records into contiguous batches, one per worker.

    Every batch holds ``len(records) // worker_count`` records except the
    last, which also takes the remainder. Batches are empty when there are
    more workers than records.

    Args:
        records: Full record sequence.
        worker_count: Number of batches to produce.

    Returns:
        List of exactly worker_count slices covering records once.

    Raises:
        ValueError: If worker_count is less than 1.
    """
    if worker_count < 1:
        raise ValueError("worker_count must be at least 1")

    batch_size = len(records) // worker_count
    batches: list[Sequence[str]] = []
    for i in range(worker_count):
        start = i * batch_size
        end = len(records) if i == worker_count - 1 else start + batch_size
        batches.append(records[start:end])
    return batches


def process_batch(
    batch: Sequence[str],
    lookup: LookupTable,
    aggregator: Aggregator,
    default_tag: str = DEFAULT_TAG,
) -> int:
    """Classify every record of a batch into the shared aggregator.

    Args:
        batch: Records to process.
        lookup: Port/protocol to tag table.
        aggregator: Shared frequency tables.
        default_tag: Tag for keys missing from the lookup table.

    Returns:
        Number of records counted.
    """
    counted = 0
    for line in batch:
        classified = classify(line, lookup, default_tag)
        if classified is None:
            continue
        key, tag = classified
        aggregator.record(key, tag)
        counted += 1
    return counted


def run_batches(
    batches: Sequence[Sequence[str]],
    lookup: LookupTable,
    aggregator: Aggregator,
    default_tag: str = DEFAULT_TAG,
    on_batch_done: BatchCallback | None = None,
) -> Aggregator:
    """Run one worker thread per batch and wait for all of them.

    Batches may overlap; each one is counted independently.

    Args:
        batches: Record batches, one per worker.
        lookup: Port/protocol to tag table.
        aggregator: Shared frequency tables to update.
        default_tag: Tag for keys missing from the lookup table.
        on_batch_done: Called as (batch_index, batch_size) when a batch
            finishes, from the calling thread.

    Returns:
        The aggregator, once every worker has finished.

    Raises:
        RuntimeError: If any worker failed. The first failing batch in batch
            order is reported, chained to its exception.
    """
    if not batches:
        return aggregator

    with ThreadPoolExecutor(
        max_workers=len(batches), thread_name_prefix="flowtally-worker"
    ) as executor:
        future_to_index: dict[Future[int], int] = {
            executor.submit(process_batch, batch, lookup, aggregator, default_tag): i
            for i, batch in enumerate(batches)
        }

        failures: dict[int, BaseException] = {}
        for future in as_completed(future_to_index):
            index = future_to_index[future]
            error = future.exception()
            if error is not None:
                logger.error(f"Batch {index} failed: {error}")
                failures[index] = error
                continue
            logger.debug(f"Batch {index} done: {future.result()} of {len(batches[index])} records counted")
            if on_batch_done is not None:
                on_batch_done(index, len(batches[index]))

    if failures:
        index = min(failures)
        raise RuntimeError(
            f"Aggregation failed in batch {index} ({len(failures)} of {len(batches)} batches failed)"
        ) from failures[index]

    return aggregator


def run(
    records: Sequence[str],
    lookup: LookupTable,
    worker_count: int | None = None,
    aggregator: Aggregator | None = None,
    default_tag: str = DEFAULT_TAG,
    on_batch_done: BatchCallback | None = None,
) -> tuple[dict[str, int], dict[ClassificationKey, int]]:
    """Aggregate records in parallel into tag and port/protocol counts.

    Args:
        records: Flow-log lines.
        lookup: Port/protocol to tag table, read-only during the run.
        worker_count: Number of batches and worker threads. Defaults to the
            available CPU count.
        aggregator: Existing tables to accumulate into. A fresh Aggregator
            is used when omitted.
        default_tag: Tag for keys missing from the lookup table.
        on_batch_done: Progress callback, see run_batches.

    Returns:
        (tag_counts, port_protocol_counts) as plain dicts.

    Raises:
        ValueError: If worker_count is less than 1.
        RuntimeError: If any worker failed; no partial tables are returned.
    """
    if worker_count is None:
        worker_count = default_worker_count()
    if aggregator is None:
        aggregator = Aggregator()

    batches = partition(records, worker_count)
    logger.info(f"Aggregating {len(records)} records with {worker_count} workers")

    run_batches(batches, lookup, aggregator, default_tag=default_tag, on_batch_done=on_batch_done)
    return aggregator.tag_counts.snapshot(), aggregator.port_protocol_counts.snapshot()
