"""Thread-safe frequency tables shared by aggregation workers."""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from .lookup import ClassificationKey

K = TypeVar("K", bound=Hashable)

DEFAULT_SHARD_COUNT = 16


class FrequencyTable(Generic[K]):
    """Counter keyed by hashable values, safe for concurrent increments.

    Keys are spread over a fixed number of shards, each a plain dict guarded by
    its own lock, so workers touching different keys rarely contend. Entries
    are only ever inserted or incremented.
    """

    def __init__(self, shard_count: int = DEFAULT_SHARD_COUNT) -> None:
        """Initialize an empty table.

        Args:
            shard_count: Number of independently locked shards.
        """
        if shard_count < 1:
            raise ValueError("shard_count must be positive")

        self._shards: list[dict[K, int]] = [{} for _ in range(shard_count)]
        self._locks = [threading.Lock() for _ in range(shard_count)]

    def _shard_index(self, key: K) -> int:
        return hash(key) % len(self._shards)

    def increment(self, key: K, amount: int = 1) -> int:
        """Add to the count for a key, inserting it at zero first if absent.

        Args:
            key: Key to increment.
            amount: Non-negative amount to add.

        Returns:
            The count for the key after the increment.
        """
        if amount < 0:
            raise ValueError("amount must be non-negative")

        index = self._shard_index(key)
        shard = self._shards[index]
        with self._locks[index]:
            count = shard.get(key, 0) + amount
            shard[key] = count
        return count

    def get(self, key: K, default: int = 0) -> int:
        """Get the current count for a key."""
        index = self._shard_index(key)
        with self._locks[index]:
            return self._shards[index].get(key, default)

    def __contains__(self, key: object) -> bool:
        try:
            index = hash(key) % len(self._shards)
        except TypeError:
            return False
        with self._locks[index]:
            return key in self._shards[index]

    def __len__(self) -> int:
        return sum(len(shard) for shard in self._shards)

    def __iter__(self) -> Iterator[K]:
        return iter(self.snapshot())

    def total(self) -> int:
        """Sum of all counts."""
        return sum(self.snapshot().values())

    def snapshot(self) -> dict[K, int]:
        """Copy the table into a plain dict.

        Each shard is copied under its lock. Only meaningful as a final result
        once all writers have finished.
        """
        result: dict[K, int] = {}
        for shard, lock in zip(self._shards, self._locks):
            with lock:
                result.update(shard)
        return result


class Aggregator:
    """The two frequency tables produced by a run.

    Attributes:
        tag_counts: Occurrences per tag.
        port_protocol_counts: Occurrences per port/protocol key.
    """

    def __init__(self, shard_count: int = DEFAULT_SHARD_COUNT) -> None:
        self.tag_counts: FrequencyTable[str] = FrequencyTable(shard_count)
        self.port_protocol_counts: FrequencyTable[ClassificationKey] = FrequencyTable(shard_count)

    def record(self, key: ClassificationKey, tag: str) -> None:
        """Count one classified record.

        The two increments are individually atomic but not one transaction.

        Args:
            key: Port/protocol key of the record.
            tag: Tag resolved for the key.
        """
        self.port_protocol_counts.increment(key)
        self.tag_counts.increment(tag)

    def result(self, records_total: int = 0) -> AggregationResult:
        """Snapshot both tables.

        Args:
            records_total: Number of input records fed to the run.

        Returns:
            Immutable result with plain-dict tables.
        """
        return AggregationResult(
            tag_counts=self.tag_counts.snapshot(),
            port_protocol_counts=self.port_protocol_counts.snapshot(),
            records_total=records_total,
        )


@dataclass(frozen=True)
class AggregationResult:
    """Final frequency tables of a completed run."""

    tag_counts: dict[str, int] = field(default_factory=dict)
    port_protocol_counts: dict[ClassificationKey, int] = field(default_factory=dict)
    records_total: int = 0

    @property
    def records_counted(self) -> int:
        """Number of records that were classified and counted."""
        return sum(self.port_protocol_counts.values())

    @property
    def records_skipped(self) -> int:
        """Number of records that were malformed or unclassifiable."""
        return max(self.records_total - self.records_counted, 0)
