"""Core classification and aggregation components."""

from __future__ import annotations

from .aggregator import AggregationResult, Aggregator, FrequencyTable
from .classifier import classify, parse_key
from .config import Config
from .lookup import DEFAULT_TAG, ClassificationKey, LookupTable, build_lookup_table, load_lookup_table
from .pipeline import FlowLogProcessor, process
from .protocol import PROTOCOL_NAMES, is_known_protocol, translate_protocol
from .scheduler import default_worker_count, partition, process_batch, run, run_batches

__all__ = [
    "AggregationResult",
    "Aggregator",
    "ClassificationKey",
    "Config",
    "DEFAULT_TAG",
    "FlowLogProcessor",
    "FrequencyTable",
    "LookupTable",
    "PROTOCOL_NAMES",
    "build_lookup_table",
    "classify",
    "default_worker_count",
    "is_known_protocol",
    "load_lookup_table",
    "parse_key",
    "partition",
    "process",
    "process_batch",
    "run",
    "run_batches",
    "translate_protocol",
]
