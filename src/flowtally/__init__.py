"""FlowTally - Parallel flow-log tagging and counting.

FlowTally classifies flow-log records by destination port and protocol, maps
each classification to a tag through a lookup table, and counts occurrences
per tag and per port/protocol pair using a pool of worker threads.

Example:
    >>> import flowtally as ft
    >>> result = ft.process("flow_logs.txt", "lookup_table.csv")
    >>> result.tag_counts

Processor usage:
    >>> import flowtally as ft
    >>> config = ft.Config(num_workers=4, output_dir="reports")
    >>> result = ft.FlowLogProcessor(config).run()
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version


def _resolve_version() -> str:
    """Resolve the installed package version."""
    try:
        return _pkg_version("flowtally")
    except PackageNotFoundError:
        # Source checkout without an installed distribution.
        return "0.0.0"


__version__ = _resolve_version()

from .core.aggregator import AggregationResult, Aggregator, FrequencyTable
from .core.classifier import classify
from .core.config import Config
from .core.lookup import DEFAULT_TAG, ClassificationKey, LookupTable, build_lookup_table
from .core.pipeline import FlowLogProcessor, process
from .core.protocol import translate_protocol
from .core.scheduler import partition, run

from . import core
from . import output
from . import utils

__all__ = [
    "__version__",
    "AggregationResult",
    "Aggregator",
    "ClassificationKey",
    "Config",
    "DEFAULT_TAG",
    "FlowLogProcessor",
    "FrequencyTable",
    "LookupTable",
    "build_lookup_table",
    "classify",
    "partition",
    "process",
    "run",
    "translate_protocol",
    "core",
    "output",
    "utils",
]
