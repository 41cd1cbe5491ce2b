#!/usr/bin/env python3
"""Basic tag and port/protocol counting.

This example demonstrates the ways to count a flow log with FlowTally.

Usage:
    python basic_counting.py flow_logs.txt lookup_table.csv
"""

from __future__ import annotations

import sys

import flowtally as ft
from flowtally.output import PORT_PROTOCOL_COUNT_COLUMNS, TAG_COUNT_COLUMNS, to_dataframe


def main() -> None:
    """Count a flow log against a lookup table."""
    if len(sys.argv) < 3:
        print("Usage: python basic_counting.py <flow_log> <lookup_table>")
        sys.exit(1)

    flow_log_path, lookup_path = sys.argv[1], sys.argv[2]

    # Method 1: Simple one-liner
    print("Method 1: Simple counting")
    print("-" * 40)
    result = ft.process(flow_log_path, lookup_path)
    print(f"Counted {result.records_counted} of {result.records_total} records")
    print(to_dataframe(result.tag_counts, TAG_COUNT_COLUMNS).to_string(index=False))
    print()

    # Method 2: Processor with Config, writing both reports
    print("Method 2: With configuration")
    print("-" * 40)
    config = ft.Config(
        flow_log_path=flow_log_path,
        lookup_path=lookup_path,
        output_dir="reports",
        num_workers=4,
    )
    result = ft.FlowLogProcessor(config).run()
    print(f"Reports written to {config.tag_counts_path} and {config.port_protocol_counts_path}")
    print()

    # Method 3: In-memory records
    print("Method 3: In-memory records")
    print("-" * 40)
    lookup = ft.build_lookup_table(["dstport,protocol,tag", "80,tcp,web", "53,udp,dns"])
    records = ["a b c d e 80 f 6", "a b c d e 53 f 17", "a b c d e 22 f 6"]
    tag_counts, port_protocol_counts = ft.run(records, lookup, worker_count=2)
    print(to_dataframe(port_protocol_counts, PORT_PROTOCOL_COUNT_COLUMNS).to_string(index=False))
    print(tag_counts)


if __name__ == "__main__":
    main()
