"""Command-line interface for FlowTally."""

from __future__ import annotations

import logging
import sys
from dataclasses import replace
from typing import Any

import click

from .. import __version__
from ..core.config import Config
from ..core.pipeline import FlowLogProcessor
from ..core.protocol import PROTOCOL_NAMES
from ..output.formats import (
    PORT_PROTOCOL_COUNT_COLUMNS,
    TAG_COUNT_COLUMNS,
    to_dataframe,
)
from ..utils.progress import batch_progress_callback, create_progress


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _build_config(
    config_file: str | None,
    flow_log: str | None,
    lookup: str | None,
    output_dir: str | None,
    workers: int | None,
) -> Config:
    """Load the config file, if any, and apply CLI overrides."""
    if config_file:
        try:
            config = Config.from_file(config_file)
        except (OSError, ValueError) as e:
            raise click.ClickException(f"Failed to load config file: {e}")
        click.echo(f"Loaded config from: {config_file}", err=True)
    else:
        config = Config()

    # CLI options override config file
    overrides: dict[str, Any] = {}
    if flow_log is not None:
        overrides["flow_log_path"] = flow_log
    if lookup is not None:
        overrides["lookup_path"] = lookup
    if output_dir is not None:
        overrides["output_dir"] = output_dir
    if workers is not None:
        overrides["num_workers"] = workers

    try:
        return replace(config, **overrides)
    except ValueError as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__, prog_name="flowtally")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """FlowTally: flow-log tagging and counting.

    Count flow-log records per tag and per port/protocol pair.
    Use 'flowtally' or 'ft' to run commands.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


@cli.command()
@click.argument("flow_log", required=False, type=click.Path(dir_okay=False))
@click.argument("lookup", required=False, type=click.Path(dir_okay=False))
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for tag_counts.csv and port_protocol_counts.csv.",
)
@click.option(
    "-w",
    "--workers",
    type=int,
    default=None,
    help="Number of parallel workers (defaults to CPU count).",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True),
    help="Configuration file (JSON or YAML).",
)
@click.option(
    "--progress/--no-progress",
    default=True,
    help="Show progress bar during processing.",
)
@click.pass_context
def process(
    ctx: click.Context,
    flow_log: str | None,
    lookup: str | None,
    output_dir: str | None,
    workers: int | None,
    config_file: str | None,
    progress: bool,
) -> None:
    """Count flow-log records and write both reports.

    FLOW_LOG and LOOKUP default to the paths in the config file, or to
    attachments/input/ when no config file is given.

    Examples:

        ft process flow_logs.txt lookup_table.csv -o reports

        ft process -c config.yaml -w 8
    """
    config = _build_config(config_file, flow_log, lookup, output_dir, workers)
    processor = FlowLogProcessor(config)

    try:
        lookup_table = processor.load_lookup()
        records = processor.read_flow_log()

        if progress:
            # Plain-text progress when stderr is redirected
            with create_progress(
                description="Aggregating",
                total=len(records),
                use_rich=sys.stderr.isatty(),
            ) as prog:
                result = processor.aggregate(
                    records, lookup_table, on_batch_done=batch_progress_callback(prog)
                )
        else:
            result = processor.aggregate(records, lookup_table)

        tag_path, port_protocol_path = processor.write_reports(result)
    except OSError as e:
        path = e.filename or "input/output"
        raise click.ClickException(f"I/O error on {path}: {e.strerror or e}")
    except RuntimeError as e:
        raise click.ClickException(f"{e}: {e.__cause__!r}")

    click.echo(
        f"Counted {result.records_counted} of {result.records_total} records "
        f"({result.records_skipped} skipped)",
        err=True,
    )
    click.echo(f"Written to: {tag_path}", err=True)
    click.echo(f"Written to: {port_protocol_path}", err=True)


@cli.command()
@click.argument("flow_log", type=click.Path(dir_okay=False))
@click.argument("lookup", type=click.Path(dir_okay=False))
@click.option(
    "-w",
    "--workers",
    type=int,
    default=None,
    help="Number of parallel workers (defaults to CPU count).",
)
@click.option(
    "--top",
    type=int,
    default=10,
    show_default=True,
    help="Rows to show per table.",
)
@click.pass_context
def summary(
    ctx: click.Context,
    flow_log: str,
    lookup: str,
    workers: int | None,
    top: int,
) -> None:
    """Print the most frequent tags and port/protocol pairs.

    Nothing is written to disk.
    """
    config = _build_config(None, flow_log, lookup, None, workers)
    processor = FlowLogProcessor(config)

    try:
        result = processor.aggregate(processor.read_flow_log(), processor.load_lookup())
    except OSError as e:
        raise click.ClickException(f"I/O error on {e.filename}: {e.strerror or e}")
    except RuntimeError as e:
        raise click.ClickException(f"{e}: {e.__cause__!r}")

    tags = to_dataframe(result.tag_counts, TAG_COUNT_COLUMNS).head(top)
    pairs = to_dataframe(result.port_protocol_counts, PORT_PROTOCOL_COUNT_COLUMNS).head(top)

    click.echo(f"Records: {result.records_total}")
    click.echo(f"Counted: {result.records_counted}")
    click.echo(f"Skipped: {result.records_skipped}")
    click.echo("\nTop tags:")
    click.echo(tags.to_string(index=False) if not tags.empty else "  (none)")
    click.echo("\nTop port/protocol pairs:")
    click.echo(pairs.to_string(index=False) if not pairs.empty else "  (none)")


@cli.command()
@click.argument("lookup_path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def lookup(ctx: click.Context, lookup_path: str) -> None:
    """Parse a lookup table and print its effective entries as CSV.

    Duplicate keys show their last value; malformed lines are reported
    on stderr.
    """
    processor = FlowLogProcessor(Config(lookup_path=lookup_path))
    try:
        table = processor.load_lookup()
    except OSError as e:
        raise click.ClickException(f"I/O error on {e.filename}: {e.strerror or e}")

    click.echo("Port,Protocol,Tag")
    for key, tag in sorted(table.items()):
        click.echo(f"{key},{tag}")
    click.echo(f"{len(table)} entries, {len(table.unique_tags)} tags", err=True)


@cli.command()
def protocols() -> None:
    """List the protocol numbers that can be classified."""
    click.echo("Number,Name")
    for number, name in sorted(PROTOCOL_NAMES.items(), key=lambda item: int(item[0])):
        click.echo(f"{number},{name}")


if __name__ == "__main__":
    cli()
