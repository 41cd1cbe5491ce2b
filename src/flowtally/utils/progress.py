"""Progress bar utilities for FlowTally."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)


class SimpleProgress:
    """Plain-text progress indicator for non-interactive output."""

    def __init__(self, description: str = "", total: int | None = None) -> None:
        self.description = description
        self.total = total
        self.current = 0
        self._last_percent = -1

    def update(self, advance: int = 1) -> None:
        """Update progress."""
        self.current += advance
        if self.total:
            percent = int(100 * self.current / self.total)
            if percent != self._last_percent and percent % 10 == 0:
                print(f"\r{self.description}: {percent}%", end="", file=sys.stderr)
                self._last_percent = percent

    def finish(self) -> None:
        """Finish progress."""
        if self.total:
            print(f"\r{self.description}: 100%", file=sys.stderr)
        else:
            print(f"\r{self.description}: Done ({self.current})", file=sys.stderr)


class RichProgress:
    """Adapter exposing a single rich progress task through update()."""

    def __init__(self, progress: Progress, task_id: Any) -> None:
        self._progress = progress
        self._task_id = task_id

    def update(self, advance: int = 1) -> None:
        self._progress.update(self._task_id, advance=advance)


@contextmanager
def create_progress(
    description: str = "Processing",
    total: int | None = None,
    use_rich: bool = True,
) -> Iterator[Any]:
    """Create a progress bar context manager.

    Args:
        description: Text description for the progress bar.
        total: Total number of items (None for indeterminate).
        use_rich: Use a rich progress bar instead of plain text.

    Yields:
        Progress object with update().
    """
    if not use_rich:
        simple_progress = SimpleProgress(description, total)
        try:
            yield simple_progress
        finally:
            simple_progress.finish()
        return

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(bar_width=40),
        TaskProgressColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=Console(stderr=True),
        transient=False,
    )
    with progress:
        yield RichProgress(progress, progress.add_task(description, total=total))


def batch_progress_callback(progress: Any) -> Callable[[int, int], None]:
    """Adapt a progress object to the scheduler's batch callback.

    Each completed batch advances the bar by its record count.

    Args:
        progress: Object with an update(advance) method.

    Returns:
        Callable accepting (batch_index, batch_size).
    """

    def on_batch_done(batch_index: int, batch_size: int) -> None:
        progress.update(batch_size)

    return on_batch_done
