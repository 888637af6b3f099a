"""
Rich progress bars for running downloads.
"""

import logging

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

log = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 48


def _shorten(description: str) -> str:
    if len(description) <= MAX_DESCRIPTION_LENGTH:
        return description
    return description[: MAX_DESCRIPTION_LENGTH - 1] + "…"


class ProgressManager:
    """
    One bar per download.

    With `quiet=True` nothing is rendered, but tasks are still tracked so that
    callers never need to special-case listing commands.
    """

    def __init__(self, console: Console, quiet: bool = False):
        self.console = console
        self.quiet = quiet
        self.completed = 0
        self.failed = 0
        self._tasks: dict[TaskID, str] = {}
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
            disable=quiet,
        )

    def add_task(self, description: str, total: int | None = None) -> TaskID:
        """Adds a bar. Without a `total` (unknown size) the bar pulses instead."""
        description = _shorten(description)
        task_id = self.progress.add_task(description, total=total)
        self._tasks[task_id] = description
        return task_id

    def advance(self, task_id: TaskID, size: int) -> None:
        self.progress.advance(task_id, size)

    def finish_task(self, task_id: TaskID, success: bool = True) -> None:
        if task_id not in self._tasks:
            log.debug(f"Progress task {task_id} is not active.")
            return
        description = self._tasks.pop(task_id)
        self.progress.stop_task(task_id)
        if success:
            self.completed += 1
        else:
            self.failed += 1
            self.progress.update(task_id, description=f"[red]✗[/red] {description}")

    async def __aenter__(self) -> "ProgressManager":
        self.progress.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.progress.stop()
