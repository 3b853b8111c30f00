"""Rich-based progress reporter for terminal output."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


if TYPE_CHECKING:
    from types import TracebackType

    from edufs.core.ports import ProgressCallback


class RichProgressReporter:
    """Progress reporter using Rich for terminal display.

    Shows one bar per file being uploaded, with transfer speed and ETA.
    Bars are drawn on stderr so command output on stdout stays clean.

    Example:
        with RichProgressReporter() as reporter:
            result = Publisher(node, progress=reporter).publish("site/")
    """

    def __init__(self, console: Console | None = None, transient: bool = False) -> None:
        """Initialize the progress display.

        Args:
            console: Console to draw on. Defaults to a stderr console.
            transient: Remove the bars when the display stops.
        """
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=console or Console(stderr=True),
            transient=transient,
        )
        self._tasks: dict[str, TaskID] = {}
        self._started = False

    def __enter__(self) -> RichProgressReporter:
        """Start the progress display."""
        self._progress.start()
        self._started = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Stop the progress display."""
        self._progress.stop()
        self._started = False

    def start_task(self, name: str, total: int) -> ProgressCallback:
        """Start tracking an upload.

        Args:
            name: Relative path of the file.
            total: Size in bytes; 0 when unknown.

        Returns:
            A callback to update progress.
        """
        # Auto-start if not in context manager
        if not self._started:
            self._progress.start()
            self._started = True

        task_id = self._progress.add_task(name, total=total or None)
        self._tasks[name] = task_id

        def callback(transferred: int, _total: int) -> None:
            self._progress.update(task_id, completed=transferred)

        return callback

    def finish_task(self, name: str) -> None:
        """Mark an upload as complete.

        Args:
            name: The task name.
        """
        task_id = self._tasks.pop(name, None)
        if task_id is None:
            return
        task = self._progress.tasks[task_id]
        if task.total is not None:
            self._progress.update(task_id, completed=task.total)
