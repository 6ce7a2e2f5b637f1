"""Download progress reporting for Caskfetch."""

from __future__ import annotations

import threading
from collections.abc import Callable
from types import TracebackType

from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

ProgressCallback = Callable[[str, int, int | None], None]
# Signature: (cask_name, downloaded, total_or_none)


class RichDownloadProgress:
    """Rich-based progress display with one bar per downloaded cask."""

    def __init__(self) -> None:
        self._progress = Progress(
            "[progress.description]{task.description}",
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
        )
        self._tasks: dict[str, TaskID] = {}
        self._lock = threading.Lock()

    def __enter__(self) -> RichDownloadProgress:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def on_download(self, name: str, downloaded: int, total: int | None) -> None:
        """Report download progress for a cask."""
        with self._lock:
            if name not in self._tasks:
                self._tasks[name] = self._progress.add_task(name, total=total)
            task_id = self._tasks[name]
        if total and self._progress.tasks[task_id].total != total:
            self._progress.update(task_id, total=total)
        self._progress.update(task_id, completed=downloaded)
