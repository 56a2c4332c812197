# delimswap/progress.py
from __future__ import annotations

import sys
import threading
from typing import Dict, Optional, Protocol

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
)


console = Console()


class ProgressReporter(Protocol):
    def start(self, total_bytes: int, total_files: int) -> None:
        ...

    def file_started(self, job_id: int, name: str, size: int) -> None:
        ...

    def advance(self, job_id: int, n_bytes: int) -> None:
        ...

    def file_finished(self, job_id: int, ok: bool) -> None:
        ...

    def stop(self) -> None:
        ...


class NullProgress:
    def start(self, total_bytes: int, total_files: int) -> None:
        pass

    def file_started(self, job_id: int, name: str, size: int) -> None:
        pass

    def advance(self, job_id: int, n_bytes: int) -> None:
        pass

    def file_finished(self, job_id: int, ok: bool) -> None:
        pass

    def stop(self) -> None:
        pass


class RichProgress:
    """
    One overall bar (bytes across every file) plus one bar per file that is
    currently being converted. Workers call advance() from their own threads.
    """

    def __init__(self, console_: Optional[Console] = None):
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}", justify="right"),
            BarColumn(),
            DownloadColumn(),
            TimeRemainingColumn(),
            console=console_ or console,
        )
        self._overall: Optional[TaskID] = None
        self._tasks: Dict[int, TaskID] = {}
        self._lock = threading.Lock()
        self._files_total = 0
        self._files_done = 0

    def _overall_label(self) -> str:
        return f"total {self._files_done}/{self._files_total}"

    def start(self, total_bytes: int, total_files: int) -> None:
        self._files_total = total_files
        self._progress.start()
        self._overall = self._progress.add_task(self._overall_label(), total=total_bytes)

    def file_started(self, job_id: int, name: str, size: int) -> None:
        task = self._progress.add_task(name, total=size)
        with self._lock:
            self._tasks[job_id] = task

    def advance(self, job_id: int, n_bytes: int) -> None:
        with self._lock:
            task = self._tasks.get(job_id)
        if task is not None:
            self._progress.advance(task, n_bytes)
        if self._overall is not None:
            self._progress.advance(self._overall, n_bytes)

    def file_finished(self, job_id: int, ok: bool) -> None:
        with self._lock:
            task = self._tasks.pop(job_id, None)
            self._files_done += 1
            label = self._overall_label()
        if task is not None:
            self._progress.remove_task(task)
        if self._overall is not None:
            self._progress.update(self._overall, description=label)

    def stop(self) -> None:
        self._progress.stop()


def make_reporter(enabled: bool = True) -> ProgressReporter:
    # Live bars garble piped output
    if enabled and sys.stdout.isatty():
        return RichProgress()
    return NullProgress()
