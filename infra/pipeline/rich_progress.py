"""Rich progress bar for page-by-page work, safe to advance from worker threads."""

import threading
from typing import Optional

from rich.console import Console
from rich.progress import (
    Progress,
    BarColumn,
    TextColumn,
    TaskProgressColumn,
    TimeRemainingColumn,
)


class RichProgressBar:
    """
    Usage:
        with RichProgressBar(total=len(images), prefix="B0ABC ") as bar:
            ...
            bar.advance(suffix="00-01.png")
    """

    def __init__(self, total: int, prefix: str = "", unit: str = "pages", console: Optional[Console] = None):
        self.total = total
        self.unit = unit
        self.done = 0

        self._lock = threading.Lock()
        self._task_id = None
        self._progress = Progress(
            TextColumn(f"[bold cyan]{prefix}[/bold cyan]"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            TextColumn("• {task.fields[rate]} • "),
            TimeRemainingColumn(),
            TextColumn("• [dim]{task.fields[suffix]}[/dim]"),
            console=console,
            transient=True,
        )

    def __enter__(self):
        self._progress.start()
        self._task_id = self._progress.add_task("", total=self.total, rate="", suffix="")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._progress.stop()
        return False

    def advance(self, suffix: str = ""):
        with self._lock:
            self.done += 1
            elapsed = self._progress.tasks[self._task_id].elapsed or 0.0
            rate = f"{self.done / elapsed:.1f} {self.unit}/sec" if elapsed > 0 else ""
            self._progress.update(self._task_id, completed=self.done, rate=rate, suffix=suffix)
