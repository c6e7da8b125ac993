from __future__ import annotations

import os
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .base import Reporter, TaskRecord, TaskStatus, format_stats, get_verbosity

_STATUS_STYLE = {
    TaskStatus.SUCCESS: ("✔", "green"),
    TaskStatus.FAILED: ("✖", "bold red"),
    TaskStatus.SKIPPED: ("→", "yellow"),
}

_LEVEL_STYLE = {
    "INFO": "green",
    "WARN": "yellow",
    "ERROR": "bold red",
}


def _transient_from_env() -> bool:
    return os.getenv("BLORBGEN_PROGRESS_TRANSIENT", "0").lower() in (
        "1",
        "true",
        "yes",
    )


class RichReporter(Reporter):
    """Console reporter drawing a live bar for counted tasks (chunk writes).

    Uncounted tasks only get a completion line. Set
    ``BLORBGEN_PROGRESS_TRANSIENT=1`` to clear bars once they finish and
    print the completion lines after the bars are gone.
    """

    supports_progress = True

    def __init__(self, console: Console | None = None):
        super().__init__()
        self.console = console or Console(stderr=True, highlight=False)
        self._transient = _transient_from_env()
        self.progress: Progress | None = None
        self._bars: Dict[str, TaskID] = {}
        self._deferred: List[str] = []

    def _progress(self) -> Progress:
        if self.progress is None:
            self.progress = Progress(
                SpinnerColumn(spinner_name="dots"),
                TextColumn("{task.description}"),
                BarColumn(bar_width=None),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                transient=self._transient,
                console=self.console,
                expand=True,
            )
            self.progress.start()
        return self.progress

    def _done_line(self, rec: TaskRecord) -> str:
        icon, style = _STATUS_STYLE.get(rec.status, ("", "white"))
        text = escape(
            f"{rec.name}{rec.counter} ({rec.duration:.2f}s){format_stats(rec)}"
        )
        return f"[{style}]{icon}[/] {text}"

    def _say(self, label: str, message: str, style: str | None = None) -> None:
        style = style or _LEVEL_STYLE.get(label, "cyan")
        self.console.print(f"[{style}]{label}[/]: {escape(message)}")

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._open(task_id, name, total, meta)
        if total is not None:
            self._bars[task_id] = self._progress().add_task(name, total=total)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._step(task_id, step)
        bar = self._bars.get(task_id)
        if rec is None or bar is None or self.progress is None:
            return
        item = meta.get("current_item")
        self.progress.update(
            bar,
            completed=rec.completed,
            description=f"{rec.name}: {escape(item)}" if item else rec.name,
        )

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._close(task_id, status, final_meta)
        if rec is None:
            return
        bar = self._bars.pop(task_id, None)
        if bar is not None and self.progress is not None:
            self.progress.update(bar, completed=rec.completed, description=rec.name)
        line = self._done_line(rec)
        if self._transient and self.progress is not None:
            self._deferred.append(line)
        else:
            self.console.print(line)
        if not self._bars:
            self.flush()

    def status(self, message: str, **fields: Any) -> None:
        self._say("INFO", message)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._say(f"VERB{level}", message, "cyan")

    def error(self, message: str, **fields: Any) -> None:
        self._say("ERROR", message)

    def warning(self, message: str, **fields: Any) -> None:
        self._say("WARN", message)

    def section(self, title: str) -> None:
        self.console.rule(escape(title))

    def flush(self) -> None:
        if self.progress is None:
            return
        try:
            self.progress.stop()
        finally:
            self.progress = None
            for line in self._deferred:
                self.console.print(line)
            self._deferred.clear()
