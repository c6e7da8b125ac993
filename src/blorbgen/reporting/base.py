"""Reporter protocol shared by every output backend.

A build is a short sequence of named tasks (``catalog.read``,
``index.build``, ``write.chunks`` ...). Backends receive task start,
progress and completion events plus free-form status lines; the record
keeping for open tasks lives here so backends only decide how to render.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterator, Optional

__all__ = [
    "TaskStatus",
    "TaskRecord",
    "Reporter",
    "STAT_KEYS",
    "format_stats",
    "set_reporter",
    "get_reporter",
    "set_verbosity",
    "get_verbosity",
    "task",
]


class TaskStatus(Enum):
    RUNNING = auto()
    SUCCESS = auto()
    FAILED = auto()
    SKIPPED = auto()


# Task meta keys shown in completion lines, in display order.
STAT_KEYS = ("chunks", "entries", "bytes", "warnings")


@dataclass(slots=True)
class TaskRecord:
    task_id: str
    name: str
    total: Optional[int] = None
    completed: int = 0
    status: TaskStatus = TaskStatus.RUNNING
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        return (self.end_time - self.start_time) if self.end_time else 0.0

    @property
    def counter(self) -> str:
        return f" {self.completed}/{self.total}" if self.total is not None else ""


def format_stats(rec: TaskRecord) -> str:
    stats = [f"{k}={rec.meta[k]}" for k in STAT_KEYS if k in rec.meta]
    return f" [{' '.join(stats)}]" if stats else ""


_VERBOSITY: int = 0  # -v count from the CLI


def set_verbosity(level: int) -> None:
    global _VERBOSITY
    _VERBOSITY = max(0, level)


def get_verbosity() -> int:
    return _VERBOSITY


class Reporter:
    supports_progress: bool = False

    def __init__(self) -> None:
        self._tasks: Dict[str, TaskRecord] = {}

    # Task bookkeeping used by backends ---------------------------------------
    def _open(
        self, task_id: str, name: str, total: int | None, meta: Dict[str, Any]
    ) -> TaskRecord:
        rec = TaskRecord(task_id, name, total, meta=dict(meta))
        self._tasks[task_id] = rec
        return rec

    def _step(self, task_id: str, step: int) -> TaskRecord | None:
        rec = self._tasks.get(task_id)
        if rec is not None:
            rec.completed += step
        return rec

    def _close(
        self, task_id: str, status: TaskStatus, final_meta: Dict[str, Any]
    ) -> TaskRecord | None:
        rec = self._tasks.pop(task_id, None)
        if rec is None:
            return None
        rec.status = status
        rec.end_time = time.time()
        rec.meta.update(final_meta)
        return rec

    # Events ------------------------------------------------------------------
    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        raise NotImplementedError

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        raise NotImplementedError

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        raise NotImplementedError

    def status(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        # Backends that show verbose output override this.
        pass

    def error(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def warning(self, message: str, **fields: Any) -> None:
        self.status(message, **fields)

    def section(self, title: str) -> None:
        raise NotImplementedError

    def flush(self) -> None:
        pass


_ACTIVE_REPORTER: Reporter | None = None


def set_reporter(rep: Reporter) -> None:
    global _ACTIVE_REPORTER
    _ACTIVE_REPORTER = rep


def get_reporter() -> Reporter:
    global _ACTIVE_REPORTER
    if _ACTIVE_REPORTER is None:
        from .plain import PlainReporter  # local import to avoid cycle

        _ACTIVE_REPORTER = PlainReporter(stream=sys.stderr)
    return _ACTIVE_REPORTER


@contextmanager
def task(
    task_id: str, name: str, total: int | None = None, **meta: Any
) -> Iterator[Dict[str, Any]]:
    """Report one pipeline phase.

    Yields a dict the caller may fill with stats (see ``STAT_KEYS``); they
    are attached to the completion event.
    """
    rep = get_reporter()
    rep.start_task(task_id, name, total, **meta)
    stats: Dict[str, Any] = {}
    try:
        yield stats
    except Exception:
        rep.end_task(task_id, TaskStatus.FAILED, **stats)
        raise
    rep.end_task(task_id, TaskStatus.SUCCESS, **stats)
