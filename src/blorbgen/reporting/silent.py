from __future__ import annotations

from typing import Any

from .base import Reporter, TaskStatus


class SilentReporter(Reporter):
    """Quiet mode. Failures still surface as :class:`BlorbError` exceptions."""

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._open(task_id, name, total, meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        self._step(task_id, step)

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        self._close(task_id, status, final_meta)

    def status(self, message: str, **fields: Any) -> None:
        return None

    error = warning = status

    def section(self, title: str) -> None:
        return None
