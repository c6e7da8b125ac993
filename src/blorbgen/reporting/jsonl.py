from __future__ import annotations

import json
import sys
from typing import Any, Dict

from .base import Reporter, TaskStatus, get_verbosity

# "<Prefix> summary: k=v k=v" status lines also produce a summary event.
_SUMMARY_TYPES: Dict[str, str] = {
    "catalog summary": "catalog",
    "build summary": "build",
    "validation summary": "validation",
}


def _summary_fields(message: str) -> tuple[str, Dict[str, str]] | None:
    head, sep, kv_text = message.partition(":")
    stype = _SUMMARY_TYPES.get(head.strip().lower())
    if not sep or stype is None:
        return None
    pairs = dict(token.split("=", 1) for token in kv_text.split() if "=" in token)
    return stype, pairs


class JsonLinesReporter(Reporter):
    """Machine-readable reporter: one JSON object per line on stdout."""

    def __init__(self, stream=None):
        super().__init__()
        self.stream = stream or sys.stdout

    def _emit(self, event: str, **payload: Any) -> None:
        payload["event"] = event
        self.stream.write(json.dumps(payload, sort_keys=True, default=str) + "\n")

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._open(task_id, name, total, meta)
        self._emit("task_start", id=task_id, name=name, total=total, **meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._step(task_id, step)
        if rec is not None:
            self._emit("task_progress", id=task_id, completed=rec.completed, **meta)

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._close(task_id, status, final_meta)
        if rec is None:
            return
        self._emit(
            "task_end",
            id=task_id,
            status=status.name.lower(),
            completed=rec.completed,
            total=rec.total,
            duration_seconds=rec.duration,
            **rec.meta,
        )

    def _message(self, level: str, message: str, fields: Dict[str, Any]) -> None:
        self._emit("status", message=message, level=level, **fields)

    def status(self, message: str, **fields: Any) -> None:
        summary = _summary_fields(message)
        if summary is not None:
            stype, pairs = summary
            self._emit("summary", summary_type=stype, raw=message, **pairs, **fields)
        self._message("info", message, fields)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._message(f"verbose{level}", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._message("error", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._message("warning", message, fields)

    def section(self, title: str) -> None:
        self._emit("section", title=title)
