from __future__ import annotations

import sys
from typing import Any

from .base import Reporter, TaskStatus, format_stats, get_verbosity

ICONS = {
    TaskStatus.SUCCESS: "✔",
    TaskStatus.FAILED: "✖",
    TaskStatus.SKIPPED: "→",
}

# ANSI colour per message prefix
_COLOURS = {"INFO": "32", "WARN": "33", "ERROR": "31"}


class PlainReporter(Reporter):
    """Line oriented reporter for terminals and logs.

    Per-chunk progress lines are only printed at verbosity 1 and above.
    Colour is used when the stream is a TTY unless ``use_color`` says
    otherwise.
    """

    def __init__(self, stream=None, use_color: bool | None = None):
        super().__init__()
        self.stream = stream or sys.stderr
        if use_color is None:
            use_color = getattr(self.stream, "isatty", lambda: False)()
        self.use_color = use_color

    def _tag(self, label: str, code: str | None = None) -> str:
        code = code or _COLOURS.get(label)
        if not self.use_color or code is None:
            return label
        return f"\x1b[{code}m{label}\x1b[0m"

    def _line(self, text: str) -> None:
        self.stream.write(text + "\n")

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._open(task_id, name, total, meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._step(task_id, step)
        if rec is None or get_verbosity() < 1:
            return
        item = meta.get("current_item") or f"item#{rec.completed}"
        self._line(f"   · {rec.name}: {item} ({rec.completed}/{rec.total or '?'})")

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._close(task_id, status, final_meta)
        if rec is None:
            return
        self._line(
            f" {ICONS.get(status, '?')} {rec.name}{rec.counter}"
            f" ({rec.duration:.2f}s){format_stats(rec)}"
        )

    def status(self, message: str, **fields: Any) -> None:
        self._line(f"{self._tag('INFO')}: {message}")

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._line(f"{self._tag(f'VERB{level}', '36')}: {message}")

    def error(self, message: str, **fields: Any) -> None:
        self._line(f"{self._tag('ERROR')}: {message}")

    def warning(self, message: str, **fields: Any) -> None:
        self._line(f"{self._tag('WARN')}: {message}")

    def section(self, title: str) -> None:
        self._line(f"\n[{title}]")
