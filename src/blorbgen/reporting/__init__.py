"""Build progress and message reporting.

The CLI installs one backend per run with :func:`set_reporter`; library
code reports through :func:`get_reporter` and the :func:`task` context
manager.
"""

from .base import (
    STAT_KEYS,
    Reporter,
    TaskRecord,
    TaskStatus,
    format_stats,
    get_reporter,
    get_verbosity,
    set_reporter,
    set_verbosity,
    task,
)
from .jsonl import JsonLinesReporter
from .plain import PlainReporter
from .rich_reporter import RichReporter
from .silent import SilentReporter

__all__ = [
    "Reporter",
    "TaskRecord",
    "TaskStatus",
    "STAT_KEYS",
    "format_stats",
    "get_reporter",
    "set_reporter",
    "get_verbosity",
    "set_verbosity",
    "task",
    "PlainReporter",
    "JsonLinesReporter",
    "RichReporter",
    "SilentReporter",
]
