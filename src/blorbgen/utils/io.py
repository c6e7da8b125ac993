"""IO helpers for control lists and resource files."""

from __future__ import annotations
from pathlib import Path

from ..packing.errors import UnreadableControlFile

__all__ = ["DataError", "safe_read_file", "read_control_lines"]

MAX_RESOURCE_SIZE = 0xFFFFFFFF  # chunk lengths are 32-bit


class DataError(RuntimeError):
    pass


def safe_read_file(path: Path, max_size: int = MAX_RESOURCE_SIZE) -> bytes:
    if not path.is_file():
        raise DataError(f"can't open file '{path}'")
    size = path.stat().st_size
    if size > max_size:
        raise DataError(f"File too large: {size}>{max_size}")
    try:
        return path.read_bytes()
    except OSError as e:
        raise DataError(f"can't open file '{path}': {e.strerror}") from e


def read_control_lines(path: Path) -> list[str]:
    try:
        text = path.read_text(encoding="utf-8", errors="surrogateescape")
    except OSError as e:
        raise UnreadableControlFile(
            message=f"can't open Blorb Resources Control File: '{path}'",
            context={"path": str(path)},
        ) from e
    return text.splitlines()
