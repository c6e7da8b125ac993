"""Path utilities (control-list resolution, output naming)."""

from __future__ import annotations
from pathlib import Path

__all__ = ["resolve_resource_path", "with_extension", "control_file_path"]


def resolve_resource_path(base_dir: Path, file_path: str) -> Path:
    """Resolve ``file_path`` against ``base_dir`` unless it is absolute."""
    p = Path(file_path).expanduser()
    if p.is_absolute():
        return p
    return base_dir / p


def with_extension(path: Path, ext: str) -> Path:
    return path.with_suffix(f".{ext}")


def control_file_path(path: Path, default_ext: str) -> Path:
    # A bare name like "game" means "game.res"; explicit extensions are kept.
    if path.suffix:
        return path
    return with_extension(path, default_ext)
