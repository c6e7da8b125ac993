"""Program personalities and output naming.

The same packager ships under several names, each with its own defaults:

- ``bresc``: build the Blorb and the ``.bli`` declarations file;
- ``bres``: only generate the ``.bli`` file (missing resources are warnings);
- ``blc``: only build the Blorb, always with the short ``.blb`` extension.

``blorbgen`` behaves like ``bresc``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from .packing.constants import (
    BLORB_EXT,
    BLORB_GLULX_EXT,
    BLORB_ZCODE_EXT,
    CONTROL_EXT,
    DECLARATIONS_EXT,
)
from .packing.errors import ConfigurationError
from .utils.paths import control_file_path, with_extension

__all__ = [
    "Personality",
    "PERSONALITIES",
    "personality_for",
    "container_extension",
    "resolve_control_path",
    "declarations_path",
]


@dataclass(slots=True, frozen=True)
class Personality:
    name: str
    index_only: bool = False
    emit_declarations: bool = True
    short_extension: bool = False


PERSONALITIES: Dict[str, Personality] = {
    "bresc": Personality("bresc"),
    "blorbgen": Personality("blorbgen"),
    "bres": Personality("bres", index_only=True, emit_declarations=True),
    "blc": Personality(
        "blc", index_only=False, emit_declarations=False, short_extension=True
    ),
}


def personality_for(program: str) -> Personality:
    """Pick defaults from the invoked program name (``argv[0]``)."""
    name = Path(program).stem.lower()
    try:
        return PERSONALITIES[name]
    except KeyError:
        raise ConfigurationError(
            message="Unsupported functionality",
            context={"program": program},
        ) from None


def container_extension(
    *, short_extension: bool, has_metadata: bool, is_glulx: bool
) -> str:
    if short_extension:
        return BLORB_EXT
    if has_metadata:
        return BLORB_GLULX_EXT if is_glulx else BLORB_ZCODE_EXT
    if not is_glulx:
        return BLORB_ZCODE_EXT
    return BLORB_EXT


def resolve_control_path(path: Path) -> Path:
    return control_file_path(path, CONTROL_EXT)


def declarations_path(control_path: Path) -> Path:
    return with_extension(control_path, DECLARATIONS_EXT)
