"""Closed vocabulary of chunk usages and the chunk types each one accepts.

Usage tokens in a control list are matched case-insensitively against a table
of aliases (``pic``, ``picture`` and ``pict`` all mean a picture). Chunk types
are never written in the control list: they are inferred from the resource
file's extension and then checked against the usage.

Both usage and type tags are kept in their stored form, i.e. padded to four
bytes (``"Snd "``, ``"PNG "``).
"""

from __future__ import annotations

from enum import Enum
from pathlib import PurePath
from typing import Dict, FrozenSet, Optional

from .errors import UnrecognizedExtension, line_error

__all__ = [
    "Usage",
    "METADATA_TYPE",
    "FRONTISPIECE_TYPE",
    "TYPES_BY_USAGE",
    "EXTENSION_TYPES",
    "GLULX_TYPE",
    "resolve_usage",
    "validate_type",
    "infer_type",
]


class Usage(Enum):
    EXECUTABLE = "Exec"
    PICTURE = "Pict"
    SOUND = "Snd "
    METADATA = "IFmd"
    FRONTISPIECE = "Fspc"

    @property
    def label(self) -> str:
        return self.value.rstrip()


METADATA_TYPE = Usage.METADATA.value
FRONTISPIECE_TYPE = Usage.FRONTISPIECE.value
GLULX_TYPE = "GLUL"

# Padded with spaces on both ends so " PIC " never matches inside " EPIC ".
_ALIASES: Dict[Usage, str] = {
    Usage.EXECUTABLE: " EXEC EXE CODE ",
    Usage.PICTURE: " PICT PIC PICTURE ",
    Usage.SOUND: " SND MSC MUSIC SOUND ",
    Usage.METADATA: " META MTA BIBLIO BIBLIOGRAPHIC BIB IFMD ",
    Usage.FRONTISPIECE: " POSTER POST COV COVER FRONT FSPC ",
}

TYPES_BY_USAGE: Dict[Usage, FrozenSet[str]] = {
    Usage.EXECUTABLE: frozenset(
        {
            "ZCOD",  # Z-machine
            "GLUL",  # Glulx
            "TAD2",
            "TAD3",
            "HUGO",
            "ALAN",
            "ADRI",  # Adrift
            "LEVE",  # Level 9
            "AGT ",
            "MAGS",  # Magnetic Scrolls
            "ADVS",  # AdvSys
            "EXEC",  # native executable
        }
    ),
    Usage.PICTURE: frozenset({"PNG ", "JPEG"}),
    Usage.SOUND: frozenset({"OGGV", "AIFF", "MOD "}),
}

EXTENSION_TYPES: Dict[str, str] = {
    "png": "PNG ",
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "ogg": "OGGV",
    "mod": "MOD ",
    "aif": "AIFF",
    "aiff": "AIFF",
    "z5": "ZCOD",
    "z8": "ZCOD",
    "ulx": GLULX_TYPE,
    "ifiction": METADATA_TYPE,
}


def resolve_usage(token: str) -> Optional[Usage]:
    """Return the usage named by ``token`` or None when it is not an alias."""
    word = token.strip()
    if not word or any(c.isspace() for c in word):
        return None
    needle = f" {word.upper()} "
    for usage, aliases in _ALIASES.items():
        if needle in aliases:
            return usage
    return None


def validate_type(usage: Usage, tag: str) -> bool:
    allowed = TYPES_BY_USAGE.get(usage)
    if allowed is None:
        # Metadata and frontispiece types are fixed by the catalog.
        return True
    return tag in allowed


def infer_type(path: str | PurePath, line: int | None = None) -> str:
    """Infer the chunk type tag from the lower-cased file extension."""
    p = PurePath(path)
    ext = p.suffix[1:].lower()
    tag = EXTENSION_TYPES.get(ext)
    if tag is None:
        raise line_error(
            UnrecognizedExtension,
            line,
            f"unrecognized file extension '{ext}' in '{p}'",
            path=str(p),
            extension=ext,
        )
    return tag
