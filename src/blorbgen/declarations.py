"""Inform declarations (``.bli``) file generation.

The declarations file lets a game refer to its pictures and sounds by name:

    ! Resources include file for Inform
    ! Generated by bresc (blorbgen) 0.32.0 on 18/12/2009 10:00:00

    message "Including resources file by blorbgen, on 18/12/2009 10:00:00";

    Constant picTitle 3;	! Pict: 'title.png'
    Constant mySound 3;	! Snd: 'theme.ogg'

Only pictures and sounds are declared; the cover picture is addressed
through the frontispiece chunk and gets no constant.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, TextIO

from . import __version__
from .packing.catalog import Declaration
from .packing.registry import Usage

__all__ = [
    "APP_NAME",
    "declaration_name",
    "render_declarations",
    "write_declarations",
    "write_declarations_file",
]

APP_NAME = "blorbgen"

_PREFIXES = {
    Usage.EXECUTABLE: "exe",
    Usage.PICTURE: "pic",
    Usage.SOUND: "snd",
}


def declaration_name(decl: Declaration) -> str:
    if decl.name:
        return decl.name
    stem = decl.source.stem
    return _PREFIXES[decl.usage] + stem[:1].upper() + stem[1:]


def render_declarations(
    declarations: Iterable[Declaration],
    *,
    program: str = "bresc",
    timestamp: Optional[datetime] = None,
) -> str:
    when = (timestamp or datetime.now()).strftime("%d/%m/%Y %H:%M:%S")
    lines = [
        "! Resources include file for Inform",
        f"! Generated by {program} ({APP_NAME}) {__version__} on {when}",
        "",
        f'message "Including resources file by {APP_NAME}, on {when}";',
        "",
    ]
    for decl in declarations:
        lines.append(
            f"Constant {declaration_name(decl)} {decl.resource_number};"
            f"\t! {decl.usage.label}: '{decl.source.name}'"
        )
    return "\n".join(lines) + "\n"


def write_declarations(
    declarations: Iterable[Declaration],
    stream: TextIO,
    *,
    program: str = "bresc",
    timestamp: Optional[datetime] = None,
) -> None:
    stream.write(
        render_declarations(declarations, program=program, timestamp=timestamp)
    )


def write_declarations_file(
    declarations: Iterable[Declaration],
    path: Path,
    *,
    program: str = "bresc",
    timestamp: Optional[datetime] = None,
) -> Path:
    with path.open("w", encoding="utf-8", errors="surrogateescape") as f:
        write_declarations(declarations, f, program=program, timestamp=timestamp)
    return path

