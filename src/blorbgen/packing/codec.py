"""Pure binary packing functions for Blorb identifiers and integers.

All functions are side-effect free and validate sizes.
"""

from __future__ import annotations

import struct

from .constants import ID_LENGTH, MAX_U32
from .errors import BinaryFormatError

__all__ = ["pack_id", "unpack_id", "pack_u32", "unpack_u32"]

_U32 = struct.Struct(">I")


def pack_id(tag: str) -> bytes:
    """Encode ``tag`` as a 4-byte IFF identifier, space padded or truncated."""
    try:
        raw = tag.encode("ascii")
    except UnicodeEncodeError as exc:
        raise BinaryFormatError(
            message=f"Identifier {tag!r} is not ASCII",
            context={"tag": tag},
        ) from exc
    return raw[:ID_LENGTH].ljust(ID_LENGTH, b" ")


def unpack_id(raw: bytes, offset: int = 0) -> str:
    chunk = raw[offset : offset + ID_LENGTH]
    if len(chunk) != ID_LENGTH:
        raise BinaryFormatError(
            message=f"Short identifier read at {offset}",
            context={"offset": offset},
        )
    return chunk.decode("latin-1")


def pack_u32(value: int) -> bytes:
    if not 0 <= value <= MAX_U32:
        raise BinaryFormatError(
            message=f"Value {value} does not fit in 32 bits",
            context={"value": value},
        )
    return _U32.pack(value)


def unpack_u32(raw: bytes, offset: int = 0) -> int:
    if offset + _U32.size > len(raw):
        raise BinaryFormatError(
            message=f"Short integer read at {offset}",
            context={"offset": offset},
        )
    return _U32.unpack_from(raw, offset)[0]
