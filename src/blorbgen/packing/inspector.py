"""Blorb inspection utilities.

Public functions:
- inspect_blorb(path) -> dict
- validate_blorb(info) -> list[str]

The inspector walks the IFF chunk list independently of the builder, so
it can be used to check containers produced by other tools too.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List

from .codec import unpack_id, unpack_u32
from .constants import (
    CHUNK_HEADER_SIZE,
    FORM_TAG,
    FORMAT_TAG,
    INDEX_RECORD_SIZE,
    INDEX_TAG,
    WRAPPER_HEADER_SIZE,
)
from .errors import BinaryFormatError

__all__ = [
    "ChunkInfo",
    "IndexEntry",
    "parse_header",
    "parse_chunks",
    "parse_index",
    "inspect_bytes",
    "inspect_blorb",
    "validate_blorb",
]


@dataclass(slots=True)
class ChunkInfo:
    type: str
    offset: int
    length: int
    padded: bool


@dataclass(slots=True)
class IndexEntry:
    usage: str
    resource_number: int
    offset: int


def parse_header(data: bytes) -> Dict[str, Any]:
    if len(data) < WRAPPER_HEADER_SIZE:
        raise BinaryFormatError(
            message=f"File too short for IFF header: {len(data)} bytes"
        )
    return {
        "form": unpack_id(data, 0),
        "size": unpack_u32(data, 4),
        "format": unpack_id(data, 8),
        "magic_ok": unpack_id(data, 0) == FORM_TAG
        and unpack_id(data, 8) == FORMAT_TAG,
    }


def parse_chunks(data: bytes) -> List[ChunkInfo]:
    chunks: List[ChunkInfo] = []
    pos = WRAPPER_HEADER_SIZE
    while pos + CHUNK_HEADER_SIZE <= len(data):
        tag = unpack_id(data, pos)
        length = unpack_u32(data, pos + 4)
        end = pos + CHUNK_HEADER_SIZE + length
        if end > len(data):
            raise BinaryFormatError(
                message=f"Chunk '{tag}' at {pos} overruns file ({end}>{len(data)})",
                context={"offset": pos, "type": tag},
            )
        padded = bool(length % 2)
        chunks.append(ChunkInfo(tag, pos, length, padded))
        pos = end + (1 if padded else 0)
    return chunks


def parse_index(data: bytes, chunk: ChunkInfo) -> List[IndexEntry]:
    start = chunk.offset + CHUNK_HEADER_SIZE
    count = unpack_u32(data, start)
    if 4 + count * INDEX_RECORD_SIZE != chunk.length:
        raise BinaryFormatError(
            message=f"Index length {chunk.length} does not match {count} entries",
            context={"count": count, "length": chunk.length},
        )
    entries: List[IndexEntry] = []
    for i in range(count):
        rec = start + 4 + i * INDEX_RECORD_SIZE
        entries.append(
            IndexEntry(
                usage=unpack_id(data, rec),
                resource_number=unpack_u32(data, rec + 4),
                offset=unpack_u32(data, rec + 8),
            )
        )
    return entries


def inspect_bytes(data: bytes) -> Dict[str, Any]:
    header = parse_header(data)
    chunks = parse_chunks(data)
    index: List[IndexEntry] = []
    if chunks and chunks[0].type == INDEX_TAG:
        index = parse_index(data, chunks[0])
    return {
        "file_size": len(data),
        "header": header,
        "chunks": [asdict(c) for c in chunks],
        "index": [asdict(e) for e in index],
    }


def inspect_blorb(path: str | Path) -> Dict[str, Any]:
    return inspect_bytes(Path(path).read_bytes())


def validate_blorb(info: Dict[str, Any]) -> List[str]:
    issues: List[str] = []
    header = info["header"]
    if not header["magic_ok"]:
        issues.append("Header magic mismatch")
    if header["size"] != info["file_size"] - 8:
        issues.append(
            f"IFF size field {header['size']} != file size - 8 ({info['file_size'] - 8})"
        )
    chunks = info["chunks"]
    if not chunks or chunks[0]["type"] != INDEX_TAG:
        issues.append("First chunk is not a resource index")
        return issues
    by_offset = {c["offset"]: c for c in chunks}
    seen: set[tuple[str, int]] = set()
    for e in info["index"]:
        key = (e["usage"], e["resource_number"])
        if key in seen:
            issues.append(f"Duplicate index entry {key[0]!r} #{key[1]}")
        seen.add(key)
        if e["offset"] not in by_offset:
            issues.append(
                f"Index entry {e['usage']!r} #{e['resource_number']} points at "
                f"{e['offset']}, which is not a chunk start"
            )
    return issues
