"""Binary writer emitting a Blorb container from an :class:`IndexPlan`.

Chunks are written strictly in plan order. The index chunk goes first with
zeroed offset fields; each indexed chunk's true offset is only known right
before it is written, at which point the writer seeks back into the index,
patches the field recorded in the plan's patch table and returns to the end
of the stream. The IFF size field is patched last.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import BinaryIO

from ..logging import get_logger, section
from ..reporting import get_reporter
from .catalog import Chunk, describe_chunk
from .codec import pack_id, pack_u32
from .constants import (
    FORM_TAG,
    FORMAT_TAG,
    WRAPPER_HEADER_SIZE,
)
from .errors import BlorbError
from .index import IndexPlan

__all__ = ["write_chunk", "write_blorb", "write_blorb_file", "render_blorb"]


def write_chunk(f: BinaryIO, chunk: Chunk) -> int:
    """Write one chunk; returns the number of bytes written.

    Embedded containers (type ``FORM``) already carry their own IFF header
    and are written as raw data.
    """
    written = 0
    if not chunk.embedded:
        f.write(pack_id(chunk.type))
        f.write(pack_u32(chunk.length))
        written += 8
    f.write(chunk.data)
    written += chunk.length
    if chunk.length % 2:
        f.write(b"\x00")
        written += 1
    return written


def write_blorb(plan: IndexPlan, f: BinaryIO) -> int:
    """Write the container described by ``plan`` to the seekable stream ``f``.

    Offsets are relative to the stream position on entry. Returns total
    bytes written.
    """
    base = f.tell()
    f.write(pack_id(FORM_TAG))
    f.write(pack_u32(0))  # patched once every chunk is out
    f.write(pack_id(FORMAT_TAG))

    patches = iter(plan.patch_table)
    pending = next(patches, None)
    rep = get_reporter()
    rep.start_task("write.chunks", "Write chunks", total=len(plan.chunks))
    for position, chunk in enumerate(plan.chunks):
        here = f.tell() - base
        if position == 0 and here != WRAPPER_HEADER_SIZE:  # pragma: no cover
            raise BlorbError(
                message=f"Index chunk expected at {WRAPPER_HEADER_SIZE}, got {here}"
            )
        if chunk.indexable:
            if pending is None or pending.chunk_position != position:
                raise BlorbError(
                    message=f"Patch table out of step at chunk {position}",
                    context={"position": position},
                )
            f.seek(base + pending.file_position)
            f.write(pack_u32(here))
            f.seek(base + here)
            pending.resolved = here
            pending = next(patches, None)
        write_chunk(f, chunk)
        rep.advance(
            "write.chunks",
            current_item=f"Chunk {position + 1:04d}({describe_chunk(chunk, False)})",
        )
    if pending is not None:
        raise BlorbError(
            message="Patch table has entries for chunks that were not written",
            context={"chunk_position": pending.chunk_position},
        )

    end = f.tell()
    total = end - base
    f.seek(base + 4)
    f.write(pack_u32(total - 8))
    f.seek(end)
    rep.end_task(
        "write.chunks",
        entries=plan.entry_count,
        chunks=len(plan.chunks),
        bytes=total,
    )
    return total


def write_blorb_file(plan: IndexPlan, output_path: Path) -> int:
    logger = get_logger()
    with section(f"Write Blorb {output_path.name}"):
        with output_path.open("wb") as f:
            size = write_blorb(plan, f)
    if size != plan.file_size:
        raise BlorbError(
            message=f"File size mismatch vs plan: plan={plan.file_size} actual={size}",
        )
    logger.info(
        "Wrote Blorb size=%d bytes chunks=%d indexed=%d",
        size,
        len(plan.chunks),
        plan.entry_count,
    )
    return size


def render_blorb(plan: IndexPlan) -> bytes:
    """Write ``plan`` into memory and return the container bytes."""
    buf = io.BytesIO()
    write_blorb(plan, buf)
    return buf.getvalue()

