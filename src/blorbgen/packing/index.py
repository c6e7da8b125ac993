"""Resource index (``RIdx``) construction.

The index is the first chunk of every Blorb. It lists, for each indexed
chunk, the usage tag, the resource number and the absolute file offset of
the chunk. Offsets are only known while the container is being written, so
the builder leaves them zero and returns a patch table: for every record,
the absolute file position of its offset field. The writer fills those in
(see :func:`blorbgen.packing.writer.write_blorb`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..reporting import get_reporter
from .catalog import Chunk, CoverReference, ResourceCounters, describe_chunk
from .codec import pack_id, pack_u32
from .constants import (
    INDEX_COUNT_SIZE,
    INDEX_DATA_OFFSET,
    INDEX_RECORD_SIZE,
    INDEX_TAG,
    MAX_CHUNKS,
    UNINDEXED,
    WRAPPER_HEADER_SIZE,
)
from .errors import ChunkCapacityExceeded
from .registry import FRONTISPIECE_TYPE

__all__ = ["OffsetPatch", "IndexPlan", "build_index", "make_frontispiece"]


@dataclass(slots=True)
class OffsetPatch:
    chunk_position: int  # position of the indexed chunk in IndexPlan.chunks
    buffer_position: int  # offset field position inside the index data
    file_position: int  # same field, absolute in the output file
    resolved: Optional[int] = None  # chunk offset, set by the writer


@dataclass(slots=True)
class IndexPlan:
    index_chunk: Chunk
    chunks: List[Chunk]  # write order, index chunk first
    patch_table: List[OffsetPatch] = field(default_factory=list)

    @property
    def entry_count(self) -> int:
        return len(self.patch_table)

    @property
    def file_size(self) -> int:
        return WRAPPER_HEADER_SIZE + sum(c.stored_size for c in self.chunks)


def make_frontispiece(cover: CoverReference, counters: ResourceCounters) -> Chunk:
    return Chunk(
        usage=UNINDEXED,
        type=FRONTISPIECE_TYPE,
        resource_number=counters.next_frontispiece(),
        data=pack_u32(cover.resource_number),
    )


def build_index(
    chunks: Sequence[Chunk],
    *,
    cover: Optional[CoverReference] = None,
    counters: Optional[ResourceCounters] = None,
    max_chunks: int = MAX_CHUNKS,
) -> IndexPlan:
    """Build the index chunk and patch table for ``chunks``.

    ``chunks`` are the catalog chunks in control-list order. A frontispiece
    chunk is appended when ``cover`` is given; it is stored unindexed.
    """
    ordered: List[Chunk] = list(chunks)
    if cover is not None:
        ordered.append(make_frontispiece(cover, counters or ResourceCounters()))
    if len(ordered) + 1 > max_chunks:
        raise ChunkCapacityExceeded(
            message=f"too many chunks ({len(ordered) + 1}, maximum is {max_chunks})",
            context={"count": len(ordered) + 1, "limit": max_chunks},
        )

    n = sum(1 for c in ordered if c.indexable)
    data = bytearray(INDEX_COUNT_SIZE + INDEX_RECORD_SIZE * n)
    data[0:INDEX_COUNT_SIZE] = pack_u32(n)

    index_chunk = Chunk(
        usage=UNINDEXED, type=INDEX_TAG, resource_number=0, data=b""
    )
    plan = IndexPlan(index_chunk=index_chunk, chunks=[index_chunk, *ordered])

    rep = get_reporter()
    cursor = INDEX_COUNT_SIZE
    for position, chunk in enumerate(plan.chunks):
        if not chunk.indexable:
            continue
        data[cursor : cursor + 4] = pack_id(chunk.usage)
        data[cursor + 4 : cursor + 8] = pack_u32(chunk.resource_number)
        offset_field = cursor + 8
        plan.patch_table.append(
            OffsetPatch(
                chunk_position=position,
                buffer_position=offset_field,
                file_position=offset_field + INDEX_DATA_OFFSET,
            )
        )
        rep.verbose(f"\t\t{describe_chunk(chunk)}", level=2)
        cursor += INDEX_RECORD_SIZE

    index_chunk.data = bytes(data)
    return plan
