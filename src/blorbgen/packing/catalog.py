"""Resource catalog: turn control-list entries into chunk descriptors.

Each non-comment line of a control list names a usage, an optional symbolic
identifier and a resource file::

    ; comment
    pict myPic  images/cover.png
    snd  theme.ogg
    exec story.z8

The catalog resolves the usage, numbers the resource inside its usage
category, infers and checks the chunk type and loads the file. Metadata and
cover entries are single-instance and get special treatment:

- metadata is stored unindexed under the ``IFmd`` type;
- the cover is stored as an ordinary picture whose resource number is later
  referenced by the frontispiece chunk (see :mod:`.index`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..logging import get_logger
from ..reporting import get_reporter
from ..utils.io import DataError, read_control_lines, safe_read_file
from ..utils.paths import resolve_resource_path
from .constants import (
    CHUNK_HEADER_SIZE,
    COMMENT_CHARACTERS,
    EMBEDDED_CONTAINER_TAG,
    FIELD_DELIMITERS,
    IDENTIFIER_SYMBOLS,
    MAX_CHUNKS,
    UNINDEXED,
)
from .errors import (
    ChunkCapacityExceeded,
    DisallowedTypeForUsage,
    DuplicateCover,
    DuplicateMetadata,
    MalformedFilePath,
    UnreadableResourceFile,
    UnrecognizedUsage,
    line_error,
)
from .registry import (
    GLULX_TYPE,
    METADATA_TYPE,
    Usage,
    infer_type,
    resolve_usage,
    validate_type,
)

__all__ = [
    "Chunk",
    "ResourceCounters",
    "CoverReference",
    "Declaration",
    "ResourceCatalog",
    "is_identifier",
    "describe_chunk",
]

_FIELD_SPLIT = re.compile(f"[{FIELD_DELIMITERS}]+")


@dataclass(slots=True)
class Chunk:
    usage: str
    type: str
    resource_number: int
    data: bytes
    name: Optional[str] = None
    source: Optional[Path] = None
    line: Optional[int] = None

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def indexable(self) -> bool:
        return self.usage != UNINDEXED

    @property
    def embedded(self) -> bool:
        return self.type == EMBEDDED_CONTAINER_TAG

    @property
    def stored_size(self) -> int:
        """Bytes this chunk occupies in the container, padding included."""
        header = 0 if self.embedded else CHUNK_HEADER_SIZE
        return header + self.length + (self.length % 2)


@dataclass(slots=True)
class ResourceCounters:
    # Picture and sound numbers 0-2 are left unused.
    executable: int = 0
    picture: int = 3
    sound: int = 3
    metadata: int = 0

    _FIELDS = {
        Usage.EXECUTABLE: "executable",
        Usage.PICTURE: "picture",
        Usage.SOUND: "sound",
        Usage.METADATA: "metadata",
    }

    def next(self, usage: Usage) -> int:
        attr = self._FIELDS[usage]
        value = getattr(self, attr)
        setattr(self, attr, value + 1)
        return value

    def next_frontispiece(self) -> int:
        # The frontispiece shares the metadata counter, pre-incremented.
        self.metadata += 1
        return self.metadata


@dataclass(slots=True)
class CoverReference:
    position: int
    resource_number: int


@dataclass(slots=True)
class Declaration:
    usage: Usage
    resource_number: int
    name: Optional[str]
    source: Path


def is_identifier(token: str) -> bool:
    # ASCII only: a non-ASCII first word belongs to the file path.
    if not token or not token.isascii():
        return False
    first, rest = token[0], token[1:]
    if not (first.isalpha() or first in IDENTIFIER_SYMBOLS):
        return False
    return all(c.isalnum() or c in IDENTIFIER_SYMBOLS for c in rest)


def describe_chunk(chunk: Chunk, complete: bool = True) -> str:
    text = f"id#{chunk.resource_number:04d}: Use '{chunk.usage}'\tType '{chunk.type}'"
    if complete:
        text += f"\tLength: '{chunk.length}'"
    return text


class ResourceCatalog:
    """Accumulates chunks for one build; all numbering state lives here."""

    def __init__(
        self,
        base_dir: Path,
        *,
        index_only: bool = False,
        max_chunks: int = MAX_CHUNKS,
    ) -> None:
        self.base_dir = base_dir
        self.index_only = index_only
        self.max_chunks = max_chunks
        self.counters = ResourceCounters()
        self.chunks: List[Chunk] = []
        self.cover: Optional[CoverReference] = None
        self.has_metadata = False
        self.is_glulx = False
        self.warnings: List[str] = []
        self.declarations: List[Declaration] = []

    # Parsing -----------------------------------------------------------------
    def parse_entry(self, raw_line: str, line_number: int) -> Optional[Chunk]:
        """Parse one control-list line.

        Returns None for comments, blank lines, and (in index-only mode) for
        entries whose resource file cannot be read.
        """
        text = raw_line.strip(FIELD_DELIMITERS + "\r\n")
        if not text or text[0] in COMMENT_CHARACTERS:
            return None

        fields = _FIELD_SPLIT.split(text, maxsplit=1)
        token = fields[0]
        usage = resolve_usage(token)
        if usage is None:
            raise line_error(
                UnrecognizedUsage, line_number, f"Illegal use '{token}'", token=token
            )

        stored_usage = usage
        if usage is Usage.METADATA:
            if self.has_metadata:
                raise line_error(
                    DuplicateMetadata, line_number, "duplicated bibliographic info"
                )
            self.has_metadata = True
        elif usage is Usage.FRONTISPIECE:
            if self.cover is not None:
                raise line_error(DuplicateCover, line_number, "duplicated cover")
            stored_usage = Usage.PICTURE

        if len(fields) < 2 or not fields[1].strip():
            raise line_error(
                MalformedFilePath,
                line_number,
                f"missing file name after use '{token}'",
                token=token,
            )
        name, file_text = self._split_name(fields[1])

        path = resolve_resource_path(self.base_dir, file_text)
        chunk_type = infer_type(path, line_number)
        if usage is Usage.METADATA:
            chunk_type = METADATA_TYPE
        elif not validate_type(stored_usage, chunk_type):
            raise line_error(
                DisallowedTypeForUsage,
                line_number,
                f"Illegal type '{chunk_type}' for use '{stored_usage.label}' in '{path}'",
                usage=stored_usage.value,
                type=chunk_type,
                path=str(path),
            )
        if stored_usage is Usage.EXECUTABLE:
            self.is_glulx = chunk_type == GLULX_TYPE

        resource_number = self.counters.next(stored_usage)
        if usage is Usage.FRONTISPIECE:
            self.cover = CoverReference(len(self.chunks), resource_number)
        elif stored_usage in (Usage.PICTURE, Usage.SOUND):
            self.declarations.append(
                Declaration(stored_usage, resource_number, name, path)
            )

        try:
            data = safe_read_file(path)
        except DataError as exc:
            message = f"{line_number}: {exc}"
            if not self.index_only:
                raise UnreadableResourceFile(
                    message=message,
                    context={"line": line_number, "path": str(path)},
                ) from exc
            self.warnings.append(message)
            get_logger().warning(message)
            return None

        return Chunk(
            usage=UNINDEXED if usage is Usage.METADATA else stored_usage.value,
            type=chunk_type,
            resource_number=resource_number,
            data=data,
            name=name,
            source=path,
            line=line_number,
        )

    @staticmethod
    def _split_name(rest: str) -> tuple[Optional[str], str]:
        parts = _FIELD_SPLIT.split(rest.strip(FIELD_DELIMITERS), maxsplit=1)
        if len(parts) == 2 and is_identifier(parts[0]) and parts[1].strip():
            return parts[0], parts[1].strip(FIELD_DELIMITERS)
        return None, rest.strip(FIELD_DELIMITERS)

    # Accumulation ------------------------------------------------------------
    def add(self, chunk: Chunk) -> None:
        # One slot is always kept for the resource index chunk.
        if len(self.chunks) + 1 >= self.max_chunks:
            raise line_error(
                ChunkCapacityExceeded,
                chunk.line,
                f"too many chunks (maximum is {self.max_chunks})",
                limit=self.max_chunks,
            )
        self.chunks.append(chunk)
        get_reporter().verbose(describe_chunk(chunk), level=1)

    def read(self, lines: Iterable[str]) -> List[Chunk]:
        for line_number, raw in enumerate(lines, start=1):
            chunk = self.parse_entry(raw, line_number)
            if chunk is not None:
                self.add(chunk)
        return self.chunks

    def counts(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for c in self.chunks:
            key = c.usage.rstrip() if c.indexable else c.type.rstrip()
            out[key] = out.get(key, 0) + 1
        return out

    @classmethod
    def from_control_file(
        cls, path: Path, *, index_only: bool = False
    ) -> "ResourceCatalog":
        catalog = cls(path.parent, index_only=index_only)
        catalog.read(read_control_lines(path))
        return catalog
