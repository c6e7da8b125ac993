"""Manifest generation for built Blorbs.

The manifest is an optional JSON artifact summarising a container: its size
and digest, and one entry per chunk with the offset the chunk was written
at. It is only produced when explicitly requested by the caller / CLI flag.
"""

from __future__ import annotations

from pathlib import Path
import json
from typing import Any

from .packing.constants import WRAPPER_HEADER_SIZE
from .packing.index import IndexPlan

__all__ = ["build_manifest", "manifest_dict"]


def manifest_dict(
    plan: IndexPlan,
    *,
    file_sha256: str | None = None,
    control_file: str | None = None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    chunks: list[dict[str, Any]] = []
    offset = WRAPPER_HEADER_SIZE
    for c in plan.chunks:
        chunks.append(
            {
                "type": c.type,
                "usage": c.usage,
                "resource_number": c.resource_number,
                "length": c.length,
                "offset": offset,
                "source": c.source.name if c.source else None,
            }
        )
        offset += c.stored_size
    counts: dict[str, int] = {}
    for c in plan.chunks[1:]:
        key = c.usage.rstrip() if c.indexable else c.type.rstrip()
        counts[key] = counts.get(key, 0) + 1
    d: dict[str, Any] = {
        "version": 1,
        "file_size": plan.file_size,
        "index_entries": plan.entry_count,
        "counts": counts,
        "chunks": chunks,
        "control_file": control_file,
        "sha256": file_sha256,
    }
    if warnings:
        d["warnings"] = warnings
    return d


def build_manifest(
    plan: IndexPlan,
    output_path: Path,
    *,
    file_sha256: str | None = None,
    control_file: str | None = None,
    warnings: list[str] | None = None,
) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    data = manifest_dict(
        plan,
        file_sha256=file_sha256,
        control_file=control_file,
        warnings=warnings,
    )
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True)
        f.write("\n")
    return output_path
