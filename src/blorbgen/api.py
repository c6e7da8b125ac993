"""High-level API for blorbgen.

A build runs in two strictly sequential passes:

1. read the control list into a :class:`ResourceCatalog` and build the
   resource index (:func:`build_index`);
2. write the container, patching index offsets as chunks are emitted
   (:func:`write_blorb_file`).

The declarations file and manifest are optional by-products.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
import hashlib

from .config import (
    container_extension,
    declarations_path,
    resolve_control_path,
)
from .declarations import write_declarations_file
from .logging import get_logger
from .manifest import build_manifest
from .packing.catalog import ResourceCatalog
from .packing.index import IndexPlan, build_index
from .packing.inspector import (
    inspect_blorb as _inspect_blorb_impl,
    validate_blorb as _validate_blorb_impl,
)
from .packing.writer import write_blorb_file
from .reporting import get_reporter, task
from .utils.io import read_control_lines
from .utils.paths import with_extension

__all__ = [
    "BuildOptions",
    "BuildResult",
    "load_catalog",
    "plan_build",
    "build_blorb",
    "inspect_blorb",
    "validate_blorb",
]


@dataclass(slots=True)
class BuildOptions:
    control_file: Path
    # Explicit container path; derived from the control file when None
    output_path: Path | None = None
    # Only produce the declarations file; unreadable resources become warnings
    index_only: bool = False
    emit_declarations: bool = True
    declarations_path: Path | None = None
    short_extension: bool = False
    # Optional path; when provided a manifest JSON is written after the build
    manifest_path: Path | None = None
    # Name shown in the declarations header
    program: str = "bresc"
    # Fixed declarations timestamp (tests / reproducible builds)
    timestamp: datetime | None = None


@dataclass(slots=True)
class BuildResult:
    control_file: Path
    output_file: Path | None
    declarations_file: Path | None
    bytes_written: int
    chunk_count: int
    index_entries: int
    warnings: list[str] = field(default_factory=list)


def load_catalog(control_file: Path, *, index_only: bool = False) -> ResourceCatalog:
    path = resolve_control_path(Path(control_file))
    lines = read_control_lines(path)
    catalog = ResourceCatalog(path.parent, index_only=index_only)
    with task("catalog.read", "Read control list") as stats:
        catalog.read(lines)
        stats.update(chunks=len(catalog.chunks), warnings=len(catalog.warnings))
    return catalog


def plan_build(
    control_file: Path, *, index_only: bool = False
) -> tuple[ResourceCatalog, IndexPlan]:
    """Run the first pass only: read the control list and build the index."""
    catalog = load_catalog(control_file, index_only=index_only)
    with task("index.build", "Build resource index") as stats:
        plan = build_index(
            catalog.chunks, cover=catalog.cover, counters=catalog.counters
        )
        stats.update(chunks=len(plan.chunks), entries=plan.entry_count)
    return catalog, plan


def _output_path(options: BuildOptions, control: Path, catalog: ResourceCatalog) -> Path:
    if options.output_path is not None:
        return options.output_path
    ext = container_extension(
        short_extension=options.short_extension,
        has_metadata=catalog.has_metadata,
        is_glulx=catalog.is_glulx,
    )
    return with_extension(control, ext)


def build_blorb(options: BuildOptions) -> BuildResult:
    logger = get_logger()
    rep = get_reporter()
    control = resolve_control_path(Path(options.control_file))
    rep.status(f"Processing '{control}'...")
    catalog, plan = plan_build(control, index_only=options.index_only)
    rep.status(
        "Catalog summary: "
        + " ".join(f"{k}={v}" for k, v in sorted(catalog.counts().items()))
        + f" cover={'yes' if catalog.cover else 'no'}"
        + f" warnings={len(catalog.warnings)}"
    )

    bli_file: Path | None = None
    if options.emit_declarations:
        bli_file = options.declarations_path or declarations_path(control)
        with task("declarations.emit", "Write declarations"):
            write_declarations_file(
                catalog.declarations,
                bli_file,
                program=options.program,
                timestamp=options.timestamp,
            )
        logger.info(
            "Emitted declarations: %s (%d constants)",
            bli_file.name,
            len(catalog.declarations),
        )

    out_file: Path | None = None
    bytes_written = 0
    if not options.index_only:
        out_file = _output_path(options, control, catalog)
        bytes_written = write_blorb_file(plan, out_file)
        if options.manifest_path is not None:
            with task("manifest.emit", "Emit manifest"):
                file_sha256 = hashlib.sha256(out_file.read_bytes()).hexdigest()
                build_manifest(
                    plan,
                    options.manifest_path,
                    file_sha256=file_sha256,
                    control_file=control.name,
                    warnings=catalog.warnings or None,
                )
            logger.info(
                "Emitted manifest: %s (sha256=%s)",
                options.manifest_path.name,
                file_sha256[:12],
            )

    final = out_file or bli_file
    rep.status(
        "Build summary: file="
        + f"{final.name if final else '-'} bytes={bytes_written} chunks={len(plan.chunks)} indexed={plan.entry_count}"
    )
    return BuildResult(
        control_file=control,
        output_file=out_file,
        declarations_file=bli_file,
        bytes_written=bytes_written,
        chunk_count=len(plan.chunks),
        index_entries=plan.entry_count,
        warnings=list(catalog.warnings),
    )


def inspect_blorb(path: str | Path) -> dict:
    return _inspect_blorb_impl(path)


def validate_blorb(path: str | Path) -> list[str]:
    info = _inspect_blorb_impl(path)
    return _validate_blorb_impl(info)
