#!/usr/bin/env python3
"""Index a repository's files, schema artifacts, routes and configuration.

One run walks the repository in a fixed sequence of sweeps and writes one
record per artifact, followed by a single summary record:

- **structure**: depth-bounded snapshot of the whole tree.
- **files**: every file under the configured top-level areas.
- **migrations** / **models**: database artifacts.
- **routes**: the named route-definition files.
- **config**: files in the configuration directory.

With ``rebuild`` the store is truncated first; otherwise records accumulate.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from rich.console import Console
from rich.progress import track

from repoindex.classifier import classify
from repoindex.config import IndexSettings
from repoindex.extractors import (
    extract_class_names,
    extract_config_keys,
    extract_fillable_fields,
    extract_function_names,
    extract_migration_operations,
    extract_relationships,
    extract_routes,
    extract_table_names,
)
from repoindex.records import (
    LARGE_FILE_PREVIEW,
    UNREADABLE_PREVIEW,
    ConfigMetadata,
    FileMetadata,
    IndexRecord,
    MigrationMetadata,
    ModelMetadata,
    RecordType,
    RouteMetadata,
    StructureMetadata,
    SummaryMetadata,
    format_bytes,
    make_preview,
)
from repoindex.store import RecordStore
from repoindex.walker import FileInfo, directory_structure, iter_files

logger = logging.getLogger(__name__)

console = Console()


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------


@dataclass
class IndexResult:
    """Summary of an indexing run."""

    records_written: int = 0
    by_type: Counter[str] = field(default_factory=Counter)
    files_skipped: int = 0
    errors: int = 0

    def record(self, records: list[IndexRecord]) -> None:
        """Count records written by one sweep."""
        self.records_written += len(records)
        self.by_type.update(r.type.value for r in records)

    def accumulate(self, other: IndexResult) -> None:
        """Merge another result into this one."""
        self.records_written += other.records_written
        self.by_type.update(other.by_type)
        self.files_skipped += other.files_skipped
        self.errors += other.errors


# ---------------------------------------------------------------------------
# Content helpers
# ---------------------------------------------------------------------------


@dataclass
class FileContent:
    """Outcome of reading one file for indexing.

    ``text`` is None when the file was not read (too large) or could not be
    decoded; ``preview`` then holds the matching sentinel.
    """

    text: str | None
    preview: str
    skipped: bool = False
    failed: bool = False


def _read_content(path: Path, size: int, settings: IndexSettings) -> FileContent:
    """Read *path* as UTF-8 text unless it is at or above the size limit."""
    if size >= settings.max_file_size:
        logger.warning("Not reading %s: %d bytes exceeds the size limit", path, size)
        return FileContent(text=None, preview=LARGE_FILE_PREVIEW, skipped=True)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return FileContent(text=None, preview=UNREADABLE_PREVIEW, failed=True)
    return FileContent(text=text, preview=make_preview(text, settings.preview_length))


def _sweep_files(directory: Path, settings: IndexSettings) -> list[FileInfo]:
    """Non-recursive listing of a fixed artifact directory ([] if missing)."""
    if not directory.is_dir():
        return []
    return list(iter_files(directory, settings.skip_dirs, recursive=False))


def _tally(result: IndexResult, content: FileContent) -> None:
    if content.skipped:
        result.files_skipped += 1
    if content.failed:
        result.errors += 1


# ---------------------------------------------------------------------------
# Sweeps
# ---------------------------------------------------------------------------


def _index_structure(root: Path, settings: IndexSettings) -> list[IndexRecord]:
    console.print("[cyan]Indexing project structure...[/cyan]")
    tree = directory_structure(root, settings.structure_depth, settings.skip_dirs)
    return [
        IndexRecord(
            type=RecordType.STRUCTURE,
            category="project",
            name="Project Structure",
            path="/",
            description="Complete project directory structure",
            metadata=StructureMetadata(tree=tree),
        )
    ]


def _build_file_record(
    info: FileInfo,
    root: Path,
    area: str,
    settings: IndexSettings,
    result: IndexResult,
) -> IndexRecord:
    """Read and classify a single swept file and return its record."""
    file_class = classify(info.path, area)
    content = _read_content(info.path, info.size, settings)
    _tally(result, content)

    metadata = FileMetadata(
        extension=file_class.extension,
        size_human=format_bytes(info.size),
        type=file_class.language,
    )
    if content.text is not None:
        metadata.lines = content.text.count("\n") + 1
        if file_class.extract_symbols:
            metadata.classes = extract_class_names(content.text)
            metadata.functions = extract_function_names(content.text)

    return IndexRecord(
        type=RecordType.FILE,
        category=file_class.category,
        name=info.path.name,
        path=info.relative_to(root),
        description=file_class.description,
        metadata=metadata,
        content_preview=content.preview,
        size=info.size,
        last_modified=info.modified_at,
    )


def _index_source_files(
    root: Path, settings: IndexSettings, result: IndexResult
) -> list[IndexRecord]:
    console.print("[cyan]Indexing source files...[/cyan]")
    records: list[IndexRecord] = []

    for area, description in settings.areas.items():
        area_path = root / area
        if not area_path.is_dir():
            logger.debug("Area %s not present, skipping", area)
            continue

        files = list(iter_files(area_path, settings.skip_dirs))
        for info in track(files, description=f"Reading {description}...", console=console):
            records.append(_build_file_record(info, root, area, settings, result))

        console.print(f"[dim]{area}: {len(files)} files[/dim]")

    return records


def _index_migrations(
    root: Path, settings: IndexSettings, result: IndexResult
) -> list[IndexRecord]:
    records: list[IndexRecord] = []
    for info in _sweep_files(root / settings.migrations_dir, settings):
        content = _read_content(info.path, info.size, settings)
        _tally(result, content)
        metadata = MigrationMetadata()
        if content.text is not None:
            metadata.tables = extract_table_names(content.text)
            metadata.operations = extract_migration_operations(content.text)
        records.append(
            IndexRecord(
                type=RecordType.DATABASE,
                category="migration",
                name=info.path.name,
                path=info.relative_to(root),
                description="Database migration file",
                metadata=metadata,
                content_preview=content.preview,
            )
        )
    return records


def _index_models(
    root: Path, settings: IndexSettings, result: IndexResult
) -> list[IndexRecord]:
    records: list[IndexRecord] = []
    for info in _sweep_files(root / settings.models_dir, settings):
        content = _read_content(info.path, info.size, settings)
        _tally(result, content)
        class_name = info.path.stem
        metadata = ModelMetadata(class_name=class_name)
        if content.text is not None:
            metadata.relationships = extract_relationships(content.text)
            metadata.fillable = extract_fillable_fields(content.text)
        records.append(
            IndexRecord(
                type=RecordType.DATABASE,
                category="model",
                name=class_name,
                path=info.relative_to(root),
                description=f"Eloquent model for {class_name}",
                metadata=metadata,
                content_preview=content.preview,
            )
        )
    return records


def _index_database(
    root: Path, settings: IndexSettings, result: IndexResult
) -> list[IndexRecord]:
    console.print("[cyan]Indexing database structure...[/cyan]")
    return _index_migrations(root, settings, result) + _index_models(root, settings, result)


def _index_routes(
    root: Path, settings: IndexSettings, result: IndexResult
) -> list[IndexRecord]:
    console.print("[cyan]Indexing routes...[/cyan]")
    records: list[IndexRecord] = []

    for route_file in settings.route_files:
        path = root / settings.routes_dir / route_file
        if not path.is_file():
            continue
        content = _read_content(path, path.stat().st_size, settings)
        _tally(result, content)
        metadata = RouteMetadata()
        if content.text is not None:
            metadata.routes = [r.as_dict() for r in extract_routes(content.text)]
        group = Path(route_file).stem
        records.append(
            IndexRecord(
                type=RecordType.ROUTE,
                category=group,
                name=route_file,
                path=path.relative_to(root).as_posix(),
                description=f"Route definitions for {group}",
                metadata=metadata,
                content_preview=content.preview,
            )
        )

    return records


def _index_configurations(
    root: Path, settings: IndexSettings, result: IndexResult
) -> list[IndexRecord]:
    console.print("[cyan]Indexing configurations...[/cyan]")
    records: list[IndexRecord] = []

    for info in _sweep_files(root / settings.config_dir, settings):
        content = _read_content(info.path, info.size, settings)
        _tally(result, content)
        config_name = info.path.stem
        metadata = ConfigMetadata()
        if content.text is not None:
            metadata.keys = extract_config_keys(content.text)
        records.append(
            IndexRecord(
                type=RecordType.CONFIG,
                category="application",
                name=config_name,
                path=info.relative_to(root),
                description=f"Configuration for {config_name}",
                metadata=metadata,
                content_preview=content.preview,
            )
        )

    return records


def _build_summary(store: RecordStore) -> IndexRecord:
    """Summarize everything currently in the store."""
    console.print("[cyan]Generating index summary...[/cyan]")
    summary = SummaryMetadata(
        total_items=store.count(),
        by_type=store.grouped_counts("type"),
        by_category=store.grouped_counts("category"),
        generated_at=datetime.now(UTC).isoformat(),
    )
    return IndexRecord(
        type=RecordType.SUMMARY,
        category="meta",
        name="Index Summary",
        description="Complete repository index summary and statistics",
        metadata=summary,
    )


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def index_repository(
    settings: IndexSettings | None = None,
    *,
    rebuild: bool = False,
    store: RecordStore | None = None,
) -> IndexResult:
    """Run a full indexing pass over the repository.

    Args:
        settings: Repository layout and limits (default: from config)
        rebuild: Truncate the store before indexing
        store: Record store to write to (default: the configured one)

    Returns:
        Counts of what this run wrote, skipped and failed on.

    Raises:
        FileNotFoundError: If the repository root does not exist
    """
    settings = settings or IndexSettings()
    root = settings.resolved_root
    if not root.is_dir():
        msg = f"Repository root not found: {root}"
        raise FileNotFoundError(msg)

    store = store or RecordStore()

    console.print(f"[cyan]Indexing repository:[/cyan] {root}")
    if rebuild:
        console.print("[dim]Mode: full rebuild[/dim]")
        store.truncate()

    store.ensure_table()

    result = IndexResult()
    sweeps = (
        ("structure", lambda r: _index_structure(root, settings)),
        ("files", lambda r: _index_source_files(root, settings, r)),
        ("database", lambda r: _index_database(root, settings, r)),
        ("routes", lambda r: _index_routes(root, settings, r)),
        ("config", lambda r: _index_configurations(root, settings, r)),
    )
    for name, sweep in sweeps:
        sweep_result = IndexResult()
        records = sweep(sweep_result)
        store.insert_many(records)
        sweep_result.record(records)
        logger.info(
            "Sweep %s: %d records, %d not read, %d errors",
            name,
            sweep_result.records_written,
            sweep_result.files_skipped,
            sweep_result.errors,
        )
        result.accumulate(sweep_result)

    summary = [_build_summary(store)]
    store.insert_many(summary)
    result.record(summary)

    console.print()
    console.print(
        f"[bold green]Done:[/bold green] {result.records_written} records written"
    )
    if result.files_skipped:
        console.print(f"[dim]{result.files_skipped} large files not read[/dim]")
    if result.errors:
        console.print(f"[red]{result.errors} files could not be read[/red]")

    return result
