"""Directory walking for the indexer.

Two views of a repository tree:

- ``iter_files``: every file below a directory (no depth limit), with size and
  modification time, used by the per-file sweeps.
- ``directory_structure``: a nested, depth-bounded snapshot of the whole tree,
  stored once as the project structure record.

Both skip hidden entries and any directory or file whose name is in the skip
list, at every level.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SKIP_DIRS: tuple[str, ...] = (".git", "vendor", "node_modules", ".env")


@dataclass(frozen=True)
class FileInfo:
    """A file discovered by the walker.

    Attributes:
        path: Absolute path to the file
        size: Size in bytes
        mtime: Modification time (POSIX timestamp)
    """

    path: Path
    size: int
    mtime: float

    @property
    def modified_at(self) -> str:
        """Modification time as an ISO-8601 string (local time, seconds)."""
        return datetime.fromtimestamp(self.mtime).isoformat(timespec="seconds")

    def relative_to(self, root: Path) -> str:
        return self.path.relative_to(root).as_posix()


def _is_skipped(name: str, skip: frozenset[str]) -> bool:
    return name.startswith(".") or name in skip


def _sorted_entries(directory: Path) -> list[os.DirEntry]:
    with os.scandir(directory) as it:
        return sorted(it, key=lambda e: e.name)


def iter_files(
    root: Path,
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
    recursive: bool = True,
) -> Iterator[FileInfo]:
    """Yield every file below *root* in sorted name order.

    Unlistable subdirectories are logged and skipped.

    Args:
        root: Directory to enumerate
        skip_dirs: Entry names to skip at every level
        recursive: Descend into subdirectories (default: True)

    Raises:
        OSError: If *root* itself cannot be listed
    """
    skip = frozenset(skip_dirs)
    root = Path(root)
    pending: list[Path] = [root]

    while pending:
        directory = pending.pop()
        subdirs: list[Path] = []
        try:
            entries = _sorted_entries(directory)
        except OSError as e:
            if directory == root:
                raise
            logger.warning("Could not list %s: %s", directory, e)
            continue
        for entry in entries:
            if _is_skipped(entry.name, skip):
                continue
            if entry.is_dir():
                if recursive:
                    subdirs.append(Path(entry.path))
            elif entry.is_file():
                stat = entry.stat()
                yield FileInfo(path=Path(entry.path), size=stat.st_size, mtime=stat.st_mtime)
        # Depth-first, visiting subdirectories in name order
        pending.extend(reversed(subdirs))


def directory_structure(
    root: Path,
    max_depth: int = 3,
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
    _depth: int = 0,
) -> dict[str, Any]:
    """Return a nested snapshot of *root*, at most *max_depth* levels deep.

    Directories map to ``{"type": "directory", "children": {...}}`` and files to
    ``{"type": "file", "size": <bytes>}``. Directories at the depth limit are
    listed with empty ``children``; entries that cannot be stat-ed (dangling
    symlinks) are listed without a size.
    """
    if _depth >= max_depth:
        return {}

    skip = frozenset(skip_dirs)
    structure: dict[str, Any] = {}
    for entry in _sorted_entries(Path(root)):
        if _is_skipped(entry.name, skip):
            continue
        if entry.is_dir():
            try:
                children = directory_structure(Path(entry.path), max_depth, skip, _depth + 1)
            except OSError as e:
                logger.warning("Could not list %s: %s", entry.path, e)
                children = {}
            structure[entry.name] = {"type": "directory", "children": children}
        else:
            try:
                size = entry.stat().st_size
            except OSError as e:
                logger.warning("Could not stat %s: %s", entry.path, e)
                structure[entry.name] = {"type": "file"}
                continue
            structure[entry.name] = {"type": "file", "size": size}
    return structure
