"""
Enumerate candidate files under the project root.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .config_loader import AnalysisConfig
from .node_types import DeadfilesError, FileRecord

logger = logging.getLogger(__name__)


class CatalogError(DeadfilesError):
    """The project root itself cannot be catalogued."""


def _rel(root: Path, path: str) -> str:
    return Path(os.path.relpath(path, root)).as_posix()


def _walk(
    root: Path, excluded_dirs: Tuple[str, ...], excluded_files: Iterable[str]
) -> Iterator[Tuple[str, str]]:
    """Yield (absolute path, file name) for every non-excluded file.

    Uses an explicit stack instead of recursion. Unreadable directories below
    the root are logged and skipped.
    """
    excluded_names = set(excluded_files)
    stack: List[str] = [str(root)]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            if current == str(root):
                raise CatalogError(f"cannot read project root {root}: {e}") from e
            logger.warning("could not read directory %s: %s", current, e)
            continue

        subdirs: List[str] = []
        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                logger.warning("could not stat %s: %s", entry.path, e)
                continue
            if is_dir:
                rel = _rel(root, entry.path)
                if any(rel.startswith(prefix) for prefix in excluded_dirs):
                    continue
                subdirs.append(entry.path)
            elif entry.name not in excluded_names:
                yield entry.path, entry.name
        # reversed so directories pop in name order
        stack.extend(reversed(subdirs))


class FileCatalog:
    """Immutable set of catalogued files keyed by root-relative path."""

    def __init__(self, root: Path, records: Iterable[FileRecord]):
        self.root = root
        by_rel: Dict[str, FileRecord] = {}
        for rec in records:
            by_rel.setdefault(rec.rel_path, rec)
        self._records: Dict[str, FileRecord] = dict(sorted(by_rel.items()))

    @classmethod
    def build(cls, root: Path, config: AnalysisConfig) -> "FileCatalog":
        root = Path(root).resolve()
        if not root.is_dir():
            raise CatalogError(f"project root is not a directory: {root}")

        allowed = set(config.extensions)
        records: List[FileRecord] = []
        for path, name in _walk(root, config.excluded_dirs, config.excluded_files):
            if os.path.splitext(name)[1] not in allowed:
                continue
            records.append(FileRecord.from_path(root, Path(path)))
        catalog = cls(root, records)
        logger.debug("catalogued %d files under %s", len(catalog), root)
        return catalog

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self._records.values())

    def __contains__(self, rel_path: object) -> bool:
        return rel_path in self._records

    def get(self, rel_path: str) -> Optional[FileRecord]:
        return self._records.get(rel_path)

    def paths(self) -> Tuple[str, ...]:
        return tuple(self._records)
