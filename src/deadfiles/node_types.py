"""
Core data types shared by the catalog, extractor, resolver and reachability engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, Optional, Tuple


class DeadfilesError(Exception):
    """Base class for errors that abort an analysis run."""


class ReferenceKind(Enum):
    """How a reference token was found in its source file."""

    STATIC_IMPORT = "static-import"
    DYNAMIC_IMPORT = "dynamic-import"
    MARKUP_TAG = "markup-tag"
    ASSET_LITERAL = "asset-literal"
    STORE_USAGE = "store-usage"
    ROUTE_COMPONENT = "route-component"
    EMBEDDED_PATH_LITERAL = "embedded-path-literal"
    GLOBAL_COMPONENT = "global-component-registration"


@dataclass(frozen=True)
class ReferenceToken:
    raw: str
    kind: ReferenceKind


@dataclass(frozen=True)
class ResolvedEdge:
    source: str  # root-relative path of the referencing file
    target: str  # root-relative path of the referenced file


@dataclass(frozen=True)
class FileRecord:
    """A catalogued file. ``text`` is read on first access and cached."""

    path: Path
    rel_path: str  # POSIX, relative to the project root
    extension: str
    _text: Optional[str] = field(default=None, init=False, repr=False, compare=False)

    @classmethod
    def from_path(cls, root: Path, path: Path) -> "FileRecord":
        rel = path.relative_to(root).as_posix()
        return cls(path=path, rel_path=rel, extension=path.suffix)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def rel_dir(self) -> str:
        """Root-relative directory of the file ('' for files at the root)."""
        head, _, _ = self.rel_path.rpartition("/")
        return head

    @property
    def text(self) -> str:
        # cached per instance, without a lock; OSError propagates to the caller
        if self._text is None:
            object.__setattr__(self, "_text", self.path.read_text(encoding="utf-8", errors="replace"))
        return self._text


@dataclass
class AnalysisResult:
    """Outcome of one analysis pass. All paths are root-relative."""

    root: Path
    files: Tuple[str, ...]
    edges: Dict[str, FrozenSet[str]] = field(default_factory=dict)
    entry_points: FrozenSet[str] = frozenset()
    implicit: Dict[str, str] = field(default_factory=dict)  # path -> reason
    used: FrozenSet[str] = frozenset()
    unused: FrozenSet[str] = frozenset()
    read_failures: Dict[str, str] = field(default_factory=dict)
    policy: str = "flat"

    def outgoing(self, rel_path: str) -> FrozenSet[str]:
        return self.edges.get(rel_path, frozenset())

    def is_used(self, rel_path: str) -> bool:
        return rel_path in self.used

    def edge_list(self) -> Tuple[ResolvedEdge, ...]:
        return tuple(
            ResolvedEdge(source=src, target=dst)
            for src in sorted(self.edges)
            for dst in sorted(self.edges[src])
        )

    def implicit_reason(self, rel_path: str) -> Optional[str]:
        return self.implicit.get(rel_path)
