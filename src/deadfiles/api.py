"""
Analysis entry point: catalog -> per-file extraction/resolution/classification -> merge.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Optional, Union

from .config_loader import AnalysisConfig, load_config
from .extractor import ReferenceExtractor
from .file_catalog import FileCatalog
from .implicit_usage import ImplicitUsageClassifier, ManifestInfo
from .node_types import AnalysisResult, FileRecord
from .reachability import compute_used
from .resolver import ReferenceResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _FileOutcome:
    rel_path: str
    targets: FrozenSet[str]
    implicit: Optional[str]
    error: Optional[str] = None


class Analyzer:
    """One analysis run over a fixed catalog."""

    def __init__(self, catalog: FileCatalog, config: AnalysisConfig):
        self.catalog = catalog
        self.config = config
        self.extractor = ReferenceExtractor(config)
        self.resolver = ReferenceResolver(catalog, config)
        manifest = ManifestInfo.load(catalog.root, config, catalog)
        self.classifier = ImplicitUsageClassifier(config, manifest)

    def _process(self, record: FileRecord) -> _FileOutcome:
        implicit = self.classifier.classify(record)
        try:
            tokens = self.extractor.extract(record)
        except OSError as e:
            logger.warning("could not read %s: %s", record.rel_path, e)
            return _FileOutcome(record.rel_path, frozenset(), implicit, error=str(e))

        targets = set()
        for token in tokens:
            target = self.resolver.resolve(token.raw, record.rel_dir)
            # self targets are kept: a recursive component references itself
            if target is not None:
                targets.add(target)
        return _FileOutcome(record.rel_path, frozenset(targets), implicit)

    def run(self) -> AnalysisResult:
        records = list(self.catalog)
        workers = max(1, min(self.config.workers, len(records) or 1))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # map preserves catalog order, so the merge below is deterministic
            outcomes = list(pool.map(self._process, records))

        edges: Dict[str, FrozenSet[str]] = {}
        implicit: Dict[str, str] = {}
        failures: Dict[str, str] = {}
        for out in outcomes:
            if out.targets:
                edges[out.rel_path] = out.targets
            if out.implicit:
                implicit[out.rel_path] = out.implicit
            if out.error:
                failures[out.rel_path] = out.error

        entry_points = frozenset(ep for ep in self.config.entry_points if ep in self.catalog)
        used, unused = compute_used(
            self.catalog.paths(),
            entry_points,
            implicit,
            edges,
            policy=self.config.reachability,
        )
        logger.debug(
            "%d files, %d edges, %d used, %d unused",
            len(records),
            sum(len(v) for v in edges.values()),
            len(used),
            len(unused),
        )
        return AnalysisResult(
            root=self.catalog.root,
            files=self.catalog.paths(),
            edges=edges,
            entry_points=entry_points,
            implicit=implicit,
            used=used,
            unused=unused,
            read_failures=failures,
            policy=self.config.reachability,
        )


def analyze_project(
    root: Union[str, Path] = ".",
    config: Optional[AnalysisConfig] = None,
    config_path: Optional[Union[str, Path]] = None,
) -> AnalysisResult:
    """
    Analyze the project under ``root``.

    Args:
        root: project root directory
        config: explicit configuration; loaded from ``config_path`` or the root otherwise
        config_path: configuration file to load when ``config`` is None

    Returns:
        AnalysisResult

    Raises:
        CatalogError: the root cannot be read
        ConfigError: the configuration file is invalid
    """
    root = Path(root)
    if config is None:
        config = load_config(Path(config_path) if config_path else None, root=root)
    catalog = FileCatalog.build(root, config)
    return Analyzer(catalog, config).run()
