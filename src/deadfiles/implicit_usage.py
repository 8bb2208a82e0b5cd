"""
Implicit usage: files that count as used without any inbound reference.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Container, FrozenSet, Optional

from .config_loader import AnalysisConfig
from .node_types import FileRecord

logger = logging.getLogger(__name__)

DECLARATION_SUFFIX = ".d.ts"
STATE_MODULE_SEGMENT = "stores"
STATE_MODULE_MARKERS = ("defineStore", "createPinia")
SCRIPT_EXTENSIONS = (".js", ".ts")
STYLE_RESOURCE_SEGMENTS = ("assets/css/", "assets/tailwind/")
STYLE_RESOURCE_SUFFIXES = (
    "tailwind.css", "main.css", "tailwind.config.js", "tailwind.config.ts",
)

_NODE_SCRIPT_RE = re.compile(r"\bnode\s+([^\s;&|]+)")


@dataclass(frozen=True)
class ManifestInfo:
    """What the project manifest (package.json) contributes to implicit usage."""

    present: bool = False
    scripts: FrozenSet[str] = frozenset()  # root-relative script paths

    @classmethod
    def load(cls, root: Path, config: AnalysisConfig, catalog: Container[str]) -> "ManifestInfo":
        """Read the manifest; a parse failure only disables script detection."""
        if config.manifest not in catalog:
            return cls()

        path = Path(root) / config.manifest
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("could not parse manifest %s: %s", path, e)
            return cls(present=True)

        scripts = data.get("scripts") if isinstance(data, dict) else None
        if not isinstance(scripts, dict):
            return cls(present=True)

        found = set()
        for command in scripts.values():
            if not isinstance(command, str):
                continue
            for match in _NODE_SCRIPT_RE.finditer(command):
                rel = Path(match.group(1)).as_posix()
                while rel.startswith("./"):
                    rel = rel[2:]
                if rel in catalog:
                    found.add(rel)
        return cls(present=True, scripts=frozenset(found))


class ImplicitUsageClassifier:
    """Per-file classification, independent of other files and of ordering."""

    def __init__(self, config: AnalysisConfig, manifest: Optional[ManifestInfo] = None):
        self.config = config
        self.manifest = manifest or ManifestInfo()
        self.config_files = tuple(config.config_files)
        self.implicit_dirs = tuple(d.rstrip("/") for d in config.implicit_dirs)
        self.platform_files = frozenset(config.platform_files)

    def classify(self, record: FileRecord) -> Optional[str]:
        """
        Return why ``record`` is implicitly used, or None.

        Reasons: config-file, state-module, style-resource, implicit-directory,
        manifest, platform-file, manifest-script.
        """
        rel = record.rel_path

        if self._is_config_file(rel):
            return "config-file"
        if self._is_state_module(record):
            return "state-module"
        if self._is_style_resource(rel):
            return "style-resource"
        if any(rel.startswith(prefix) for prefix in self.implicit_dirs):
            return "implicit-directory"
        if self.manifest.present and rel == self.config.manifest:
            return "manifest"
        if rel in self.platform_files:
            return "platform-file"
        if rel in self.manifest.scripts:
            return "manifest-script"
        return None

    def _is_config_file(self, rel: str) -> bool:
        return rel.endswith(self.config_files) or rel.endswith(DECLARATION_SUFFIX)

    def _is_state_module(self, record: FileRecord) -> bool:
        segments = record.rel_path.split("/")[:-1]
        if STATE_MODULE_SEGMENT not in segments:
            return False
        if record.extension not in SCRIPT_EXTENSIONS:
            return False
        try:
            text = record.text
        except OSError as e:
            logger.warning("could not read %s: %s", record.rel_path, e)
            return False
        return any(marker in text for marker in STATE_MODULE_MARKERS)

    @staticmethod
    def _is_style_resource(rel: str) -> bool:
        padded = "/" + rel
        if any("/" + seg in padded for seg in STYLE_RESOURCE_SEGMENTS):
            return True
        return rel.endswith(STYLE_RESOURCE_SUFFIXES)
