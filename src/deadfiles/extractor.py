"""
Reference extraction: scan one file's text for candidate reference tokens.

Extraction is a best-effort pattern scan, not a parser. Every rule is an
entry in a declarative table of (kind, pattern, file gate, transform); a
single loop applies the table to a file. Text that matches no rule is ignored,
so malformed sources never raise.

Rules:
 - static imports: ``import x from "y"``, ``import "y"``, ``export * from "y"``,
   CSS ``@import "y"`` and CommonJS ``require("y")``
 - dynamic imports: ``import("y")``
 - markup tags: every opening tag name in markup files (``.vue``)
 - asset literals: quoted ``./`` / ``../`` paths to style and image files
 - store usage: ``useUserProfileStore(`` -> ``@/stores/user-profile``
 - route components (router scripts only): ``component: () => import("y")``
   or ``component: HomeView``
 - global components (application entry only): ``app.component("Name", ...)``
 - embedded path literals (``.json`` / ``.sql`` only): quoted file paths
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, Optional, Pattern, Set, Tuple

from .config_loader import AnalysisConfig
from .node_types import FileRecord, ReferenceKind, ReferenceToken

Gate = Callable[[FileRecord], bool]
Transform = Callable[[str], str]

SCRIPT_EXTENSIONS = (".js", ".ts")
ASSET_EXTENSIONS = ("css", "scss", "less", "svg", "png", "jpg", "jpeg", "gif", "webp")

_STATIC_IMPORT_RE = re.compile(
    r"""\bimport\s+(?:type\s+)?(?:[\w*${}\s,]+?\s*from\s*)?["']([^"'\n]+)["']"""
)
_EXPORT_FROM_RE = re.compile(r"""\bexport\s+(?:type\s+)?[\w*${}\s,]+?\s*from\s*["']([^"'\n]+)["']""")
_REQUIRE_RE = re.compile(r"""\brequire\(\s*["']([^"'\n]+)["']\s*\)""")
_DYNAMIC_IMPORT_RE = re.compile(r"""\bimport\(\s*["']([^"'\n]+)["']\s*\)""")
_MARKUP_TAG_RE = re.compile(r"<([a-zA-Z][\w-]*)\b[^>]*/?>")
_ASSET_LITERAL_RE = re.compile(
    r"""["'](\.\.?/[^"'\n]*?\.(?:%s))["']""" % "|".join(ASSET_EXTENSIONS)
)
_STORE_USAGE_RE = re.compile(r"\buse(\w+)Store\s*\(")
_ROUTE_COMPONENT_RE = re.compile(
    r"""component:\s*(?:(?:async\s*)?\(\)\s*=>\s*)?"""
    r"""(?:import\s*\(\s*["']([^"']+)["']\s*\)|(\w+))"""
)
_GLOBAL_COMPONENT_RE = re.compile(r"""\bapp\.component\(\s*["'](\w+)["']""")
_CAMEL_BOUNDARY_RE = re.compile(r"([a-z0-9])([A-Z])")


@dataclass(frozen=True)
class ExtractionRule:
    kind: ReferenceKind
    pattern: Pattern[str]
    gate: Optional[Gate] = None
    transform: Optional[Transform] = None

    def applies_to(self, record: FileRecord) -> bool:
        return self.gate is None or self.gate(record)

    def scan(self, text: str) -> Iterable[str]:
        for match in self.pattern.finditer(text):
            # first participating group; alternations leave the others None
            raw = next((g for g in match.groups() if g), None)
            if not raw:
                continue
            yield self.transform(raw) if self.transform else raw


def store_module_name(name: str) -> str:
    """``UserProfile`` -> ``user-profile``."""
    return _CAMEL_BOUNDARY_RE.sub(r"\1-\2", name).lower()


def build_rules(config: AnalysisConfig) -> Tuple[ExtractionRule, ...]:
    """Build the extraction table for one configuration."""
    store_dir = config.store_alias_dir.rstrip("/")
    markup = tuple(config.markup_extensions)
    entry_names = tuple(config.app_entry_files)
    literal_exts = "|".join(re.escape(ext.lstrip(".")) for ext in config.extensions)
    embedded_re = re.compile(r"""["']([^"'\s]+?\.(?:%s))["']""" % literal_exts)

    def is_markup(rec: FileRecord) -> bool:
        return rec.extension in markup

    def is_router_script(rec: FileRecord) -> bool:
        return "router" in rec.rel_path and rec.extension in SCRIPT_EXTENSIONS

    def is_app_entry(rec: FileRecord) -> bool:
        return rec.name in entry_names

    def is_data_file(rec: FileRecord) -> bool:
        return rec.extension in (".json", ".sql")

    return (
        ExtractionRule(ReferenceKind.STATIC_IMPORT, _STATIC_IMPORT_RE),
        ExtractionRule(ReferenceKind.STATIC_IMPORT, _EXPORT_FROM_RE),
        ExtractionRule(ReferenceKind.STATIC_IMPORT, _REQUIRE_RE),
        ExtractionRule(ReferenceKind.DYNAMIC_IMPORT, _DYNAMIC_IMPORT_RE),
        ExtractionRule(ReferenceKind.MARKUP_TAG, _MARKUP_TAG_RE, gate=is_markup),
        ExtractionRule(ReferenceKind.ASSET_LITERAL, _ASSET_LITERAL_RE),
        ExtractionRule(
            ReferenceKind.STORE_USAGE,
            _STORE_USAGE_RE,
            transform=lambda name: f"{store_dir}/{store_module_name(name)}",
        ),
        ExtractionRule(ReferenceKind.ROUTE_COMPONENT, _ROUTE_COMPONENT_RE, gate=is_router_script),
        ExtractionRule(ReferenceKind.GLOBAL_COMPONENT, _GLOBAL_COMPONENT_RE, gate=is_app_entry),
        ExtractionRule(ReferenceKind.EMBEDDED_PATH_LITERAL, embedded_re, gate=is_data_file),
    )


class ReferenceExtractor:
    def __init__(self, config: AnalysisConfig):
        self.config = config
        self.rules = build_rules(config)

    def extract(self, record: FileRecord) -> FrozenSet[ReferenceToken]:
        """Tokens referenced by ``record``. Reading the file may raise OSError."""
        return self.extract_text(record, record.text)

    def extract_text(self, record: FileRecord, text: str) -> FrozenSet[ReferenceToken]:
        tokens: Set[ReferenceToken] = set()
        for rule in self.rules:
            if not rule.applies_to(record):
                continue
            for raw in rule.scan(text):
                tokens.add(ReferenceToken(raw=raw.strip(), kind=rule.kind))
        return frozenset(t for t in tokens if t.raw)
