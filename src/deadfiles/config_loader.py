"""
Configuration loader - YAML files or the [tool.deadfiles] table of pyproject.toml
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

try:  # py3.11+
    import tomllib as tomli
except ImportError:
    import tomli

from .node_types import DeadfilesError

logger = logging.getLogger(__name__)

CONFIG_CANDIDATES = (
    "deadfiles.yaml",
    "deadfiles.yml",
    ".deadfiles.yaml",
    ".deadfiles.yml",
    "pyproject.toml",  # checked for [tool.deadfiles]
)

REACHABILITY_POLICIES = ("flat", "closure")


class ConfigError(DeadfilesError):
    """Raised when a configuration file cannot be read or holds invalid values."""


@dataclass(frozen=True)
class AnalysisConfig:
    """Immutable analysis settings, passed explicitly to every component."""

    extensions: Tuple[str, ...] = (
        ".vue", ".js", ".ts", ".mjs", ".json", ".sql", ".html", ".css",
    )
    entry_points: Tuple[str, ...] = (
        "src/main.ts", "src/main.js", "src/App.vue",
        "src/router/index.ts", "src/router/index.js",
        "vite.config.ts", "tailwind.config.js", "src/stores/index.ts",
        "src/style.css", "src/assets/main.css", "index.html",
        "scripts/setup-schema-storage.js",
    )
    aliases: Mapping[str, str] = field(default_factory=lambda: {"@": "src"})
    excluded_dirs: Tuple[str, ...] = (
        "node_modules", "dist", ".git", ".vscode", "public", "coverage", "db",
    )
    excluded_files: Tuple[str, ...] = (
        "package-lock.json", "yarn.lock", "pnpm-lock.yaml", ".gitignore",
        ".eslintrc.js", ".eslintrc.json", "postcss.config.js", "tsconfig.json",
        "README.md", ".env", ".env.local", ".env.development",
        "vitest.config.ts",
    )
    implicit_dirs: Tuple[str, ...] = (
        "src/assets", "src/locales", "src/styles", "public",
    )
    component_dirs: Tuple[str, ...] = ("src/components", "src/views", "src/layouts")
    component_extensions: Tuple[str, ...] = (".vue",)
    platform_files: Tuple[str, ...] = ("404.html",)
    manifest: str = "package.json"
    source_dir: str = "src"
    store_alias_dir: str = "@/stores"
    markup_extensions: Tuple[str, ...] = (".vue",)
    app_entry_files: Tuple[str, ...] = ("main.ts", "main.js")
    config_files: Tuple[str, ...] = (
        "vite.config.js", "vite.config.ts", "tsconfig.json", "tsconfig.app.json",
        "tsconfig.node.json", "jsconfig.json", ".eslintrc.js", ".eslintrc.json",
        ".eslintrc", "postcss.config.js", "postcss.config.cjs", "babel.config.js",
        "babel.config.json", "vue.config.js", "vue.config.ts",
    )
    categories: Tuple[str, ...] = (
        "components", "views", "stores", "services", "utils", "types", "layouts",
    )
    possibly_used_dirs: Tuple[str, ...] = ("scripts",)
    reachability: str = "flat"
    workers: int = 8

    def __post_init__(self) -> None:
        # freeze the alias table; dataclass(frozen=True) only guards attributes
        object.__setattr__(self, "aliases", MappingProxyType(dict(self.aliases)))
        if self.reachability not in REACHABILITY_POLICIES:
            raise ConfigError(
                f"reachability must be one of {', '.join(REACHABILITY_POLICIES)}: "
                f"{self.reachability!r}"
            )
        if self.workers < 1:
            raise ConfigError(f"workers must be >= 1: {self.workers}")

    def replace(self, **changes: Any) -> "AnalysisConfig":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, tuple):
                value = list(value)
            elif isinstance(value, Mapping):
                value = dict(value)
            data[f.name] = value
        return data


_TUPLE_FIELDS = {
    f.name for f in dataclasses.fields(AnalysisConfig) if f.type.startswith("Tuple")
}
_STR_FIELDS = {
    f.name for f in dataclasses.fields(AnalysisConfig) if f.type == "str"
}


def load_config(
    config_path: Optional[Path] = None, root: Optional[Path] = None
) -> AnalysisConfig:
    """
    Load the analysis configuration.

    Args:
        config_path: explicit configuration file; searched for under ``root`` if None
        root: project root used for the search (defaults to the working directory)

    Returns:
        AnalysisConfig: loaded settings, or the defaults when no file is found
    """
    if config_path:
        return _load_config_file(Path(config_path))

    found_config = find_config_file(root)
    if found_config:
        logger.info("using configuration file %s", found_config)
        return _load_config_file(found_config)

    logger.info("no configuration file found, using defaults")
    return AnalysisConfig()


def find_config_file(root: Optional[Path] = None) -> Optional[Path]:
    """Return the first configuration candidate present under ``root``."""
    base = Path(root) if root else Path.cwd()
    for name in CONFIG_CANDIDATES:
        candidate = base / name
        if not candidate.is_file():
            continue
        if candidate.name == "pyproject.toml":
            if _has_deadfiles_config(candidate):
                return candidate
            continue
        return candidate
    return None


def _load_config_file(config_path: Path) -> AnalysisConfig:
    if not config_path.exists():
        raise ConfigError(f"configuration file does not exist: {config_path}")

    suffix = config_path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_config(config_path)
    if suffix == ".toml":
        return _load_toml_config(config_path)
    raise ConfigError(f"unsupported configuration format: {suffix}")


def _load_yaml_config(config_path: Path) -> AnalysisConfig:
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read {config_path}: {e}") from e

    if not data:
        return AnalysisConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: top level must be a mapping")
    return _parse_config_data(data)


def _load_toml_config(config_path: Path) -> AnalysisConfig:
    try:
        with config_path.open("rb") as f:
            data = tomli.load(f)
    except (OSError, tomli.TOMLDecodeError) as e:
        raise ConfigError(f"cannot read {config_path}: {e}") from e

    if "tool" in data and "deadfiles" in data["tool"]:
        data = data["tool"]["deadfiles"]
    return _parse_config_data(data)


def _has_deadfiles_config(pyproject_path: Path) -> bool:
    try:
        with pyproject_path.open("rb") as f:
            data = tomli.load(f)
    except (OSError, tomli.TOMLDecodeError):
        return False
    return "deadfiles" in data.get("tool", {})


def _parse_config_data(data: Dict[str, Any]) -> AnalysisConfig:
    """Map raw configuration data onto AnalysisConfig, validating types."""
    changes: Dict[str, Any] = {}

    for key, value in data.items():
        name = str(key).replace("-", "_")
        if name in _TUPLE_FIELDS:
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list):
                raise ConfigError(f"{key}: expected a list of strings")
            changes[name] = tuple(str(v) for v in value)
        elif name in _STR_FIELDS:
            if not isinstance(value, str):
                raise ConfigError(f"{key}: expected a string")
            changes[name] = value.strip()
        elif name == "aliases":
            if not isinstance(value, dict):
                raise ConfigError(f"{key}: expected a mapping of prefix -> directory")
            changes[name] = {str(k): str(v).strip("/") for k, v in value.items()}
        elif name == "workers":
            try:
                changes[name] = int(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"{key}: expected an integer") from e
        else:
            logger.warning("ignoring unknown configuration key %r", key)

    return AnalysisConfig().replace(**changes)


def create_example_config() -> str:
    """Example configuration file content (mirrors the built-in defaults)."""
    return """# deadfiles configuration
# Every key is optional; omitted keys keep their built-in defaults.

# Files considered for analysis
extensions: [".vue", ".js", ".ts", ".mjs", ".json", ".sql", ".html", ".css"]
excluded_dirs: ["node_modules", "dist", ".git", ".vscode", "public", "coverage", "db"]
excluded_files: ["package-lock.json", "yarn.lock", "pnpm-lock.yaml", "README.md"]

# Used unconditionally when present (root-relative)
entry_points:
  - "src/main.ts"
  - "src/App.vue"
  - "src/router/index.ts"
  - "index.html"

# Import prefix -> root-relative directory
aliases:
  "@": "src"

# Resolution of bare component names such as <user-card> or route components
component_dirs: ["src/components", "src/views", "src/layouts"]
component_extensions: [".vue"]

# Always considered used
implicit_dirs: ["src/assets", "src/locales", "src/styles", "public"]
platform_files: ["404.html"]
manifest: "package.json"

# Reporting
source_dir: "src"
possibly_used_dirs: ["scripts"]

# flat:    every resolved reference target counts as used
# closure: only files reachable from entry points / implicit files count
reachability: "flat"
workers: 8
"""


def save_example_config(output_path: Optional[Path] = None) -> Path:
    if output_path is None:
        output_path = Path("deadfiles.yaml")
    output_path.write_text(create_example_config(), encoding="utf-8")
    return output_path


def format_config(config: AnalysisConfig) -> str:
    """Render the effective configuration as YAML."""
    return yaml.safe_dump(config.to_dict(), sort_keys=False, allow_unicode=True)


def config_overrides(**overrides: Any) -> Dict[str, Any]:
    """Drop None values so CLI flags only override what the user passed."""
    return {k: v for k, v in overrides.items() if v is not None}
