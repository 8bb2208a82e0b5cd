"""
deadfiles - find files a front-end project never references

Simple API:

    from deadfiles import AnalysisConfig, analyze_project, build_report

    result = analyze_project("my_app")
    print(f"Unused: {len(result.unused)} of {len(result.files)} files")

    # Grouped report (components/views/stores/... plus files outside src/)
    report = build_report(result, AnalysisConfig())
"""

from .config_loader import AnalysisConfig, ConfigError, load_config
from .file_catalog import CatalogError
from .node_types import AnalysisResult, DeadfilesError, ReferenceKind, ReferenceToken
from .report import build_report


def analyze_project(*args, **kwargs):
    """Lazy import wrapper for analyze_project to keep package import light."""
    from .api import analyze_project as _analyze_project

    return _analyze_project(*args, **kwargs)


from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("deadfiles")
except PackageNotFoundError:
    # Fallback for development/uninstalled package
    __version__ = "unknown"

__all__ = [
    "AnalysisConfig",
    "AnalysisResult",
    "CatalogError",
    "ConfigError",
    "DeadfilesError",
    "ReferenceKind",
    "ReferenceToken",
    "analyze_project",
    "build_report",
    "load_config",
    "__version__",
]
