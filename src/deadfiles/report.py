"""
Unused-file report: category buckets, summary statistics, text and JSON output.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from .config_loader import AnalysisConfig
from .node_types import AnalysisResult
from .reachability import split_by_area

OTHER = "other"


def categorize(paths: List[str], config: AnalysisConfig) -> Dict[str, List[str]]:
    """Assign each unused source file to the first matching category, else 'other'."""
    src = config.source_dir.strip("/")
    markers = [(name, f"{src}/{name}/") for name in config.categories]
    buckets: Dict[str, List[str]] = {name: [] for name in config.categories}
    buckets[OTHER] = []
    for p in sorted(paths):
        for name, marker in markers:
            if p.startswith(marker):
                buckets[name].append(p)
                break
        else:
            buckets[OTHER].append(p)
    return buckets


def build_report(result: AnalysisResult, config: AnalysisConfig) -> Dict[str, Any]:
    unused_src, unused_outside = split_by_area(result.unused, config.source_dir)
    categories = categorize(unused_src, config)

    script_dirs = tuple(d.strip("/") + "/" for d in config.possibly_used_dirs)
    possibly_used = [
        p
        for p in unused_outside
        if result.outgoing(p) and (not script_dirs or p.startswith(script_dirs))
    ]

    return {
        "version": "1.0",
        "root": str(result.root),
        "policy": result.policy,
        "summary": {
            "files_total": len(result.files),
            "used": len(result.used),
            "unused": len(result.unused),
            "unused_source": len(unused_src),
            "unused_outside": len(unused_outside),
            "entry_points": len(result.entry_points),
            "implicit": len(result.implicit),
            "edges": sum(len(v) for v in result.edges.values()),
            "read_failures": len(result.read_failures),
        },
        "source_dir": config.source_dir,
        "categories": categories,
        "outside": unused_outside,
        "possibly_used": possibly_used,
        "entry_points": sorted(result.entry_points),
        "used": sorted(result.used),
        "read_failures": dict(sorted(result.read_failures.items())),
    }


def render_text(report: Dict[str, Any]) -> str:
    lines: List[str] = []
    src = report["source_dir"]
    summary = report["summary"]

    lines.append(f"=== Possibly unused files in {src}/ ===")
    for category, files in report["categories"].items():
        if not files:
            continue
        lines.append("")
        lines.append(f"{category.upper()} ({len(files)}):")
        lines.extend(f"- {f}" for f in files)

    lines.append("")
    lines.append(f"=== Possibly unused files outside {src}/ ===")
    lines.extend(f"- {f}" for f in report["outside"])

    if report["possibly_used"]:
        lines.append("")
        lines.append("=== Scripts referencing other files (not an entry point) ===")
        lines.extend(f"- {f}" for f in report["possibly_used"])

    if report["read_failures"]:
        lines.append("")
        lines.append("=== Files that could not be read ===")
        lines.extend(f"- {f}: {msg}" for f, msg in report["read_failures"].items())

    lines.append("")
    lines.append("=== Statistics ===")
    lines.append(f"Total files: {summary['files_total']}")
    lines.append(f"Referenced files: {summary['used']}")
    lines.append(f"Unused files in {src}/: {summary['unused_source']}")
    lines.append(f"Unused files outside {src}/: {summary['unused_outside']}")
    lines.append(f"Entry points: {summary['entry_points']}")
    lines.append(f"Reachability policy: {report['policy']}")
    return "\n".join(lines) + "\n"


def save_json_report(report: Dict[str, Any], output_path: Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(report, ensure_ascii=False, indent=2), encoding="utf-8")
    return output_path
