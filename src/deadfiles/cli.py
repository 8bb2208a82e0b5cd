#!/usr/bin/env python3
"""
CLI entrypoint for deadfiles

  deadfiles [ROOT]                 analyze and print the unused-file report
  deadfiles --init                 write an example deadfiles.yaml
  deadfiles --show-config          print the effective configuration
  deadfiles --explain FILE         show why FILE counts as used
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config_loader import (
    REACHABILITY_POLICIES,
    config_overrides,
    format_config,
    load_config,
    save_example_config,
)
from .node_types import DeadfilesError


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deadfiles",
        description="Find files in a front-end project that nothing references",
    )
    parser.add_argument("root", nargs="?", default=".", help="Project root (default: .)")
    parser.add_argument("--config", default=None, help="Configuration file (YAML or pyproject.toml)")
    parser.add_argument("--init", action="store_true", help="Write an example deadfiles.yaml into ROOT")
    parser.add_argument("--force", action="store_true", help="Overwrite an existing deadfiles.yaml with --init")
    parser.add_argument("--show-config", action="store_true", help="Print the effective configuration and exit")
    parser.add_argument(
        "--reachability",
        choices=REACHABILITY_POLICIES,
        default=None,
        help="flat: any referenced file is used; closure: only files reachable from entry points",
    )
    parser.add_argument("--workers", type=int, default=None, help="Parallel file readers")
    parser.add_argument("--json", dest="json_path", default=None, help="Also write the report as JSON")
    parser.add_argument("--graph", default=None, help="Write the reference graph to GRAPH.dot (+ rendered file)")
    parser.add_argument("--format", default="svg", help="Graph render format (default: svg)")
    parser.add_argument("--explain", default=None, metavar="FILE", help="Explain why FILE (root-relative) is used")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    return parser


def _init(root: Path, force: bool) -> int:
    if not root.is_dir():
        raise DeadfilesError(f"project root is not a directory: {root}")
    target = root / "deadfiles.yaml"
    if target.exists() and not force:
        print(f"⚠ {target} already exists (use --force to overwrite)")
        return 1
    save_example_config(target)
    print(f"✓ Wrote example configuration: {target}")
    return 0


def _run(args: argparse.Namespace) -> int:
    from .api import Analyzer
    from .file_catalog import FileCatalog
    from .reachability import explain_usage
    from .report import build_report, render_text, save_json_report

    root = Path(args.root)
    config = load_config(Path(args.config) if args.config else None, root=root)
    overrides = config_overrides(reachability=args.reachability, workers=args.workers)
    if overrides:
        config = config.replace(**overrides)

    if args.show_config:
        print(format_config(config), end="")
        return 0

    catalog = FileCatalog.build(root, config)
    result = Analyzer(catalog, config).run()

    if args.explain:
        info = explain_usage(result, Path(args.explain).as_posix())
        print(_format_explain(info))
        return 0

    report = build_report(result, config)
    # rendered fully before printing: a failure leaves no partial report
    text = render_text(report)
    print(text, end="")

    if args.json_path:
        out = save_json_report(report, Path(args.json_path))
        print(f"\n📄 JSON report written to {out}")
    if args.graph:
        from .graphviz_render import render_graph

        dot_path, rendered = render_graph(result, args.graph, fmt=args.format)
        if rendered:
            print(f"📄 Reference graph written to {rendered}")
        else:
            print(f"📄 Reference graph written to {dot_path} (Graphviz 'dot' not found, not rendered)")
    return 0


def _format_explain(info: dict) -> str:
    target = info["target"]
    reason = info["reason"]
    if reason == "not-catalogued":
        return f"{target}: not part of the analyzed files"
    if reason == "unused":
        return f"{target}: unused"
    if reason == "referenced":
        return f"{target}: used via " + " -> ".join(info["path"])
    if reason == "referenced-by-unreached":
        referrers = ", ".join(info["path"][:-1])
        return f"{target}: used, referenced only by unreached files: {referrers}"
    return f"{target}: used ({reason})"


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be >= 1")

    try:
        if args.init:
            return _init(Path(args.root), args.force)
        return _run(args)
    except DeadfilesError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except Exception as e:  # noqa: BLE001 - report and abort without partial output
        logging.getLogger(__name__).debug("analysis failed", exc_info=True)
        print(f"❌ Analysis failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
