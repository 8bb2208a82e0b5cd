from __future__ import annotations

from typing import Tuple

from graphviz import Digraph
from graphviz.backend import ExecutableNotFound

from .node_types import AnalysisResult

USED_COLOR = "#4CAF50"  # green
IMPLICIT_COLOR = "#FFC107"  # amber
UNUSED_COLOR = "#F44336"  # red


def _color_for(result: AnalysisResult, path: str) -> str:
    if not result.is_used(path):
        return UNUSED_COLOR
    if path in result.implicit and path not in result.entry_points:
        return IMPLICIT_COLOR
    return USED_COLOR


def build_graph(result: AnalysisResult) -> Digraph:
    dot = Digraph(
        "deadfiles",
        graph_attr={"rankdir": "LR", "splines": "spline"},
        node_attr={"shape": "box", "style": "rounded,filled", "fontname": "Helvetica"},
        edge_attr={"arrowhead": "vee"},
    )
    for path in result.files:
        attrs = {"fillcolor": _color_for(result, path)}
        if path in result.entry_points:
            attrs["penwidth"] = "2"
        dot.node(path, label=path, **attrs)

    for edge in result.edge_list():
        # unused sources keep their edges visible but faded
        style = "solid" if result.is_used(edge.source) else "dashed"
        dot.edge(edge.source, edge.target, color="black", style=style)
    return dot


def render_graph(result: AnalysisResult, output_base: str, fmt: str = "svg") -> Tuple[str, str]:
    """Write ``<output_base>.dot`` and, when Graphviz is installed, ``<output_base>.<fmt>``.

    Returns (dot_path, rendered_path); rendered_path is "" without the dot executable.
    """
    dot = build_graph(result)
    dot_path = f"{output_base}.dot"
    out_path = f"{output_base}.{fmt}"
    dot.save(dot_path)

    try:
        dot.render(output_base, format=fmt, cleanup=True)
    except ExecutableNotFound:
        # Only DOT written; caller should inform user
        out_path = ""
    return dot_path, out_path
