"""
Combine entry points, implicit usage and resolved edges into the used set.

Two policies:
 - flat:    used = entries + implicit + every edge target in the project.
            A file referenced only by another unused file still counts as used.
 - closure: used = everything reachable by following edges from entries and
            implicit files. Unreferenced cycles are reported as unused.
"""
from __future__ import annotations

from collections import deque
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

from .node_types import AnalysisResult


def flat_union(
    roots: Iterable[str], edges: Mapping[str, Iterable[str]]
) -> Set[str]:
    used = set(roots)
    for targets in edges.values():
        used.update(targets)
    return used


def transitive_closure(
    roots: Iterable[str], edges: Mapping[str, Iterable[str]]
) -> Set[str]:
    seen: Set[str] = set()
    stack: List[str] = sorted(set(roots))
    while stack:
        node = stack.pop()
        if node in seen:
            continue
        seen.add(node)
        for nxt in edges.get(node, ()) or ():
            if nxt not in seen:
                stack.append(nxt)
    return seen


def compute_used(
    files: Iterable[str],
    entry_points: Iterable[str],
    implicit: Iterable[str],
    edges: Mapping[str, Iterable[str]],
    policy: str = "flat",
) -> Tuple[FrozenSet[str], FrozenSet[str]]:
    """
    Partition the catalog into (used, unused).

    Entry points and edge targets outside the catalog are ignored, so the used
    set is always a subset of ``files`` and ``unused`` is its exact complement.
    """
    catalog = frozenset(files)
    roots = (set(entry_points) | set(implicit)) & catalog
    if policy == "closure":
        used = transitive_closure(roots, edges)
    elif policy == "flat":
        used = flat_union(roots, edges)
    else:
        raise ValueError(f"unknown reachability policy: {policy!r}")
    used_in_catalog = frozenset(used) & catalog
    return used_in_catalog, catalog - used_in_catalog


def split_by_area(paths: Iterable[str], source_dir: str) -> Tuple[List[str], List[str]]:
    """Split paths into (inside source_dir, outside), both sorted."""
    prefix = source_dir.strip("/") + "/"
    inside: List[str] = []
    outside: List[str] = []
    for p in sorted(paths):
        (inside if p.startswith(prefix) else outside).append(p)
    return inside, outside


def explain_usage(result: AnalysisResult, target: str) -> Dict[str, Any]:
    """Explain why ``target`` is considered used.

    The result includes: {used: bool, target: str, reason: str|None,
    root: str|None, path: [root, ..., target]}. For reference-derived usage
    the shortest chain from an entry point or implicit file is returned; under
    the flat policy a file referenced only by unused files gets its direct
    referrers instead.
    """
    out: Dict[str, Any] = {
        "used": result.is_used(target),
        "target": target,
        "reason": None,
        "root": None,
        "path": [],
    }
    if target not in result.files:
        out["reason"] = "not-catalogued"
        return out
    if not out["used"]:
        out["reason"] = "unused"
        return out
    if target in result.entry_points:
        out.update(reason="entry-point", root=target, path=[target])
        return out
    implicit = result.implicit_reason(target)
    if implicit:
        out.update(reason=implicit, root=target, path=[target])
        return out

    roots = sorted(result.entry_points | frozenset(result.implicit))
    chain = _shortest_chain(roots, result.edges, target)
    if chain:
        out.update(reason="referenced", root=chain[0], path=chain)
        return out

    referrers = sorted(src for src, dsts in result.edges.items() if target in dsts)
    out.update(reason="referenced-by-unreached", path=referrers + [target])
    return out


def _shortest_chain(
    roots: Iterable[str], edges: Mapping[str, Iterable[str]], target: str
) -> Optional[List[str]]:
    prev: Dict[str, Optional[str]] = {}
    q: deque = deque()
    for r in roots:
        if r not in prev:
            prev[r] = None
            q.append(r)
    while q:
        node = q.popleft()
        if node == target:
            chain: List[str] = []
            cur: Optional[str] = node
            while cur is not None:
                chain.append(cur)
                cur = prev[cur]
            chain.reverse()
            return chain
        for nxt in sorted(edges.get(node, ()) or ()):
            if nxt not in prev:
                prev[nxt] = node
                q.append(nxt)
    return None
