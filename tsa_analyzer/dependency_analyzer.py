"""File dependency graph: import resolution, circular imports and metrics."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, Iterator, List, Optional, Set

from .models import (
    DependencyEdge,
    DependencyMetrics,
    DependencyNode,
    DependencyResult,
    SourceUnit,
)
from .parser import NodeKind

logger = logging.getLogger(__name__)

RESOLVE_EXTENSIONS = (".ts", ".tsx", ".d.ts", ".js", ".jsx")
# ESM-style TypeScript imports name the emitted file: "./util.js" -> util.ts
EMITTED_EXTENSIONS = (".js", ".jsx", ".mjs", ".cjs")

DependencyGraph = Dict[str, DependencyNode]


def _candidates(base: str) -> Iterator[str]:
    yield base
    for ext in RESOLVE_EXTENSIONS:
        yield base + ext
    stem, ext = os.path.splitext(base)
    if ext in EMITTED_EXTENSIONS:
        yield stem + ".ts"
        yield stem + ".tsx"
    for ext in RESOLVE_EXTENSIONS:
        yield os.path.join(base, "index" + ext)


def resolve_module_path(specifier: str, importer: str, known_files: Set[str]) -> Optional[str]:
    """Map an import specifier to a graph node id, or None to drop it.

    Relative specifiers resolve against the importer's directory and snap to
    a loaded file when one matches; scoped (``@scope/pkg``) and single-segment
    package names are dropped; other bare paths (``lodash/fp``) are kept
    verbatim.
    """
    if specifier.startswith("."):
        base = os.path.normpath(os.path.join(os.path.dirname(importer), specifier))
        for candidate in _candidates(base):
            if candidate in known_files:
                return candidate
        return base
    if specifier.startswith("@") or "/" not in specifier:
        return None
    return specifier


def import_specifiers(unit: SourceUnit) -> List[str]:
    """Module specifiers of every import declaration in *unit*, in order."""
    specifiers = []
    for node in unit.root.descendants():
        if node.kind is not NodeKind.IMPORT:
            continue
        source = node.field("source")
        if source is None:
            continue
        specifiers.append(source.text.strip("'\"`"))
    return specifiers


class DependencyAnalyzer:
    """Build the import graph of a project and query it."""

    def __init__(self, max_workers: int = 1):
        self.max_workers = max(1, max_workers)

    def analyze(self, units: Iterable[SourceUnit]) -> DependencyResult:
        units = list(units)

        logger.info("Building dependency graph...")
        graph = self.build_graph(units)

        logger.info("Detecting circular dependencies...")
        circular = detect_cycles(graph)

        logger.info("Calculating dependency metrics...")
        metrics = calculate_metrics(graph)

        return DependencyResult(
            graph=list(graph.values()),
            circular_dependencies=circular,
            metrics=metrics,
        )

    def unit_edges(self, unit: SourceUnit, known_files: Set[str]) -> List[DependencyEdge]:
        importer = str(unit.path)
        edges = []
        for specifier in import_specifiers(unit):
            target = resolve_module_path(specifier, importer, known_files)
            if target is None:
                logger.debug("Dropped non-local import '%s' in %s", specifier, importer)
                continue
            edges.append(DependencyEdge(source=importer, target=target))
        return edges

    def build_graph(self, units: List[SourceUnit]) -> DependencyGraph:
        """Resolve every unit's imports; returns only once all edges exist."""
        known_files = {str(u.path) for u in units}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            per_unit = list(executor.map(lambda u: self.unit_edges(u, known_files), units))

        graph: DependencyGraph = {}
        for unit, edges in zip(units, per_unit):
            name = str(unit.path)
            graph[name] = DependencyNode(name=name, dependencies=[e.target for e in edges])
        return graph


def detect_cycles(graph: DependencyGraph) -> List[List[str]]:
    """Depth-first cycle search.

    Roots are tried in graph order with a shared visited set, so a cycle is
    reported from whichever traversal first reaches it. When an edge leads
    to a node still on the stack, the current path from that node onward is
    one cycle.
    """
    visited: Set[str] = set()
    on_stack: Set[str] = set()
    cycles: List[List[str]] = []

    def deps(node: str) -> Iterator[str]:
        entry = graph.get(node)
        return iter(entry.dependencies if entry is not None else [])

    for start in graph:
        if start in visited:
            continue
        visited.add(start)
        on_stack.add(start)
        path = [start]
        stack = [deps(start)]

        while stack:
            dep = next(stack[-1], None)
            if dep is None:
                stack.pop()
                on_stack.discard(path.pop())
                continue
            if dep not in visited:
                visited.add(dep)
                on_stack.add(dep)
                path.append(dep)
                stack.append(deps(dep))
            elif dep in on_stack:
                cycles.append(path[path.index(dep):])

    return cycles


def calculate_metrics(graph: DependencyGraph) -> DependencyMetrics:
    total = sum(node.weight for node in graph.values())
    return DependencyMetrics(
        total_files=len(graph),
        average_dependencies=total / len(graph) if graph else 0,
        max_dependencies=max((node.weight for node in graph.values()), default=0),
    )
