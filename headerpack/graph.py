#!/usr/bin/env python3
"""
Include graph construction.

Discovery walks the internal includes breadth-first from the root file and
creates one node per canonical path. Linking runs afterwards, once every
node exists, and fills in the forward and reverse edges.
"""

import logging
import os
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from headerpack.errors import MissingInclude, UnlinkedReference
from headerpack.scanner import scan_file

logger = logging.getLogger(__name__)

UNASSIGNED = -1


@dataclass
class FileNode:
    """A header or inline file taking part in the pack."""

    path: Path  # canonical absolute path, the node identity
    relative_name: str  # display name relative to the base directory

    external_includes: list[str] = field(default_factory=list)
    unresolved_includes: list[Path] = field(default_factory=list)

    # Filled in by link_files
    dependencies: list["FileNode"] = field(default_factory=list, repr=False)
    dependents: list["FileNode"] = field(default_factory=list, repr=False)

    rank: int = UNASSIGNED

    def __hash__(self):
        return hash(self.path)

    def __eq__(self, other):
        return isinstance(other, FileNode) and self.path == other.path

    @property
    def is_ranked(self) -> bool:
        return self.rank != UNASSIGNED

    def assign_rank(self, rank: int) -> None:
        if self.is_ranked:
            raise RuntimeError(f"{self.relative_name} already has rank {self.rank}")
        self.rank = rank

    def link(self, target: "FileNode") -> None:
        """Record that this file includes ``target``."""
        self.dependencies.append(target)
        target.dependents.append(self)


class DependencyGraph:
    """All files of one packing run, keyed by canonical path in discovery order."""

    def __init__(self, root: Path, base_dir: Path):
        self.base_dir = base_dir.resolve()
        self.root = root.resolve()
        self.nodes: dict[Path, FileNode] = {}
        # dict keeps first-seen order, so the external block is stable across runs
        self._external_includes: dict[str, None] = {}

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[FileNode]:
        return iter(self.nodes.values())

    @property
    def external_includes(self) -> list[str]:
        return list(self._external_includes)

    def node(self, path: Path) -> FileNode:
        return self.nodes[path.resolve()]

    def relative_name(self, path: Path) -> str:
        return os.path.relpath(path, self.base_dir)

    def create_node(self, path: Path) -> FileNode:
        node = FileNode(path=path, relative_name=self.relative_name(path))
        self.nodes[path] = node
        return node

    def add_external_includes(self, includes: list[str]) -> None:
        for include in includes:
            self._external_includes.setdefault(include)

    def edges(self) -> Iterator[tuple[FileNode, FileNode]]:
        """Yield ``(includer, included)`` pairs."""
        for node in self:
            for dependency in node.dependencies:
                yield node, dependency


def discover_files(graph: DependencyGraph) -> None:
    """Scan every file reachable from the root exactly once."""
    if not graph.root.is_file():
        raise MissingInclude(graph.root)

    seen_files: set[Path] = {graph.root}
    queue: deque[Path] = deque([graph.root])

    while queue:
        path = queue.popleft()
        scan = scan_file(path)

        node = graph.create_node(path)
        node.external_includes = scan.external_includes
        node.unresolved_includes = scan.internal_includes
        graph.add_external_includes(scan.external_includes)

        for include in scan.internal_includes:
            if not include.is_file():
                raise MissingInclude(include, node.relative_name)
            if include not in seen_files:
                seen_files.add(include)
                queue.append(include)

    logger.debug("Discovered %d files starting at %s", len(graph), graph.root)


def link_files(graph: DependencyGraph) -> None:
    """Turn each node's unresolved include paths into edges."""
    for node in graph:
        for include in node.unresolved_includes:
            target = graph.nodes.get(include)
            if target is None:
                raise UnlinkedReference(include, node.relative_name)
            node.link(target)

    logger.debug("Linked %d include edges", sum(1 for _ in graph.edges()))


def build_graph(root: Path, base_dir: Path) -> DependencyGraph:
    """Discover and link every file reachable from ``root``.

    ``root`` may be relative to ``base_dir``. ``base_dir`` only affects the
    display names of the nodes.
    """
    if not root.is_absolute():
        root = base_dir / root
    graph = DependencyGraph(root, base_dir)
    discover_files(graph)
    link_files(graph)
    return graph
