#!/usr/bin/env python3
"""
Emission ordering for the include graph.

Files nobody includes get the lowest ranks. A file is ranked once every file
that includes it has been ranked, so the most widely included files end up
with the highest ranks. Writing files from the highest rank down puts each
file's includes before the file itself.
"""

import logging

from headerpack.errors import CircularDependency
from headerpack.graph import DependencyGraph, FileNode

logger = logging.getLogger(__name__)


def assign_ranks(graph: DependencyGraph) -> None:
    """Give every node a unique rank in ``[0, len(graph))``.

    Raises CircularDependency when a pass makes no progress while nodes are
    still unranked.
    """
    next_rank = 0

    # Seed: files no other file includes, in discovery order
    for node in graph:
        if not node.dependents:
            node.assign_rank(next_rank)
            next_rank += 1

    passes = 0
    while next_rank < len(graph):
        passes += 1
        ranked_this_pass = 0
        for node in graph:
            if node.is_ranked:
                continue
            # A rank given earlier in this pass already counts
            if all(dependent.is_ranked for dependent in node.dependents):
                node.assign_rank(next_rank)
                next_rank += 1
                ranked_this_pass += 1

        if ranked_this_pass == 0:
            cycle = find_cycle(graph)
            logger.debug("No progress after %d passes, cycle: %s", passes, cycle)
            raise CircularDependency([node.relative_name for node in cycle])

    logger.debug("Ranked %d files in %d passes", len(graph), passes)


def find_cycle(graph: DependencyGraph) -> list[FileNode]:
    """Return one include cycle among the unranked nodes, in include order.

    Every unranked node has at least one unranked dependent, so following
    unranked dependents from any unranked node must revisit a node.
    """
    start = next((node for node in graph if not node.is_ranked), None)
    if start is None:
        return []

    path: list[FileNode] = []
    position: dict[FileNode, int] = {}
    current = start
    while current not in position:
        position[current] = len(path)
        path.append(current)
        current = next(
            dependent for dependent in current.dependents if not dependent.is_ranked
        )

    # path follows "is included by" edges; reverse it to read as "includes"
    cycle = path[position[current] :]
    cycle.reverse()

    # Start the report at the member discovered first
    discovery = {node: index for index, node in enumerate(graph)}
    first = min(range(len(cycle)), key=lambda i: discovery[cycle[i]])
    return cycle[first:] + cycle[:first]


def emission_order(graph: DependencyGraph) -> list[FileNode]:
    """Nodes in the order their contents are written: highest rank first."""
    unranked = [node.relative_name for node in graph if not node.is_ranked]
    if unranked:
        raise ValueError(f"Files have not been ranked: {', '.join(unranked)}")
    return sorted(graph, key=lambda node: node.rank, reverse=True)


def order_graph(graph: DependencyGraph) -> list[FileNode]:
    assign_ranks(graph)
    return emission_order(graph)
