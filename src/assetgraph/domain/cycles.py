"""Cycle detection over the dependency subgraph.

Two algorithms:

- :func:`closes_cycle` — the pre-insert check. Walks forward from the
  proposed child; reaching the proposed parent means the new edge would
  close a loop. Successors are fetched lazily so callers can issue one
  query per visited node.
- :func:`find_cycles` — the diagnostic scan. Iterative DFS over a full
  adjacency map with an explicit node-state arena, so recursion depth never
  depends on graph shape.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping


class NodeState(IntEnum):
    """DFS colouring for the global scan."""

    UNVISITED = 0
    ON_STACK = 1
    DONE = 2


def closes_cycle(
    parent_id: str,
    child_id: str,
    successors: Callable[[str], Iterable[str]],
) -> bool:
    """Return True if adding ``parent_id -> child_id`` would create a cycle.

    A visited node is never expanded twice, bounding the walk to O(V+E).
    """
    visited: set[str] = set()
    stack = [child_id]
    while stack:
        current = stack.pop()
        if current == parent_id:
            return True
        if current in visited:
            continue
        visited.add(current)
        stack.extend(successors(current))
    return False


def find_cycles(adjacency: Mapping[str, Iterable[str]]) -> list[list[str]]:
    """Report every cycle closed by a back edge in *adjacency*.

    Start nodes and successors are visited in sorted order. Each cycle is
    the suffix of the current DFS path beginning at the node the back edge
    points to. ``DONE`` nodes are never re-explored across launches.

    Examples:
        >>> find_cycles({"X": ["Y"], "Y": ["Z"], "Z": ["X"]})
        [['X', 'Y', 'Z']]
        >>> find_cycles({"A": ["B"], "B": []})
        []
    """
    nodes: set[str] = set(adjacency)
    for targets in adjacency.values():
        nodes.update(targets)

    state: dict[str, NodeState] = dict.fromkeys(nodes, NodeState.UNVISITED)
    cycles: list[list[str]] = []

    def _successors(node: str) -> Iterator[str]:
        return iter(sorted(adjacency.get(node, ())))

    for start in sorted(nodes):
        if state[start] is not NodeState.UNVISITED:
            continue

        state[start] = NodeState.ON_STACK
        path: list[str] = [start]
        frames: list[Iterator[str]] = [_successors(start)]

        while frames:
            neighbor = next(frames[-1], None)
            if neighbor is None:
                frames.pop()
                state[path.pop()] = NodeState.DONE
                continue

            neighbor_state = state[neighbor]
            if neighbor_state is NodeState.UNVISITED:
                state[neighbor] = NodeState.ON_STACK
                path.append(neighbor)
                frames.append(_successors(neighbor))
            elif neighbor_state is NodeState.ON_STACK:
                cycles.append(path[path.index(neighbor) :])

    return cycles
