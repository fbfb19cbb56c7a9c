"""Migration graph model and path finding.

A migration graph is a directed graph over content hashes of tool states.
Each edge ``(from, to)`` carries an action: free-form instructions in the
upgrade graph, a handoff veto policy in the handoff graph. Graphs are
loaded read-only (see :mod:`ob_cli.migration.loader`) and never mutated.

Path selection is deterministic: :func:`find_path` returns a shortest path
(fewest edges) and, among shortest paths, the one whose vertex sequence is
lexicographically smallest.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import NewType

from .exceptions import GraphInconsistencyError

Hash = NewType("Hash", str)
Edge = tuple[Hash, Hash]

__all__ = [
    "Edge",
    "Hash",
    "MigrationGraph",
    "find_path",
    "run_migration",
]


@dataclass(frozen=True)
class MigrationGraph:
    """Immutable migration graph with its oldest (first) and newest (last) vertex."""

    edges: Mapping[Edge, str] = field(default_factory=dict)
    first: Hash | None = None
    last: Hash | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "edges", MappingProxyType(dict(self.edges)))
        adjacency: dict[Hash, list[Hash]] = {}
        for src, dst in self.edges:
            adjacency.setdefault(src, []).append(dst)
        object.__setattr__(
            self,
            "_successors",
            {src: tuple(sorted(dsts)) for src, dsts in adjacency.items()},
        )

    @property
    def vertices(self) -> frozenset[Hash]:
        found: set[Hash] = set()
        for src, dst in self.edges:
            found.add(src)
            found.add(dst)
        for endpoint in (self.first, self.last):
            if endpoint is not None:
                found.add(endpoint)
        return frozenset(found)

    @property
    def is_empty(self) -> bool:
        return not self.vertices

    def has_vertex(self, vertex: Hash) -> bool:
        if vertex == self.first or vertex == self.last:
            return vertex is not None
        return any(vertex in edge for edge in self.edges)

    def successors(self, vertex: Hash) -> tuple[Hash, ...]:
        """Direct successors of *vertex* in ascending hash order."""
        return self._successors.get(vertex, ())  # type: ignore[attr-defined]

    def lookup_edge(self, source: Hash, target: Hash) -> str | None:
        return self.edges.get((source, target))

    def get_edge(self, edge: Edge) -> str:
        """Return the action of *edge*; a missing edge means the graph is inconsistent."""
        action = self.edges.get(edge)
        if action is None:
            raise GraphInconsistencyError(f"Edge {edge} not found")
        return action


def find_path(graph: MigrationGraph, source: Hash, target: Hash) -> list[Edge] | None:
    """Return the edges of the preferred path from *source* to *target*.

    ``[]`` when *source* equals *target*; ``None`` when either hash is not a
    vertex or *target* is unreachable.
    """
    if not graph.has_vertex(source) or not graph.has_vertex(target):
        return None
    if source == target:
        return []

    # Successors are expanded in sorted order, so the first parent recorded
    # for a vertex lies on the lexicographically smallest shortest path.
    parents: dict[Hash, Hash] = {}
    queue: deque[Hash] = deque([source])
    seen = {source}
    while queue:
        current = queue.popleft()
        for nxt in graph.successors(current):
            if nxt in seen:
                continue
            seen.add(nxt)
            parents[nxt] = current
            if nxt == target:
                return _unwind(parents, source, target)
            queue.append(nxt)
    return None


def _unwind(parents: dict[Hash, Hash], source: Hash, target: Hash) -> list[Edge]:
    path: list[Edge] = []
    vertex = target
    while vertex != source:
        parent = parents[vertex]
        path.append((parent, vertex))
        vertex = parent
    path.reverse()
    return path


def run_migration(
    graph: MigrationGraph, source: Hash, target: Hash
) -> list[tuple[Hash, str]] | None:
    """Resolve the path from *source* to *target* into ``(reached hash, action)`` pairs.

    Each action is paired with the destination of its edge, in traversal
    order. ``[]`` means no migration is needed; ``None`` means no path exists.
    """
    path = find_path(graph, source, target)
    if path is None:
        return None
    return [(dst, graph.get_edge((src, dst))) for src, dst in path]
