"""Hide every descendant of a collapsed node."""

from __future__ import annotations

from collections.abc import Iterable

from json_graph.models import GraphEdge, GraphNode


class VisibilityFilter:
    """Visibility of graph nodes under a set of collapsed ids.

    A node is hidden when any proper ancestor is collapsed; its own collapsed
    flag never hides it. Answers are memoized per node id so a full pass is
    linear in the size of the graph. The memo is dropped whenever the graph or
    the collapsed set changes.
    """

    def __init__(self) -> None:
        self._parents: dict[str, str] = {}
        self._collapsed: frozenset[str] = frozenset()
        self._cache: dict[str, bool] = {}

    @property
    def collapsed(self) -> frozenset[str]:
        return self._collapsed

    def set_graph(self, edges: Iterable[GraphEdge]) -> None:
        self._parents = {edge.target: edge.source for edge in edges}
        self._cache.clear()

    def set_collapsed(self, collapsed_ids: Iterable[str]) -> None:
        collapsed = frozenset(collapsed_ids)
        if collapsed != self._collapsed:
            self._collapsed = collapsed
            self._cache.clear()

    def is_visible(self, node_id: str) -> bool:
        chain: list[str] = []
        seen: set[str] = set()
        current = node_id
        while True:
            cached = self._cache.get(current)
            if cached is not None:
                visible = cached
                break
            parent = self._parents.get(current)
            if parent is None or current in seen:
                visible = True
                self._cache[current] = True
                break
            if parent in self._collapsed:
                visible = False
                self._cache[current] = False
                break
            seen.add(current)
            chain.append(current)
            current = parent
        for descendant in chain:
            self._cache[descendant] = visible
        return visible

    def apply(self, nodes: list[GraphNode], edges: list[GraphEdge]) -> tuple[list[GraphNode], list[GraphEdge]]:
        visible_nodes: list[GraphNode] = []
        visible_ids: set[str] = set()
        for node in nodes:
            if not self.is_visible(node.id):
                continue
            collapsed = node.collapsible and node.id in self._collapsed
            if node.collapsed != collapsed:
                node = node.model_copy(update={"collapsed": collapsed})
            visible_nodes.append(node)
            visible_ids.add(node.id)
        visible_edges = [edge for edge in edges if edge.source in visible_ids and edge.target in visible_ids]
        return visible_nodes, visible_edges


def filter_graph(
    nodes: list[GraphNode],
    edges: list[GraphEdge],
    collapsed_ids: Iterable[str],
) -> tuple[list[GraphNode], list[GraphEdge]]:
    """One-shot filter: nodes and edges that stay visible under ``collapsed_ids``."""
    visibility = VisibilityFilter()
    visibility.set_graph(edges)
    visibility.set_collapsed(collapsed_ids)
    return visibility.apply(nodes, edges)
