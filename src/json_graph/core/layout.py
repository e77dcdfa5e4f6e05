"""Layered left-to-right layout.

Phases:
  1. Cycle removal: back edges found by DFS are reversed, self-loops dropped.
  2. Rank assignment: longest path from any source, over a topological order.
  3. Ordering: nodes in a rank keep their DFS pre-order (crossing-free for trees).
  4. Coordinates: x from the rank, y stacked top-down with ``node_sep`` gaps,
     then parents are pulled down to the middle of their children.
"""

from __future__ import annotations

from collections import defaultdict

import networkx as nx

from json_graph.config import PipelineSettings, get_settings
from json_graph.core.graph import node_width
from json_graph.models import GraphEdge, GraphNode, Position


def _dfs(graph: nx.DiGraph) -> tuple[set[tuple[str, str]], dict[str, int]]:
    """Return the back edges of an iterative DFS and the pre-order index of every node."""
    state: dict[str, int] = {}  # 1 = on the DFS stack, 2 = finished
    preorder: dict[str, int] = {}
    back_edges: set[tuple[str, str]] = set()

    for start in graph.nodes:
        if start in state:
            continue
        state[start] = 1
        preorder[start] = len(preorder)
        stack = [(start, iter(graph.successors(start)))]
        while stack:
            node, successors = stack[-1]
            for child in successors:
                seen = state.get(child)
                if seen is None:
                    state[child] = 1
                    preorder[child] = len(preorder)
                    stack.append((child, iter(graph.successors(child))))
                    break
                if seen == 1:
                    back_edges.add((node, child))
            else:
                state[node] = 2
                stack.pop()

    return back_edges, preorder


def remove_cycles(graph: nx.DiGraph) -> tuple[nx.DiGraph, dict[str, int]]:
    """Return an acyclic copy of ``graph`` plus the DFS pre-order used to build it."""
    back_edges, preorder = _dfs(graph)
    dag: nx.DiGraph = nx.DiGraph()
    dag.add_nodes_from(graph.nodes)
    for src, tgt in graph.edges():
        if src == tgt:
            continue
        if (src, tgt) in back_edges:
            dag.add_edge(tgt, src)
        else:
            dag.add_edge(src, tgt)
    return dag, preorder


def assign_ranks(dag: nx.DiGraph) -> dict[str, int]:
    """Longest-path ranking: rank[v] = 1 + max(rank[u]) over predecessors u."""
    ranks: dict[str, int] = {}
    for node in nx.topological_sort(dag):
        ranks[node] = max((ranks[pred] + 1 for pred in dag.predecessors(node)), default=0)
    return ranks


def layout(
    nodes: list[GraphNode],
    edges: list[GraphEdge],
    settings: PipelineSettings | None = None,
) -> list[GraphNode]:
    """Return copies of ``nodes`` with ``position`` (top-left anchor) and footprint filled in."""
    if not nodes:
        return []
    cfg = settings or get_settings()

    graph: nx.DiGraph = nx.DiGraph()
    graph.add_nodes_from(node.id for node in nodes)
    for edge in edges:
        if edge.source in graph and edge.target in graph:
            graph.add_edge(edge.source, edge.target)

    dag, preorder = remove_cycles(graph)
    ranks = assign_ranks(dag)

    widths: dict[str, float] = {}
    for node in nodes:
        widths[node.id] = node_width(node.label, node.display_value) if cfg.size_by_label else cfg.node_width
    height = cfg.node_height

    layers: dict[int, list[str]] = defaultdict(list)
    for node_id in dag.nodes:
        layers[ranks[node_id]].append(node_id)
    rank_count = max(layers) + 1

    rank_x: list[float] = []
    x = cfg.margin_x
    for rank in range(rank_count):
        layers[rank].sort(key=preorder.__getitem__)
        rank_x.append(x)
        x += max(widths[n] for n in layers[rank]) + cfg.rank_sep

    ys: dict[str, float] = {}

    # top-down: align each node with its parents, never closer than node_sep to the previous one
    for rank in range(rank_count):
        bottom = cfg.margin_y - cfg.node_sep
        for node_id in layers[rank]:
            parents = [ys[p] for p in dag.predecessors(node_id) if p in ys]
            wanted = sum(parents) / len(parents) if parents else cfg.margin_y
            ys[node_id] = max(wanted, bottom + cfg.node_sep)
            bottom = ys[node_id] + height

    # bottom-up: centre parents on their children; moves are downward only so spacing holds
    for rank in range(rank_count - 2, -1, -1):
        bottom = cfg.margin_y - cfg.node_sep
        for node_id in layers[rank]:
            children = [ys[c] for c in dag.successors(node_id) if ranks[c] == rank + 1]
            wanted = ys[node_id]
            if children:
                wanted = max(wanted, (min(children) + max(children)) / 2)
            ys[node_id] = max(wanted, bottom + cfg.node_sep)
            bottom = ys[node_id] + height

    return [
        node.model_copy(
            update={
                "position": Position(x=rank_x[ranks[node.id]], y=ys[node.id]),
                "width": widths[node.id],
                "height": height,
            }
        )
        for node in nodes
    ]
