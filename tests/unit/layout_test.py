"""Tests for the layered left-to-right layout."""

from __future__ import annotations

import networkx as nx

from json_graph.config import PipelineSettings
from json_graph.core.graph import build_graph
from json_graph.core.layout import assign_ranks, layout, remove_cycles
from json_graph.core.parser import parse
from json_graph.models import GraphEdge, GraphNode, NodeKind

_SETTINGS = PipelineSettings()


def _laid_out(text: str, settings: PipelineSettings = _SETTINGS) -> tuple[list[GraphNode], list[GraphEdge]]:
    result = parse(text)
    nodes, edges = build_graph(result.tree)
    return layout(nodes, edges, settings), edges


def _overlaps(a: GraphNode, b: GraphNode) -> bool:
    return (
        a.position.x < b.position.x + b.width
        and b.position.x < a.position.x + a.width
        and a.position.y < b.position.y + b.height
        and b.position.y < a.position.y + a.height
    )


class TestLayout:
    def test_empty(self) -> None:
        assert layout([], [], _SETTINGS) == []

    def test_single_node_at_margin(self) -> None:
        nodes, _ = _laid_out("1")
        assert nodes[0].position.x == _SETTINGS.margin_x
        assert nodes[0].position.y == _SETTINGS.margin_y

    def test_children_right_of_parents(self, sample_json: str) -> None:
        nodes, edges = _laid_out(sample_json)
        by_id = {n.id: n for n in nodes}
        for edge in edges:
            assert by_id[edge.target].position.x > by_id[edge.source].position.x

    def test_ranks_share_x(self, sample_json: str) -> None:
        nodes, _ = _laid_out(sample_json)
        by_id = {n.id: n for n in nodes}
        assert by_id["node-a"].position.x == by_id["node-b"].position.x
        assert by_id["node-b-0"].position.x == by_id["node-b-1"].position.x

    def test_siblings_in_source_order(self, sample_json: str) -> None:
        nodes, _ = _laid_out(sample_json)
        by_id = {n.id: n for n in nodes}
        assert by_id["node-a"].position.y < by_id["node-b"].position.y
        assert by_id["node-b-0"].position.y < by_id["node-b-1"].position.y

    def test_no_overlap(self) -> None:
        nodes, _ = _laid_out('{"a": [1, 2, {"x": 3, "y": [4, 5]}], "b": {"c": null, "d": "e"}, "f": true}')
        for i, a in enumerate(nodes):
            for b in nodes[i + 1 :]:
                assert not _overlaps(a, b), (a.id, b.id)

    def test_parent_centred_on_children(self, sample_json: str) -> None:
        nodes, _ = _laid_out(sample_json)
        by_id = {n.id: n for n in nodes}
        middle = (by_id["node-b-0"].position.y + by_id["node-b-1"].position.y) / 2
        assert by_id["node-b"].position.y == middle

    def test_deterministic(self, sample_json: str) -> None:
        first, _ = _laid_out(sample_json)
        second, _ = _laid_out(sample_json)
        assert [n.position for n in first] == [n.position for n in second]

    def test_input_order_preserved_and_not_mutated(self, sample_json: str) -> None:
        nodes, edges = build_graph(parse(sample_json).tree)
        positioned = layout(nodes, edges, _SETTINGS)
        assert [n.id for n in positioned] == [n.id for n in nodes]
        assert all(n.position.x == 0 and n.position.y == 0 for n in nodes)

    def test_fixed_footprint(self, sample_json: str) -> None:
        nodes, _ = _laid_out(sample_json)
        assert {(n.width, n.height) for n in nodes} == {(_SETTINGS.node_width, _SETTINGS.node_height)}

    def test_size_by_label(self) -> None:
        settings = PipelineSettings(size_by_label=True)
        nodes, _ = _laid_out('{"k": "' + "v" * 30 + '"}', settings)
        assert nodes[1].width > nodes[0].width

    def test_cycle_terminates(self) -> None:
        nodes = [GraphNode(id=i, type=NodeKind.OBJECT, label=i, child_count=1) for i in ("x", "y", "z")]
        edges = [
            GraphEdge(id="e1", source="x", target="y"),
            GraphEdge(id="e2", source="y", target="z"),
            GraphEdge(id="e3", source="z", target="x"),
            GraphEdge(id="e4", source="z", target="z"),
        ]
        positioned = layout(nodes, edges, _SETTINGS)
        assert len(positioned) == 3
        xs = sorted(n.position.x for n in positioned)
        assert xs[0] < xs[1] < xs[2]

    def test_edges_to_unknown_nodes_ignored(self) -> None:
        nodes = [GraphNode(id="x", type=NodeKind.NULL, label="x")]
        edges = [GraphEdge(id="e", source="x", target="missing")]
        assert len(layout(nodes, edges, _SETTINGS)) == 1


class TestPhases:
    def test_remove_cycles_yields_dag(self) -> None:
        graph = nx.DiGraph([("a", "b"), ("b", "c"), ("c", "a"), ("b", "b")])
        dag, preorder = remove_cycles(graph)
        assert nx.is_directed_acyclic_graph(dag)
        assert set(dag.nodes) == {"a", "b", "c"}
        assert preorder["a"] == 0

    def test_longest_path_ranks(self) -> None:
        dag = nx.DiGraph([("a", "b"), ("b", "c"), ("a", "c")])
        assert assign_ranks(dag) == {"a": 0, "b": 1, "c": 2}
