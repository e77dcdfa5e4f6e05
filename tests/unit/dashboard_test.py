"""Tests for the dashboard graph_data module, session and app creation."""

from __future__ import annotations

import time

from json_graph.config import PipelineSettings
from json_graph.core.graph import build_graph
from json_graph.core.layout import layout
from json_graph.core.parser import parse
from json_graph.dashboard.callbacks import _marker_items, _status_children, _warning
from json_graph.dashboard.graph_data import (
    graph_to_elements,
    node_display,
    node_kind_counts,
    node_kind_counts_to_figure,
)
from json_graph.dashboard.session import DashboardSession, DashSurface
from json_graph.dashboard.styles import (
    DARK_THEME,
    LIGHT_THEME,
    graph_style,
    graph_stylesheet,
    node_colors,
    page_style,
)
from json_graph.models import DocumentStatus, GraphNode, NodeKind, ValidationMarker


def _positioned(text: str) -> tuple[list[GraphNode], list]:
    nodes, edges = build_graph(parse(text).tree)
    return layout(nodes, edges, PipelineSettings()), edges


class TestNodeDisplay:
    def test_primitive(self) -> None:
        node = GraphNode(id="node-a", type=NodeKind.NUMBER, label="a", display_value="1")
        assert node_display(node) == "a: 1"

    def test_object(self) -> None:
        node = GraphNode(id="root", type=NodeKind.OBJECT, label="Object", child_count=2)
        assert node_display(node) == "Object { } 2"

    def test_collapsed_array(self) -> None:
        node = GraphNode(id="node-b", type=NodeKind.ARRAY, label="b", child_count=3, collapsed=True)
        assert node_display(node) == "b [ ] 3 +"


class TestGraphToElements:
    def test_empty(self) -> None:
        assert graph_to_elements([], []) == []

    def test_nodes_and_edges(self, sample_json: str) -> None:
        nodes, edges = _positioned(sample_json)
        elements = graph_to_elements(nodes, edges)
        assert len(elements) == 9
        node_elements = [e for e in elements if "position" in e]
        edge_elements = [e for e in elements if "source" in e["data"]]
        assert len(node_elements) == 5
        assert len(edge_elements) == 4

    def test_positions_are_centres(self, sample_json: str) -> None:
        nodes, edges = _positioned(sample_json)
        root = graph_to_elements(nodes, edges)[0]
        assert root["position"]["x"] == nodes[0].position.x + nodes[0].width / 2
        assert root["position"]["y"] == nodes[0].position.y + nodes[0].height / 2

    def test_colours_follow_kind_and_theme(self, sample_json: str) -> None:
        nodes, edges = _positioned(sample_json)
        light = graph_to_elements(nodes, edges)[0]["data"]
        dark = graph_to_elements(nodes, edges, dark=True)[0]["data"]
        assert light["bg"] == LIGHT_THEME["node_colors"][NodeKind.OBJECT]["bg"]
        assert dark["bg"] == DARK_THEME["node_colors"][NodeKind.OBJECT]["bg"]

    def test_data_fields(self, sample_json: str) -> None:
        nodes, edges = _positioned(sample_json)
        b = graph_to_elements(nodes, edges)[2]["data"]
        assert b["id"] == "node-b"
        assert b["kind"] == "array"
        assert b["path"] == "$.b"
        assert b["collapsible"] is True

    def test_collapsed_class(self) -> None:
        node = GraphNode(id="root", type=NodeKind.OBJECT, label="Object", child_count=1, collapsed=True)
        assert graph_to_elements([node], [])[0]["classes"] == "collapsed"


class TestNodeKindFigure:
    def test_counts(self, sample_json: str) -> None:
        nodes, _ = _positioned(sample_json)
        counts = dict(node_kind_counts(nodes))
        assert counts == {"object": 1, "number": 1, "array": 1, "boolean": 1, "null": 1}

    def test_empty_figure(self) -> None:
        fig = node_kind_counts_to_figure([])
        assert fig.layout.title.text == "No data"

    def test_bar_figure(self) -> None:
        fig = node_kind_counts_to_figure([("string", 3), ("number", 1)], dark=True)
        assert fig.layout.title.text == "Node kinds"
        assert list(fig.data[0].y) == ["number", "string"]
        assert list(fig.data[0].x) == [1, 3]


class TestStyles:
    def test_every_kind_has_colours(self) -> None:
        for kind in NodeKind:
            for dark in (False, True):
                assert set(node_colors(kind, dark)) == {"bg", "border", "text"}

    def test_stylesheet_selectors(self) -> None:
        selectors = [rule["selector"] for rule in graph_stylesheet(False)]
        assert selectors == ["node", "node.collapsed", "node:selected", "edge"]

    def test_page_follows_theme(self) -> None:
        assert page_style(False)["backgroundColor"] == LIGHT_THEME["background"]
        assert page_style(True)["backgroundColor"] == DARK_THEME["background"]
        assert page_style(True)["color"] == DARK_THEME["text"]

    def test_graph_canvas_follows_theme(self) -> None:
        assert graph_style(False)["backgroundColor"] == LIGHT_THEME["graph_background"]
        assert graph_style(True)["backgroundColor"] == DARK_THEME["graph_background"]

    def test_layout_starts_in_light_theme(self) -> None:
        from json_graph.dashboard.layout import build_layout

        page = build_layout("[]")
        assert page.id == "page"
        assert page.style == page_style(False)


class TestCallbackHelpers:
    def test_valid_status(self) -> None:
        span = _status_children(DocumentStatus(valid=True, size_bytes=2048))
        assert "2.0KB" in span.children

    def test_invalid_status(self) -> None:
        span = _status_children(DocumentStatus(valid=False, error="Value expected (line 1, column 6)"))
        assert span.children == "Value expected (line 1, column 6)"

    def test_warning_hidden(self) -> None:
        _, style = _warning(DocumentStatus())
        assert style == {"display": "none"}

    def test_warning_for_rejected_document(self) -> None:
        text, style = _warning(
            DocumentStatus(valid=False, error="JSON too large (400.0KB). Maximum size is 300.0KB.", size_warning=True)
        )
        assert text.startswith("JSON too large")
        assert style["display"] == "block"

    def test_marker_items(self) -> None:
        marker = ValidationMarker(
            severity=8, message="Comma expected", start_line=2, start_column=3, end_line=2, end_column=4
        )
        items = _marker_items([marker])
        assert items[0].children == "Line 2, column 3: Comma expected"


class TestDashSurface:
    def test_version_bumps_on_every_update(self) -> None:
        surface = DashSurface()
        assert surface.snapshot().version == 0
        surface.render([], [])
        surface.set_markers([])
        surface.set_status(DocumentStatus(valid=False))
        snapshot = surface.snapshot()
        assert snapshot.version == 3
        assert snapshot.status.valid is False

    def test_snapshot_is_a_copy(self) -> None:
        surface = DashSurface()
        node = GraphNode(id="root", type=NodeKind.NULL, label="Null")
        surface.render([node], [])
        snapshot = surface.snapshot()
        snapshot.nodes.clear()
        assert len(surface.snapshot().nodes) == 1


class TestDashboardSession:
    def test_submit_reaches_surface(self, settings: PipelineSettings, sample_json: str) -> None:
        session = DashboardSession(settings)
        try:
            session.submit_text(sample_json)
            deadline = time.monotonic() + 5
            while not session.snapshot().nodes and time.monotonic() < deadline:
                time.sleep(0.01)
            snapshot = session.snapshot()
            assert [n.id for n in snapshot.nodes] == ["root", "node-a", "node-b", "node-b-0", "node-b-1"]

            session.toggle("node-b")
            deadline = time.monotonic() + 5
            while len(session.snapshot().nodes) != 3 and time.monotonic() < deadline:
                time.sleep(0.01)
            assert [n.id for n in session.snapshot().nodes] == ["root", "node-a", "node-b"]

            selected = session.select("node-b")
            assert selected is not None
            assert selected.path == ["b"]
        finally:
            session.close()


class TestCreateDashboard:
    def test_creates_app(self, settings: PipelineSettings) -> None:
        from json_graph.dashboard.app import create_dashboard

        sessions: list[DashboardSession] = []

        def factory() -> DashboardSession:
            sessions.append(DashboardSession(settings))
            return sessions[-1]

        try:
            app = create_dashboard(factory, initial_text="[1]")
            assert app is not None
            assert app.layout is not None
            assert len(sessions) == 1
        finally:
            for session in sessions:
                session.close()
