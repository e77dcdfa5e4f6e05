"""Dash callback registrations."""

from __future__ import annotations

import logging
from typing import Any

from dash import Dash, Input, Output, State, ctx, html
from dash.exceptions import PreventUpdate

from json_graph.core.graph import format_path
from json_graph.core.pipeline import format_size
from json_graph.dashboard.graph_data import (
    graph_to_elements,
    node_display,
    node_kind_counts,
    node_kind_counts_to_figure,
)
from json_graph.dashboard.session import DashboardSession
from json_graph.dashboard.styles import graph_style, graph_stylesheet, page_style
from json_graph.models import DocumentStatus, ValidationMarker

_log = logging.getLogger(__name__)

_WARNING_HIDDEN = {"display": "none"}
_WARNING_VISIBLE = {
    "display": "block",
    "padding": "8px 12px",
    "marginBottom": "12px",
    "border": "1px solid #fcd34d",
    "borderRadius": "8px",
    "backgroundColor": "#fef3c7",
    "color": "#92400e",
}


def _status_children(status: DocumentStatus) -> Any:
    if status.valid:
        return html.Span(f"Valid JSON ({format_size(status.size_bytes)})", style={"color": "#16a34a"})
    if status.error:
        return html.Span(status.error, style={"color": "#dc2626"})
    return ""


def _marker_items(markers: list[ValidationMarker]) -> list[Any]:
    return [html.Li(f"Line {m.start_line}, column {m.start_column}: {m.message}") for m in markers]


def _warning(status: DocumentStatus) -> tuple[str, dict[str, str]]:
    if not status.size_warning:
        return "", _WARNING_HIDDEN
    if not status.valid and status.error and "too large" in status.error:
        return status.error, _WARNING_VISIBLE
    return (
        f"Large document ({format_size(status.size_bytes)}). Updates are debounced and may lag behind typing.",
        _WARNING_VISIBLE,
    )


def _details(node_data: dict[str, Any]) -> Any:
    rows = [
        ("Path", node_data.get("path", "")),
        ("Kind", node_data.get("kind", "")),
        ("Label", node_data.get("label", "")),
    ]
    if node_data.get("collapsible"):
        rows.append(("Children", str(node_data.get("child_count", 0))))
        rows.append(("Collapsed", "yes" if node_data.get("collapsed") else "no"))
    else:
        rows.append(("Value", node_data.get("display", "")))
    return html.Dl(
        [item for label, value in rows for item in (html.Dt(label, style={"fontWeight": "bold"}), html.Dd(value))]
    )


def register_callbacks(app: Dash, session: DashboardSession) -> None:
    # ── Editor: every change restarts the debounce timer ──────────

    @app.callback(
        Output("edit-ack", "data"),
        Input("json-editor", "value"),
    )
    def submit_edit(text: str | None) -> int:
        session.submit_text(text or "")
        return len(text or "")

    # ── Graph: poll the surface, redraw only when it changed ──────

    @app.callback(
        [
            Output("json-graph", "elements"),
            Output("json-graph", "stylesheet"),
            Output("json-graph", "style"),
            Output("page", "style"),
            Output("editor-markers", "children"),
            Output("document-status", "children"),
            Output("size-warning", "children"),
            Output("size-warning", "style"),
            Output("node-kind-chart", "figure"),
            Output("graph-version", "data"),
        ],
        [Input("graph-poll", "n_intervals"), Input("theme-toggle", "value")],
        State("graph-version", "data"),
    )
    def refresh_graph(_: Any, theme: str | None, version: int | None) -> tuple[Any, ...]:
        snapshot = session.snapshot()
        if ctx.triggered_id == "graph-poll" and snapshot.version == version:
            raise PreventUpdate
        dark = theme == "dark"
        warning_text, warning_style = _warning(snapshot.status)
        return (
            graph_to_elements(snapshot.nodes, snapshot.edges, dark),
            graph_stylesheet(dark),
            graph_style(dark),
            page_style(dark),
            _marker_items(snapshot.markers),
            _status_children(snapshot.status),
            warning_text,
            warning_style,
            node_kind_counts_to_figure(node_kind_counts(snapshot.nodes), dark),
            snapshot.version,
        )

    # ── Graph: click a container to collapse or expand it ─────────

    @app.callback(
        Output("node-details-content", "children"),
        Input("json-graph", "tapNodeData"),
        prevent_initial_call=True,
    )
    def tap_node(node_data: dict[str, Any] | None) -> Any:
        if not node_data:
            return "Click a node to see details."
        node_id = node_data.get("id", "")
        if not node_id:
            return "Click a node to see details."
        if node_data.get("collapsible"):
            session.toggle(node_id)
        try:
            node = session.select(node_id)
        except Exception:
            _log.exception("select failed for %s", node_id)
            node = None
        if node is None:
            return _details(node_data)
        return _details(
            {
                "path": format_path(node.path),
                "kind": node.type.value,
                "label": node.label,
                "display": node.display_value or node_display(node),
                "collapsible": node.collapsible,
                "child_count": node.child_count,
                # select runs on the loop after the queued toggle, so the collapse set is current
                "collapsed": node.id in session.view.collapsed,
            }
        )
