"""Convert pipeline output into Cytoscape elements and plotly figures."""

from __future__ import annotations

from collections import Counter
from typing import Any

import plotly.graph_objects as go  # type: ignore[import-untyped]

from json_graph.core.graph import format_path
from json_graph.dashboard.styles import node_colors
from json_graph.models import GraphEdge, GraphNode, NodeKind


def node_display(node: GraphNode) -> str:
    """Text shown inside a node: ``key: value`` for primitives, ``key {} n`` for containers."""
    if node.display_value is not None:
        return f"{node.label}: {node.display_value}"
    symbol = "[ ]" if node.type is NodeKind.ARRAY else "{ }"
    marker = " +" if node.collapsed else ""
    return f"{node.label} {symbol} {node.child_count}{marker}"


def graph_to_elements(
    nodes: list[GraphNode],
    edges: list[GraphEdge],
    dark: bool = False,
) -> list[dict[str, Any]]:
    """Turn positioned nodes and edges into Cytoscape elements for a ``preset`` layout.

    Cytoscape positions are node centres; the layout engine hands out top-left corners.
    """
    elements: list[dict[str, Any]] = []
    for node in nodes:
        colors = node_colors(node.type, dark)
        elements.append(
            {
                "data": {
                    "id": node.id,
                    "label": node.label,
                    "display": node_display(node),
                    "kind": node.type.value,
                    "path": format_path(node.path),
                    "child_count": node.child_count,
                    "collapsible": node.collapsible,
                    "collapsed": node.collapsed,
                    "width": node.width,
                    "height": node.height,
                    "bg": colors["bg"],
                    "border": colors["border"],
                    "fg": colors["text"],
                },
                "position": {
                    "x": node.position.x + node.width / 2,
                    "y": node.position.y + node.height / 2,
                },
                "classes": "collapsed" if node.collapsed else "",
            }
        )
    for edge in edges:
        elements.append({"data": {"id": edge.id, "source": edge.source, "target": edge.target}})
    return elements


def node_kind_counts(nodes: list[GraphNode]) -> list[tuple[str, int]]:
    """Count nodes per kind, most frequent first."""
    return Counter(node.type.value for node in nodes).most_common()


def node_kind_counts_to_figure(rows: list[tuple[str, int]], dark: bool = False) -> go.Figure:
    """Return a horizontal bar chart of node kind frequencies."""
    template = "plotly_dark" if dark else "plotly_white"
    if not rows:
        fig = go.Figure()
        fig.update_layout(title="No data", height=250, template=template)
        return fig
    # Reverse so the highest count is at the top
    kinds = [r[0] for r in reversed(rows)]
    counts = [r[1] for r in reversed(rows)]
    colors = [node_colors(NodeKind(kind), dark)["border"] for kind in kinds]
    fig = go.Figure(go.Bar(x=counts, y=kinds, orientation="h", marker_color=colors))
    fig.update_layout(
        title="Node kinds",
        xaxis_title="Count",
        height=max(250, len(kinds) * 30 + 100),
        margin={"l": 80, "r": 20, "t": 40, "b": 40},
        template=template,
    )
    return fig
