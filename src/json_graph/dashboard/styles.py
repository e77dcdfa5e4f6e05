"""Dashboard colours per node kind and Cytoscape stylesheets for light and dark mode."""

from __future__ import annotations

from typing import Any

from json_graph.models import NodeKind

NodeColors = dict[str, str]

LIGHT_THEME: dict[str, Any] = {
    "background": "#ffffff",
    "graph_background": "#f1f5f9",
    "node_colors": {
        NodeKind.OBJECT: {"bg": "#eef2ff", "border": "#6366f1", "text": "#4338ca"},
        NodeKind.ARRAY: {"bg": "#f5f3ff", "border": "#8b5cf6", "text": "#6d28d9"},
        NodeKind.STRING: {"bg": "#f0fdf4", "border": "#22c55e", "text": "#15803d"},
        NodeKind.NUMBER: {"bg": "#fffbeb", "border": "#f59e0b", "text": "#b45309"},
        NodeKind.BOOLEAN: {"bg": "#eff6ff", "border": "#3b82f6", "text": "#1d4ed8"},
        NodeKind.NULL: {"bg": "#f9fafb", "border": "#6b7280", "text": "#374151"},
    },
    "edge": "#94a3b8",
    "text": "#1e293b",
}

DARK_THEME: dict[str, Any] = {
    "background": "#0f172a",
    "graph_background": "#1e293b",
    "node_colors": {
        NodeKind.OBJECT: {"bg": "#312e81", "border": "#818cf8", "text": "#c7d2fe"},
        NodeKind.ARRAY: {"bg": "#4c1d95", "border": "#a78bfa", "text": "#ddd6fe"},
        NodeKind.STRING: {"bg": "#14532d", "border": "#4ade80", "text": "#bbf7d0"},
        NodeKind.NUMBER: {"bg": "#78350f", "border": "#fbbf24", "text": "#fef3c7"},
        NodeKind.BOOLEAN: {"bg": "#1e3a8a", "border": "#60a5fa", "text": "#bfdbfe"},
        NodeKind.NULL: {"bg": "#374151", "border": "#9ca3af", "text": "#e5e7eb"},
    },
    "edge": "#64748b",
    "text": "#f1f5f9",
}


def theme_colors(dark: bool) -> dict[str, Any]:
    return DARK_THEME if dark else LIGHT_THEME


def node_colors(kind: NodeKind, dark: bool) -> NodeColors:
    """Return background, border and text colours for a node kind."""
    return theme_colors(dark)["node_colors"][kind]


def page_style(dark: bool) -> dict[str, str]:
    theme = theme_colors(dark)
    return {
        "padding": "20px",
        "fontFamily": "system-ui, sans-serif",
        "minHeight": "100vh",
        "backgroundColor": theme["background"],
        "color": theme["text"],
    }


def graph_style(dark: bool) -> dict[str, str]:
    """Style of the cytoscape canvas itself; node and edge rules live in the stylesheet."""
    return {
        "width": "100%",
        "height": "560px",
        "border": "1px solid #ddd",
        "borderRadius": "8px",
        "backgroundColor": theme_colors(dark)["graph_background"],
    }


def graph_stylesheet(dark: bool) -> list[dict[str, Any]]:
    theme = theme_colors(dark)
    return [
        {
            "selector": "node",
            "style": {
                "shape": "round-rectangle",
                "label": "data(display)",
                "font-size": "12px",
                "font-family": "ui-monospace, monospace",
                "text-valign": "center",
                "text-halign": "center",
                "text-wrap": "ellipsis",
                "text-max-width": "data(width)",
                "background-color": "data(bg)",
                "border-color": "data(border)",
                "border-width": 2,
                "color": "data(fg)",
                "width": "data(width)",
                "height": "data(height)",
            },
        },
        {
            "selector": "node.collapsed",
            "style": {
                "border-style": "double",
                "border-width": 4,
            },
        },
        {
            "selector": "node:selected",
            "style": {
                "border-width": 3,
                "border-color": "#FF5722",
            },
        },
        {
            "selector": "edge",
            "style": {
                "curve-style": "taxi",
                "taxi-direction": "horizontal",
                "line-color": theme["edge"],
                "target-arrow-color": theme["edge"],
                "target-arrow-shape": "triangle",
                "width": 2,
            },
        },
    ]
