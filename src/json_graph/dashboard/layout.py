"""Dash layout: JSON editor on the left, live graph and node details on the right."""

from __future__ import annotations

import dash_cytoscape as cyto  # type: ignore[import-untyped]
from dash import dcc, html

from json_graph.dashboard.styles import graph_style, graph_stylesheet, page_style

DEFAULT_JSON = """{
  "name": "JSON Graph",
  "version": "1.0.0",
  "features": ["graph", "editor", "themes"]
}"""

POLL_INTERVAL_MS = 250

_PANEL_STYLE = {
    "padding": "12px",
    "border": "1px solid #ddd",
    "borderRadius": "8px",
}


def _build_editor_panel(initial_text: str) -> html.Div:
    return html.Div(
        [
            dcc.Textarea(
                id="json-editor",
                value=initial_text,
                spellCheck=False,
                style={
                    "width": "100%",
                    "height": "560px",
                    "fontFamily": "ui-monospace, monospace",
                    "fontSize": "13px",
                    "resize": "vertical",
                },
            ),
            html.Div(id="document-status", style={"marginTop": "8px", "fontSize": "13px"}),
            html.Ul(id="editor-markers", style={"color": "#dc2626", "fontSize": "12px", "paddingLeft": "18px"}),
        ],
        style={"flex": "2", "minWidth": "280px"},
    )


def _build_graph_panel() -> html.Div:
    return html.Div(
        [
            cyto.Cytoscape(
                id="json-graph",
                elements=[],
                layout={"name": "preset", "fit": True, "padding": 20, "animate": False},
                style=graph_style(False),
                stylesheet=graph_stylesheet(False),
                minZoom=0.1,
                maxZoom=2,
            ),
            html.Div(
                [
                    html.Div(
                        [
                            html.H4("Node Details", style={"marginTop": "0"}),
                            html.Div(id="node-details-content", children="Click a node to see details."),
                        ],
                        style={**_PANEL_STYLE, "flex": "1", "overflowY": "auto", "maxHeight": "320px"},
                    ),
                    html.Div(dcc.Graph(id="node-kind-chart", figure={}), style={"flex": "1"}),
                ],
                style={"display": "flex", "gap": "16px", "marginTop": "16px"},
            ),
        ],
        style={"flex": "3", "minWidth": "400px"},
    )


def build_layout(initial_text: str = DEFAULT_JSON) -> html.Div:
    """Return the top-level layout.

    A ``dcc.Interval`` polls the pipeline's surface; a ``dcc.Store`` remembers the
    last payload version so unchanged polls do not re-render the graph.
    """
    return html.Div(
        [
            dcc.Store(id="graph-version", data=-1),
            dcc.Store(id="edit-ack"),
            dcc.Interval(id="graph-poll", interval=POLL_INTERVAL_MS),
            html.Div(
                [
                    html.H1("JSON Graph", style={"margin": "0"}),
                    dcc.RadioItems(
                        id="theme-toggle",
                        options=[{"label": " Light", "value": "light"}, {"label": " Dark", "value": "dark"}],
                        value="light",
                        inline=True,
                        inputStyle={"marginLeft": "12px"},
                    ),
                ],
                style={
                    "display": "flex",
                    "justifyContent": "space-between",
                    "alignItems": "center",
                    "marginBottom": "12px",
                },
            ),
            html.Div(
                id="size-warning",
                style={
                    "display": "none",
                    "padding": "8px 12px",
                    "marginBottom": "12px",
                    "border": "1px solid #fcd34d",
                    "borderRadius": "8px",
                    "backgroundColor": "#fef3c7",
                    "color": "#92400e",
                },
            ),
            html.Div(
                [_build_editor_panel(initial_text), _build_graph_panel()],
                style={"display": "flex", "gap": "16px"},
            ),
        ],
        id="page",
        style=page_style(False),
    )
