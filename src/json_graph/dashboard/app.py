"""Dash application factory."""

from __future__ import annotations

from collections.abc import Callable

from dash import Dash

from json_graph.dashboard.callbacks import register_callbacks
from json_graph.dashboard.layout import DEFAULT_JSON, build_layout
from json_graph.dashboard.session import DashboardSession


def create_dashboard(
    session_factory: Callable[[], DashboardSession] = DashboardSession,
    initial_text: str = DEFAULT_JSON,
) -> Dash:
    app = Dash(__name__, suppress_callback_exceptions=True, title="JSON Graph")
    app.layout = build_layout(initial_text)
    register_callbacks(app, session_factory())
    return app
