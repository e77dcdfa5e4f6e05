"""Run the pipeline for the dashboard on a dedicated event loop thread."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from json_graph.config import PipelineSettings, get_settings
from json_graph.core.orchestrator import GraphView, PipelineOrchestrator
from json_graph.models import DocumentStatus, GraphEdge, GraphNode, ValidationMarker

_log = logging.getLogger(__name__)


@dataclass
class SurfaceSnapshot:
    version: int = 0
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
    markers: list[ValidationMarker] = field(default_factory=list)
    status: DocumentStatus = field(default_factory=DocumentStatus)


class DashSurface:
    """Render and editor surface that keeps the latest payload for Dash to poll.

    Written from the loop thread, read from Dash request threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = SurfaceSnapshot()

    def render(self, nodes: list[GraphNode], edges: list[GraphEdge]) -> None:
        with self._lock:
            self._snapshot.nodes = nodes
            self._snapshot.edges = edges
            self._snapshot.version += 1

    def set_markers(self, markers: list[ValidationMarker]) -> None:
        with self._lock:
            self._snapshot.markers = markers
            self._snapshot.version += 1

    def set_status(self, status: DocumentStatus) -> None:
        with self._lock:
            self._snapshot.status = status
            self._snapshot.version += 1

    def snapshot(self) -> SurfaceSnapshot:
        with self._lock:
            current = self._snapshot
            return SurfaceSnapshot(
                version=current.version,
                nodes=list(current.nodes),
                edges=list(current.edges),
                markers=list(current.markers),
                status=current.status,
            )


class DashboardSession:
    """Owns the event loop thread, the graph view and the orchestrator behind one dashboard."""

    def __init__(self, settings: PipelineSettings | None = None) -> None:
        self.surface = DashSurface()
        self.view = GraphView(self.surface)
        self.orchestrator = PipelineOrchestrator(self.view, self.surface, settings=settings or get_settings())
        self._loop = asyncio.new_event_loop()
        threading.Thread(target=self._loop.run_forever, daemon=True, name="dash-async").start()

    def _run_async(self, coro: Any) -> Any:
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result(timeout=30)

    def submit_text(self, text: str) -> None:
        self._loop.call_soon_threadsafe(self.orchestrator.submit_text, text)

    def toggle(self, node_id: str) -> None:
        self._loop.call_soon_threadsafe(self.view.toggle_collapse, node_id)

    def select(self, node_id: str | None) -> GraphNode | None:
        async def _select() -> GraphNode | None:
            return self.view.select(node_id)

        return self._run_async(_select())

    def snapshot(self) -> SurfaceSnapshot:
        return self.surface.snapshot()

    def close(self) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self.orchestrator.close)
        self._loop.call_soon_threadsafe(self._loop.stop)
        _log.info("Dashboard session closed")
