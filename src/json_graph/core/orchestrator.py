"""Debounced, sequence-checked execution of the parse/build/layout pipeline.

Everything here runs on the interactive thread (the event loop thread). Work
for larger documents is handed to an executor; its result comes back through
the loop and is applied only if no newer request was issued in the meantime.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections import deque
from collections.abc import Callable
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from enum import StrEnum

from json_graph.config import PipelineSettings, get_settings
from json_graph.core.graph import node_id
from json_graph.core.markers import create_validation_markers
from json_graph.core.pipeline import (
    byte_size,
    check_size_limit,
    debounce_delay,
    process_request,
    size_category,
    size_limit_message,
)
from json_graph.core.ports.surfaces import EditorSurface, RenderSurface
from json_graph.core.visibility import VisibilityFilter
from json_graph.models import (
    DocumentStatus,
    GraphEdge,
    GraphNode,
    NodePath,
    ValidationMarker,
    WorkerRequest,
    WorkerResponse,
)

logger = logging.getLogger(__name__)

Processor = Callable[[WorkerRequest], WorkerResponse]


class PipelineState(StrEnum):
    IDLE = "idle"
    PENDING = "pending"
    RUNNING = "running"
    APPLIED = "applied"
    SUPERSEDED = "superseded"
    REJECTED = "rejected"


class GraphView:
    """The last applied graph plus the user's collapse state.

    Collapsed ids survive graph rebuilds because ids are derived from paths.
    Every change re-runs the visibility filter and pushes the visible graph to
    the render surface.
    """

    def __init__(self, surface: RenderSurface | None = None) -> None:
        self._surface = surface
        self._nodes: list[GraphNode] = []
        self._edges: list[GraphEdge] = []
        self._by_id: dict[str, GraphNode] = {}
        self._collapsed: set[str] = set()
        self._filter = VisibilityFilter()
        self.selected_id: str | None = None

    @property
    def nodes(self) -> list[GraphNode]:
        return self._nodes

    @property
    def edges(self) -> list[GraphEdge]:
        return self._edges

    @property
    def collapsed(self) -> frozenset[str]:
        return frozenset(self._collapsed)

    def get(self, node_id: str) -> GraphNode | None:
        return self._by_id.get(node_id)

    def set_graph(self, nodes: list[GraphNode], edges: list[GraphEdge]) -> None:
        self._nodes = nodes
        self._edges = edges
        self._by_id = {node.id: node for node in nodes}
        self._filter.set_graph(edges)
        if self.selected_id is not None and self.selected_id not in self._by_id:
            self.selected_id = None
        self._publish()

    def clear(self) -> None:
        self._collapsed.clear()
        self.selected_id = None
        self.set_graph([], [])

    def toggle_collapse(self, node_id: str) -> bool:
        """Flip the collapsed state of ``node_id``. Known leaf nodes are refused."""
        node = self._by_id.get(node_id)
        if node is not None and not node.collapsible:
            return False
        if node_id in self._collapsed:
            self._collapsed.remove(node_id)
        else:
            self._collapsed.add(node_id)
        self._publish()
        return True

    def toggle_path(self, path: NodePath) -> bool:
        return self.toggle_collapse(node_id(path))

    def select(self, node_id: str | None) -> GraphNode | None:
        node = self._by_id.get(node_id) if node_id is not None else None
        self.selected_id = node.id if node is not None else None
        return node

    def visible(self) -> tuple[list[GraphNode], list[GraphEdge]]:
        self._filter.set_collapsed(self._collapsed)
        return self._filter.apply(self._nodes, self._edges)

    def _publish(self) -> None:
        if self._surface is not None:
            self._surface.render(*self.visible())


class PipelineOrchestrator:
    """Decides when and where the pipeline runs for the current document text."""

    def __init__(
        self,
        view: GraphView,
        editor: EditorSurface | None = None,
        *,
        settings: PipelineSettings | None = None,
        executor: Executor | None = None,
        processor: Processor | None = None,
    ) -> None:
        self._view = view
        self._editor = editor
        self._settings = settings or get_settings()
        self._executor = executor
        self._owns_executor = executor is None
        self._processor: Processor = processor or functools.partial(process_request, settings=self._settings)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._text = ""
        self._latest_id = 0
        self._inflight: set[asyncio.Future[WorkerResponse]] = set()
        self.state = PipelineState.IDLE
        self.status = DocumentStatus()
        # (request id, final state) of recently finished cycles, newest last
        self.history: deque[tuple[int, PipelineState]] = deque(maxlen=32)

    @property
    def latest_request_id(self) -> int:
        return self._latest_id

    @property
    def text(self) -> str:
        return self._text

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def submit_text(self, text: str) -> None:
        """Record an edit and (re)start the debounce timer sized by the document."""
        self._text = text
        if self._timer is not None:
            self._timer.cancel()
        delay = debounce_delay(size_category(byte_size(text), self._settings), self._settings)
        self._timer = self._get_loop().call_later(delay, self._fire)
        self.state = PipelineState.PENDING

    def flush(self) -> None:
        """Run a pending request now instead of waiting for its timer."""
        if self._timer is None:
            return
        self._timer.cancel()
        self._fire()

    async def drain(self) -> None:
        """Wait until every dispatched unit has completed and been applied or discarded."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)
            await asyncio.sleep(0)

    def close(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _get_executor(self) -> Executor:
        if self._executor is None:
            if self._settings.worker_kind == "process":
                self._executor = ProcessPoolExecutor(max_workers=1)
            else:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="json-graph-worker")
        return self._executor

    def _fire(self) -> None:
        self._timer = None
        text = self._text
        size = byte_size(text)
        # every fire supersedes whatever is still in flight, including rejected ones
        self._latest_id += 1

        if not check_size_limit(size, self._settings):
            message = size_limit_message(size, self._settings)
            logger.warning("Request %d rejected: %s", self._latest_id, message)
            self._view.clear()
            self._publish_markers([])
            self._publish_status(DocumentStatus(valid=False, error=message, size_bytes=size, size_warning=True))
            self._finish(PipelineState.REJECTED)
            return

        request = WorkerRequest(request_id=self._latest_id, text=text)
        self.state = PipelineState.RUNNING

        if size <= self._settings.inline_max_bytes:
            try:
                response = self._processor(request)
            except Exception:
                logger.exception("Pipeline failed for request %d", request.request_id)
                self._discard(request)
                return
            self._complete(request, response)
            return

        logger.debug("Request %d (%d bytes) dispatched to worker", request.request_id, size)
        future = self._get_loop().run_in_executor(self._get_executor(), self._processor, request)
        self._inflight.add(future)
        future.add_done_callback(functools.partial(self._on_done, request))

    def _on_done(self, request: WorkerRequest, future: asyncio.Future[WorkerResponse]) -> None:
        self._inflight.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Pipeline failed for request %d", request.request_id, exc_info=exc)
            self._discard(request)
            return
        self._complete(request, future.result())

    def _discard(self, request: WorkerRequest) -> None:
        # a failed unit leaves the last good graph in place, like a stale one
        self.history.append((request.request_id, PipelineState.SUPERSEDED))
        if request.request_id == self._latest_id:
            self.state = PipelineState.SUPERSEDED

    def _complete(self, request: WorkerRequest, response: WorkerResponse) -> None:
        if response.request_id != self._latest_id:
            self.history.append((response.request_id, PipelineState.SUPERSEDED))
            logger.debug("Discarding superseded result %d (latest is %d)", response.request_id, self._latest_id)
            return

        size = byte_size(request.text)
        size_warning = size > self._settings.warning_size_bytes

        if response.errors:
            markers = create_validation_markers(response.errors, request.text)
            first = markers[0]
            self._publish_markers(markers)
            self._publish_status(
                DocumentStatus(
                    valid=False,
                    error=f"{first.message} (line {first.start_line}, column {first.start_column})",
                    size_bytes=size,
                    size_warning=size_warning,
                )
            )
            self._finish(PipelineState.APPLIED)
            return

        self._publish_markers([])
        self._publish_status(DocumentStatus(valid=True, size_bytes=size, size_warning=size_warning))
        self._view.set_graph(response.nodes or [], response.edges or [])
        self._finish(PipelineState.APPLIED)

    def _publish_markers(self, markers: list[ValidationMarker]) -> None:
        if self._editor is not None:
            self._editor.set_markers(markers)

    def _publish_status(self, status: DocumentStatus) -> None:
        self.status = status
        if self._editor is not None:
            self._editor.set_status(status)

    def _finish(self, state: PipelineState) -> None:
        self.state = state
        self.history.append((self._latest_id, state))
