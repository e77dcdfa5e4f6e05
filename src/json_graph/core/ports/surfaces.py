from typing import Protocol

from json_graph.models import DocumentStatus, GraphEdge, GraphNode, ValidationMarker


class RenderSurface(Protocol):
    def render(self, nodes: list[GraphNode], edges: list[GraphEdge]) -> None: ...


class EditorSurface(Protocol):
    def set_markers(self, markers: list[ValidationMarker]) -> None: ...

    def set_status(self, status: DocumentStatus) -> None: ...
