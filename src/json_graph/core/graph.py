"""Convert a structural tree into a flat list of graph nodes and edges."""

from __future__ import annotations

import json
import re

from json_graph.models import GraphEdge, GraphNode, NodeKind, NodePath, StructuralNode

ROOT_ID = "root"
NODE_ID_PREFIX = "node-"
MAX_DISPLAY_LENGTH = 40

_UNSAFE = re.compile(r"[^A-Za-z0-9]")

# per-label sizing
MIN_WIDTH = 120.0
MAX_WIDTH = 300.0
PADDING_X = 16.0
CHAR_WIDTH = 7.5


def node_id(path: NodePath) -> str:
    """Stable id for a document position. Pure: the same path always gives the same id."""
    if not path:
        return ROOT_ID
    return NODE_ID_PREFIX + "-".join(_UNSAFE.sub("_", str(segment)) for segment in path)


def edge_id(parent_id: str, child_id: str) -> str:
    return f"edge-{parent_id}-{child_id}"


_IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")


def format_path(path: NodePath) -> str:
    """Render a path as a JSONPath-like string, e.g. ``$.items[0]["a.b"]``."""
    parts = ["$"]
    for segment in path:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        elif _IDENTIFIER.fullmatch(segment):
            parts.append(f".{segment}")
        else:
            parts.append(f"[{json.dumps(segment)}]")
    return "".join(parts)


def format_value(kind: NodeKind, value: str | int | float | bool | None) -> str:
    if kind is NodeKind.STRING:
        return f'"{value}"'
    if isinstance(value, str):
        # unparseable number, shown as written
        return value
    return json.dumps(value)


def truncate_value(value: str, max_length: int = MAX_DISPLAY_LENGTH) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


def node_width(label: str, value: str | None = None) -> float:
    """Estimate the rendered width of a node from its label and display value."""
    content = max(len(label), len(value or "")) * CHAR_WIDTH + PADDING_X * 2
    return min(MAX_WIDTH, max(MIN_WIDTH, content))


def _root_label(kind: NodeKind) -> str:
    if kind is NodeKind.ARRAY:
        return "Array"
    if kind is NodeKind.OBJECT:
        return "Object"
    return kind.value.capitalize()


class _IdAllocator:
    """Hands out unique ids for one build; colliding ids get a ``~N`` suffix."""

    def __init__(self) -> None:
        self._seen: dict[str, int] = {}

    def allocate(self, path: NodePath) -> str:
        base = node_id(path)
        count = self._seen.get(base, 0)
        self._seen[base] = count + 1
        if count == 0:
            return base
        return f"{base}~{count}"


def build_graph(
    tree: StructuralNode | None,
    max_display_length: int = MAX_DISPLAY_LENGTH,
) -> tuple[list[GraphNode], list[GraphEdge]]:
    """Walk ``tree`` depth-first and return its nodes and parent-to-child edges.

    Node positions are left at the origin; the layout engine fills them in.
    """
    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []
    if tree is None:
        return nodes, edges

    ids = _IdAllocator()
    # (structural node, parent id, label, path)
    stack: list[tuple[StructuralNode, str | None, str | None, NodePath]] = [(tree, None, None, [])]
    while stack:
        current, parent_id, label, path = stack.pop()
        current_id = ids.allocate(path)

        display_value: str | None = None
        if current.kind not in (NodeKind.OBJECT, NodeKind.ARRAY):
            display_value = truncate_value(format_value(current.kind, current.value), max_display_length)

        nodes.append(
            GraphNode(
                id=current_id,
                type=current.kind,
                label=label if label is not None else _root_label(current.kind),
                display_value=display_value,
                child_count=len(current.children),
                path=path,
                offset=current.offset,
                length=current.length,
            )
        )
        if parent_id is not None:
            edges.append(GraphEdge(id=edge_id(parent_id, current_id), source=parent_id, target=current_id))

        for segment, child in reversed(current.children):
            child_label = f"[{segment}]" if isinstance(segment, int) else segment
            stack.append((child, current_id, child_label, [*path, segment]))

    return nodes, edges
