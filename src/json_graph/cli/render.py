"""One-shot commands: lay out a JSON file, or only validate it."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from json_graph.config import get_settings
from json_graph.core.graph import format_path
from json_graph.core.markers import create_validation_markers
from json_graph.core.pipeline import byte_size, check_size_limit, process_request, size_limit_message
from json_graph.core.visibility import filter_graph
from json_graph.models import GraphEdge, GraphNode, ValidationMarker, WorkerRequest

console = Console()


class OutputFormat(StrEnum):
    TABLE = "table"
    JSON = "json"


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"[red]Could not read {path}: {exc}[/red]")
        raise typer.Exit(1) from exc


def _print_markers(path: Path, markers: list[ValidationMarker]) -> None:
    for marker in markers:
        console.print(f"[red]{path}:{marker.start_line}:{marker.start_column}[/red] {marker.message}")


def _render_table(nodes: list[GraphNode], edges: list[GraphEdge]) -> None:
    table = Table(show_lines=False)
    for header in ("id", "kind", "label", "value", "children", "path", "x,y"):
        table.add_column(header)
    for node in nodes:
        children = str(node.child_count) if node.collapsible else ""
        if node.collapsed:
            children += " (collapsed)"
        table.add_row(
            node.id,
            node.type.value,
            node.label,
            node.display_value or "",
            children,
            format_path(node.path),
            f"{node.position.x:.0f},{node.position.y:.0f}",
        )
    console.print(table)
    console.print(f"({len(nodes)} nodes, {len(edges)} edges)")


def _run(path: Path) -> tuple[str, list[GraphNode], list[GraphEdge]]:
    """Run the pipeline once; exit 1 on size rejection or syntax errors."""
    settings = get_settings()
    text = _read(path)
    size = byte_size(text)
    if not check_size_limit(size, settings):
        console.print(f"[red]{size_limit_message(size, settings)}[/red]")
        raise typer.Exit(1)
    response = process_request(WorkerRequest(request_id=1, text=text), settings)
    if response.errors:
        _print_markers(path, create_validation_markers(response.errors, text))
        raise typer.Exit(1)
    return text, response.nodes or [], response.edges or []


def render(
    path: Annotated[Path, typer.Argument(help="JSON file to lay out.")],
    output: Annotated[OutputFormat, typer.Option("--format", "-f", help="Output format.")] = OutputFormat.TABLE,
    collapse: Annotated[
        list[str] | None, typer.Option("--collapse", "-c", help="Node id to collapse (repeatable).")
    ] = None,
) -> None:
    """Lay out a JSON file and print its visible nodes with positions."""
    _, nodes, edges = _run(path)
    nodes, edges = filter_graph(nodes, edges, collapse or [])
    if output is OutputFormat.JSON:
        console.print_json(
            data={
                "nodes": [node.model_dump(mode="json") for node in nodes],
                "edges": [edge.model_dump(mode="json") for edge in edges],
            }
        )
        return
    _render_table(nodes, edges)


def check(
    path: Annotated[Path, typer.Argument(help="JSON file to validate.")],
) -> None:
    """Validate a JSON file; exits with status 1 when it has syntax errors."""
    text, nodes, _ = _run(path)
    console.print(f"[green]{path}: valid JSON[/green] ({byte_size(text)} bytes, {len(nodes)} nodes)")
