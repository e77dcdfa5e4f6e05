"""Follow a JSON file on disk and re-run the pipeline on every save."""

from __future__ import annotations

import asyncio
import contextlib
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from json_graph.config import get_settings
from json_graph.core.orchestrator import GraphView, PipelineOrchestrator
from json_graph.core.pipeline import format_size
from json_graph.models import DocumentStatus, GraphEdge, GraphNode, ValidationMarker
from json_graph.watcher.watchfiles_adapter import JsonFileWatcher

console = Console()


class ConsoleSurface:
    """Prints a one-line summary for every graph, marker and status update."""

    def __init__(self, name: str) -> None:
        self._name = name

    def render(self, nodes: list[GraphNode], edges: list[GraphEdge]) -> None:
        if nodes:
            console.print(f"[green]{self._name}[/green]: {len(nodes)} nodes, {len(edges)} edges")

    def set_markers(self, markers: list[ValidationMarker]) -> None:
        for marker in markers:
            console.print(f"[red]{self._name}:{marker.start_line}:{marker.start_column}[/red] {marker.message}")

    def set_status(self, status: DocumentStatus) -> None:
        if status.size_warning:
            console.print(f"[yellow]{self._name}: large document ({format_size(status.size_bytes)})[/yellow]")
        if not status.valid and status.error:
            console.print(f"[red]{self._name}: {status.error}[/red]")


async def _watch(path: Path) -> None:
    surface = ConsoleSurface(path.name)
    orchestrator = PipelineOrchestrator(GraphView(surface), surface, settings=get_settings())

    async def _on_change(text: str) -> None:
        orchestrator.submit_text(text)

    watcher = JsonFileWatcher(path, _on_change)
    orchestrator.submit_text(path.read_text(encoding="utf-8"))
    await watcher.start()
    try:
        await asyncio.Event().wait()
    finally:
        await watcher.stop()
        orchestrator.close()


def watch(
    path: Annotated[Path, typer.Argument(help="JSON file to follow.")],
) -> None:
    """Re-parse and lay out a JSON file every time it changes on disk."""
    if not path.is_file():
        console.print(f"[red]No such file: {path}[/red]")
        raise typer.Exit(1)
    console.print(f"Watching {path} (Ctrl+C to stop)")
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_watch(path))
