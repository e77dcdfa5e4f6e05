from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

console = Console()


def serve(
    host: Annotated[str, typer.Option(help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port to listen on.")] = 8050,
    path: Annotated[Path | None, typer.Option("--file", help="JSON file to open in the editor.")] = None,
    debug: Annotated[bool, typer.Option(help="Run Dash in debug mode.")] = False,
) -> None:
    """Start the Dash editor and live graph."""
    from json_graph.dashboard.app import create_dashboard
    from json_graph.dashboard.layout import DEFAULT_JSON

    app = create_dashboard(initial_text=path.read_text(encoding="utf-8") if path is not None else DEFAULT_JSON)
    console.print(f"[green]Starting dashboard on http://{host}:{port}[/green]")
    app.run(host=host, port=port, debug=debug)
