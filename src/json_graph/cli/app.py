import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from json_graph.cli.render import check, render
from json_graph.cli.serve import serve
from json_graph.cli.watch import watch

app = typer.Typer(
    name="json-graph",
    help="JSON Graph CLI: parse JSON documents and lay them out as graphs.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def _configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log pipeline activity.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


app.command("render")(render)
app.command("check")(check)
app.command("watch")(watch)
app.command("serve")(serve)


def main() -> None:
    app()
