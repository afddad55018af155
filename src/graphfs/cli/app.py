from typing import Optional

import typer

from graphfs import __version__
from graphfs.config import init_cli_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        typer.echo(f"graphfs version: {__version__}")
        raise typer.Exit()


app = typer.Typer(name="graphfs", help="Folder and file hierarchy stored as a graph")


@app.callback()
def app_callback(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """graphfs - browse and edit a folder hierarchy from the command line."""
    init_cli_logging()
