"""Main Typer application, the entry point for the ``postburst`` CLI."""

from __future__ import annotations

import typer

from postburst import __version__
from postburst.cli.preview import preview_cmd
from postburst.cli.run import run_cmd

app = typer.Typer(
    name="postburst",
    help="Concurrent JSON POST load generator.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("run", help="Send JSON POST requests concurrently.")(run_cmd)
app.command("preview", help="Print one auto-generated payload.")(preview_cmd)


def _version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version was passed.
    """
    if value:
        typer.echo(f"postburst {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """postburst: fire concurrent JSON POST requests and measure latency."""
