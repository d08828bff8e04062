"""``postburst preview``: print one generated payload without sending it."""

from __future__ import annotations

import json
import random

import typer
from rich.console import Console
from rich.markup import escape

from postburst._internal.config import GeneratorConfig
from postburst._internal.errors import ConfigError
from postburst.payload.generator import PayloadGenerator

console = Console(stderr=True)


def preview_cmd(
    fields: int = typer.Option(
        5,
        "-fields",
        "--fields",
        help="Number of fields in each generated record.",
    ),
    records: int = typer.Option(
        1,
        "-records",
        "--records",
        help="Number of records (more than 1 prints a JSON array).",
    ),
    body: bool = typer.Option(
        False,
        "-body",
        "--body",
        help="Add a random base64 body (1KB-200KB) to each log record.",
    ),
    seed: int | None = typer.Option(
        None,
        "--seed",
        help="Seed the random generator for a repeatable sample.",
    ),
) -> None:
    """Print one auto-generated payload as indented JSON on stdout."""
    try:
        config = GeneratorConfig(
            field_count=fields,
            records_per_request=records,
            enable_body=body,
        )
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    generator = PayloadGenerator(config, random.Random(seed))  # noqa: S311
    typer.echo(json.dumps(generator.generate(), indent=2))
