"""``postburst run``: fire the POST requests and print a summary."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from postburst._internal.config import (
    DEFAULT_PASSWORD,
    DEFAULT_URL,
    DEFAULT_USERNAME,
    ClientConfig,
    GeneratorConfig,
    load_settings,
    parse_headers,
)
from postburst._internal.errors import PostBurstError
from postburst._internal.logging import setup_logging
from postburst.engine.dispatcher import Dispatcher
from postburst.payload.source import GeneratedPayload, build_payload_source
from postburst.report.summary import format_outcome, format_summary

if TYPE_CHECKING:
    from postburst.metrics.models import RequestOutcome, WorkItem

console = Console()


def _print_outcome(item: WorkItem, times: int, outcome: RequestOutcome) -> None:
    """Print the lines for one finished request."""
    console.print()
    console.print(
        format_outcome(item, times, outcome),
        markup=False,
        emoji=False,
        highlight=False,
        soft_wrap=True,
    )


def _fail(message: str, exc: Exception) -> typer.Exit:
    console.print(f"[red]{message}[/red] {escape(str(exc))}", emoji=False)
    return typer.Exit(code=1)


def run_cmd(
    url: str = typer.Option(
        DEFAULT_URL,
        "-url",
        "--url",
        help="Target URL for POST requests.",
    ),
    user: str = typer.Option(
        DEFAULT_USERNAME,
        "-user",
        "--user",
        help="Username for basic auth.",
    ),
    password: str = typer.Option(
        DEFAULT_PASSWORD,
        "-pass",
        "--pass",
        help="Password for basic auth.",
    ),
    times: int = typer.Option(
        1,
        "-times",
        "--times",
        help="Number of requests to send.",
    ),
    threads: int = typer.Option(
        1,
        "-threads",
        "--threads",
        help="Number of concurrent worker threads.",
    ),
    data: str = typer.Option(
        "",
        "-data",
        "--data",
        help="JSON data to send with every request (empty: auto-generate).",
    ),
    header: list[str] | None = typer.Option(
        None,
        "-header",
        "--header",
        help="Additional header as 'key:value'. Repeatable.",
    ),
    fields: int = typer.Option(
        5,
        "-fields",
        "--fields",
        help="Number of fields in each auto-generated record.",
    ),
    records: int = typer.Option(
        1,
        "-records",
        "--records",
        help="Number of records per request (more than 1 sends a JSON array).",
    ),
    body: bool = typer.Option(
        False,
        "-body",
        "--body",
        help="Add a random base64 body (1KB-200KB) to generated log records.",
    ),
    preview: bool = typer.Option(
        False,
        "--preview",
        help="Print one generated payload before sending.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit structured JSON logs on stderr.",
    ),
) -> None:
    """Send JSON POST requests concurrently and report latency."""
    try:
        settings = load_settings()
        setup_logging(
            level=logging.DEBUG if verbose else logging.WARNING,
            json_format=json_logs or settings.log_format == "json",
        )
        client_config = ClientConfig(
            url=url,
            username=user,
            password=password,
            headers=parse_headers(header or []),
            timeout=settings.request_timeout,
        )
        Dispatcher.validate(times, threads)
        source = build_payload_source(
            data,
            GeneratorConfig(
                field_count=fields,
                records_per_request=records,
                enable_body=body,
            ),
        )
    except PostBurstError as exc:
        raise _fail("Error:", exc) from exc

    console.print(
        Panel(
            f"[bold]Target:[/bold]   {escape(url)}\n"
            f"[bold]Requests:[/bold] {times}\n"
            f"[bold]Threads:[/bold]  {threads}\n"
            f"[bold]Payload:[/bold]  {source.describe()}",
            title="postburst",
            border_style="cyan",
        )
    )

    if preview and isinstance(source, GeneratedPayload):
        console.print("[bold]Sample payload:[/bold]")
        console.print_json(data=source())

    dispatcher = Dispatcher(client_config, source, on_outcome=_print_outcome)
    try:
        summary = dispatcher.run(times=times, threads=threads)
    except PostBurstError as exc:
        raise _fail("Run failed:", exc) from exc

    console.print()
    console.print(format_summary(summary), markup=False, emoji=False, highlight=False)
