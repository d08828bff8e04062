"""Local receiver for trying postburst without a real backend.

Accepts POSTs on any path, counts them and answers ``ok``. Run it with:

    python examples/stub_server.py --port 5080

then, in another terminal:

    postburst run -times 50 -threads 5 -records 3
"""

from __future__ import annotations

import json

import typer
from aiohttp import web


def create_app() -> web.Application:
    """Build the receiver app; the receipt count lives in ``app["received"]``."""
    app = web.Application(client_max_size=64 * 1024 * 1024)
    app["received"] = 0

    async def _receive(request: web.Request) -> web.Response:
        body = await request.read()
        json.loads(body)
        request.app["received"] += 1
        return web.Response(text="ok")

    async def _stats(request: web.Request) -> web.Response:
        return web.json_response({"received": request.app["received"]})

    app.router.add_get("/stats", _stats)
    app.router.add_post("/{path:.*}", _receive)
    return app


def main(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(5080, help="Port to listen on."),
) -> None:
    """Serve the receiver until interrupted."""
    web.run_app(create_app(), host=host, port=port)


if __name__ == "__main__":
    typer.run(main)
