"""Shared test fixtures for the postburst test suite."""

from __future__ import annotations

import asyncio
import json
import socket
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pytest
from aiohttp import web

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


# =============================================================================
# Network utilities
# =============================================================================


def get_free_port() -> int:
    """Find an available port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# =============================================================================
# Stub HTTP server
# =============================================================================


@dataclass
class StubServer:
    """Handle on a running stub server.

    Attributes:
        url: Base URL, e.g. ``http://127.0.0.1:54321``.
        receipts: Decoded JSON bodies of every POST to ``/collect``, in
            arrival order. Only appended from the server's event loop.
    """

    url: str
    receipts: list[object] = field(default_factory=list)


async def _echo_handler(request: web.Request) -> web.Response:
    """Echo back request details as JSON."""
    body = await request.read()
    return web.json_response(
        {
            "method": request.method,
            "path": str(request.path),
            "headers": dict(request.headers),
            "body": body.decode("utf-8", errors="replace"),
        },
        status=200,
    )


async def _ok_handler(request: web.Request) -> web.Response:
    """Always answer 200 with the text ``ok``."""
    await request.read()
    return web.Response(text="ok")


async def _error_handler(request: web.Request) -> web.Response:
    """Return a configurable error status (query param: ?status=500)."""
    await request.read()
    status = int(request.query.get("status", "500"))
    return web.json_response({"error": True}, status=status)


async def _delay_handler(request: web.Request) -> web.Response:
    """Respond after a configurable delay (query param: ?delay=0.5)."""
    await request.read()
    delay = float(request.query.get("delay", "0.1"))
    await asyncio.sleep(delay)
    return web.json_response({"delayed_by": delay})


async def _health_handler(request: web.Request) -> web.Response:
    """Simple health check endpoint."""
    return web.json_response({"status": "ok"})


def _create_stub_app(server: StubServer) -> web.Application:
    """Build the stub app; ``/collect`` records each JSON body it receives."""

    async def _collect_handler(request: web.Request) -> web.Response:
        server.receipts.append(json.loads(await request.read()))
        return web.Response(text="ok")

    app = web.Application(client_max_size=64 * 1024 * 1024)
    app.router.add_route("*", "/echo{path:.*}", _echo_handler)
    app.router.add_post("/ok", _ok_handler)
    app.router.add_post("/collect", _collect_handler)
    app.router.add_route("*", "/error", _error_handler)
    app.router.add_post("/delay", _delay_handler)
    app.router.add_get("/health", _health_handler)
    return app


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
async def echo_server() -> AsyncIterator[str]:
    """Stub server on the test's own event loop.

    Returns the base URL (e.g., 'http://127.0.0.1:54321').
    """
    port = get_free_port()
    app = _create_stub_app(StubServer(url=f"http://127.0.0.1:{port}"))
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    yield f"http://127.0.0.1:{port}"
    await runner.cleanup()


@pytest.fixture
def stub_server() -> Iterator[StubServer]:
    """Stub server running in a background thread for blocking tests.

    The dispatcher blocks the calling thread and runs its own event loops,
    so the server needs a loop of its own.
    """
    port = get_free_port()
    server = StubServer(url=f"http://127.0.0.1:{port}")
    started = threading.Event()
    loop_holder: list[asyncio.AbstractEventLoop] = []

    def _thread_target() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        runner = web.AppRunner(_create_stub_app(server))
        loop.run_until_complete(runner.setup())
        site = web.TCPSite(runner, "127.0.0.1", port)
        loop.run_until_complete(site.start())
        loop_holder.append(loop)
        started.set()
        loop.run_forever()
        loop.run_until_complete(runner.cleanup())
        loop.close()

    thread = threading.Thread(target=_thread_target, daemon=True)
    thread.start()
    started.wait(timeout=5.0)

    yield server

    if loop_holder:
        loop_holder[0].call_soon_threadsafe(loop_holder[0].stop)
    thread.join(timeout=5.0)


@pytest.fixture
async def truncating_server() -> AsyncIterator[str]:
    """Raw TCP server that promises 100 body bytes, sends 7, then hangs up."""

    async def _handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        head = await reader.readuntil(b"\r\n\r\n")
        for line in head.decode("latin-1").split("\r\n"):
            name, _, value = line.partition(":")
            if name.strip().lower() == "content-length":
                await reader.readexactly(int(value))
        writer.write(
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 100\r\n"
            b"\r\n"
            b"partial"
        )
        await writer.drain()
        writer.close()

    server = await asyncio.start_server(_handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    yield f"http://127.0.0.1:{port}/"
    server.close()
    await server.wait_closed()


@pytest.fixture
def closed_port_url() -> str:
    """URL of a localhost port with nothing listening."""
    return f"http://127.0.0.1:{get_free_port()}/"
