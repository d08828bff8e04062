"""Single-request executor: JSON POST with basic auth and auto-timing."""

from __future__ import annotations

import asyncio
import json
import time
from typing import TYPE_CHECKING

import aiohttp
from multidict import CIMultiDict

from postburst._internal.errors import EncodingError, NetworkError, ResponseReadError
from postburst._internal.logging import get_logger
from postburst.metrics.models import RequestOutcome

if TYPE_CHECKING:
    from postburst._internal.config import ClientConfig
    from postburst._internal.types import JSONValue

logger = get_logger("client.executor")

JSON_CONTENT_TYPE = "application/json"


def build_headers(config: ClientConfig) -> CIMultiDict[str]:
    """Return the headers sent with every request for *config*.

    Order of application: basic auth (when a username or password is set),
    then the JSON ``Content-Type`` and ``Accept`` defaults, then the custom
    headers. Names compare case-insensitively, so a custom header replaces
    any default of the same name.

    Args:
        config: Client configuration.

    Returns:
        Case-insensitive header mapping.
    """
    headers: CIMultiDict[str] = CIMultiDict()
    if config.uses_auth:
        auth = aiohttp.BasicAuth(config.username, config.password, encoding="utf-8")
        headers[aiohttp.hdrs.AUTHORIZATION] = auth.encode()
    headers[aiohttp.hdrs.CONTENT_TYPE] = JSON_CONTENT_TYPE
    headers[aiohttp.hdrs.ACCEPT] = JSON_CONTENT_TYPE
    for name, value in config.headers.items():
        headers[name] = value
    return headers


class RequestExecutor:
    """Async POST executor wrapping one ``aiohttp.ClientSession``.

    Each dispatcher worker owns exactly one executor, so connections are
    never shared across workers. Every call to :meth:`execute` is timed
    and never raises for per-request failures: they come back inside the
    ``RequestOutcome``.

    Attributes:
        config: Immutable client configuration shared by all workers.
    """

    def __init__(self, config: ClientConfig) -> None:
        self.config = config
        self._headers = build_headers(config)
        self._timeout = aiohttp.ClientTimeout(total=config.timeout)
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> RequestExecutor:
        """Open the underlying aiohttp session."""
        self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Close the underlying aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def execute(self, payload: JSONValue) -> RequestOutcome:
        """POST *payload* as JSON and time the full round trip.

        Args:
            payload: Any JSON-serializable value.

        Returns:
            The outcome. ``error`` is an ``EncodingError``, ``NetworkError``
            or ``ResponseReadError`` on failure, else None.

        Raises:
            RuntimeError: If the executor is used outside of an async
                context manager.
        """
        if self._session is None:
            msg = "RequestExecutor must be used as an async context manager"
            raise RuntimeError(msg)

        start = time.monotonic()

        try:
            body = json.dumps(payload, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError, RecursionError) as exc:
            return _failed(start, EncodingError(f"failed to marshal JSON: {exc}"))

        try:
            resp = await self._session.post(
                self.config.url,
                data=body,
                headers=self._headers,
            )
        except (aiohttp.ClientError, TimeoutError) as exc:
            return _failed(start, NetworkError(f"failed to send request: {_describe(exc)}"))

        async with resp:
            try:
                raw = await resp.read()
            except (aiohttp.ClientError, TimeoutError) as exc:
                return _failed(
                    start,
                    ResponseReadError(f"failed to read response body: {_describe(exc)}"),
                    status_code=resp.status,
                )

        return RequestOutcome(
            status_code=resp.status,
            body=raw.decode("utf-8", errors="replace"),
            duration=time.monotonic() - start,
        )


def execute(config: ClientConfig, payload: JSONValue) -> RequestOutcome:
    """Send one POST synchronously with a throwaway executor.

    Convenience for scripts and one-off checks; the dispatcher keeps one
    long-lived ``RequestExecutor`` per worker instead.
    """

    async def _once() -> RequestOutcome:
        async with RequestExecutor(config) as executor:
            return await executor.execute(payload)

    return asyncio.run(_once())


def _failed(
    start: float,
    error: EncodingError | NetworkError | ResponseReadError,
    *,
    status_code: int | None = None,
) -> RequestOutcome:
    logger.debug("Request failed: %s: %s", error.kind, error)
    return RequestOutcome(
        status_code=status_code,
        body="",
        duration=time.monotonic() - start,
        error=error,
    )


def _describe(exc: BaseException) -> str:
    """Render an exception as ``Type: message``, or just ``Type`` when empty."""
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__
