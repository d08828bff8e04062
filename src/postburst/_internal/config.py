"""Configuration objects and input parsing for postburst."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from postburst._internal.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from postburst._internal.types import Headers, JSONValue

DEFAULT_URL = "http://localhost:5080"
DEFAULT_USERNAME = "root@example.com"
DEFAULT_PASSWORD = "Complexpass#123"
DEFAULT_TIMEOUT = 30.0

_LOG_FORMATS = ("text", "json")

# CR, LF and NUL would split or truncate the header block on the wire.
_FORBIDDEN_HEADER_CHARS = frozenset("\r\n\x00")


def _check_header(name: str, value: str) -> None:
    if not name:
        msg = "header name must not be empty"
        raise ConfigError(msg)
    if _FORBIDDEN_HEADER_CHARS.intersection(name + value):
        msg = f"header must not contain control characters, got: {name!r}: {value!r}"
        raise ConfigError(msg)


@dataclass(frozen=True)
class ClientConfig:
    """Immutable per-run settings for the request executor.

    Shared read-only by every worker thread; never mutated after
    construction.

    Attributes:
        url: Target endpoint that receives every POST.
        username: Basic-auth username. Empty disables auth together with
            an empty password.
        password: Basic-auth password.
        headers: Extra headers overlaid on the JSON defaults.
        timeout: Per-request timeout in seconds.
    """

    url: str = DEFAULT_URL
    username: str = DEFAULT_USERNAME
    password: str = DEFAULT_PASSWORD
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.url:
            msg = "URL is required"
            raise ConfigError(msg)
        if ":" in self.username:
            msg = f"username must not contain ':', got: {self.username!r}"
            raise ConfigError(msg)
        if self.timeout <= 0:
            msg = f"timeout must be positive, got: {self.timeout}"
            raise ConfigError(msg)
        for name, value in self.headers.items():
            _check_header(name, value)
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def uses_auth(self) -> bool:
        """Return True when a basic-auth header should be sent."""
        return bool(self.username or self.password)


@dataclass(frozen=True)
class GeneratorConfig:
    """Immutable settings for payload generation.

    Attributes:
        field_count: Number of top-level fields per generated record,
            counting ``timestamp``, ``request_id`` and ``message``.
        records_per_request: 1 yields a single object, more yields a list.
        enable_body: Attach a random base64 ``body`` to each log record.
    """

    field_count: int = 5
    records_per_request: int = 1
    enable_body: bool = False

    def __post_init__(self) -> None:
        if self.field_count < 0:
            msg = f"fields must be >= 0, got: {self.field_count}"
            raise ConfigError(msg)
        if self.records_per_request < 1:
            msg = f"records must be >= 1, got: {self.records_per_request}"
            raise ConfigError(msg)


@dataclass(frozen=True)
class RuntimeSettings:
    """Process-level settings read from the environment.

    Attributes:
        request_timeout: Per-request timeout in seconds.
        log_format: ``"text"`` or ``"json"``.
    """

    request_timeout: float = DEFAULT_TIMEOUT
    log_format: str = "text"


def load_settings() -> RuntimeSettings:
    """Load runtime settings from environment variables with defaults.

    Environment variables:
        POSTBURST_TIMEOUT: Request timeout in seconds (default: 30.0).
        POSTBURST_LOG_FORMAT: ``text`` or ``json`` (default: text).

    Returns:
        Populated RuntimeSettings instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    timeout_str = os.environ.get("POSTBURST_TIMEOUT", str(DEFAULT_TIMEOUT))
    log_format = os.environ.get("POSTBURST_LOG_FORMAT", "text").lower()

    try:
        timeout = float(timeout_str)
    except ValueError:
        msg = f"POSTBURST_TIMEOUT must be a number, got: {timeout_str!r}"
        raise ConfigError(msg) from None

    if timeout <= 0:
        msg = f"POSTBURST_TIMEOUT must be positive, got: {timeout}"
        raise ConfigError(msg)

    if log_format not in _LOG_FORMATS:
        msg = f"POSTBURST_LOG_FORMAT must be one of {', '.join(_LOG_FORMATS)}, got: {log_format!r}"
        raise ConfigError(msg)

    return RuntimeSettings(request_timeout=timeout, log_format=log_format)


def parse_header(raw: str) -> tuple[str, str]:
    """Split a ``key:value`` header argument.

    Whitespace around the key and the value is stripped. Only the first
    colon separates, so values may contain colons.

    Args:
        raw: Header text as given on the command line.

    Returns:
        ``(name, value)`` tuple.

    Raises:
        ConfigError: If there is no colon, the name is empty or either
            part holds a CR, LF or NUL character.
    """
    name, sep, value = raw.partition(":")
    name = name.strip()
    if not sep or not name:
        msg = f"header must be in 'key:value' format, got: {raw!r}"
        raise ConfigError(msg)
    value = value.strip()
    _check_header(name, value)
    return name, value


def parse_headers(raws: Iterable[str]) -> Headers:
    """Parse several ``key:value`` arguments; later names override earlier ones."""
    headers: Headers = {}
    for raw in raws:
        name, value = parse_header(raw)
        headers[name] = value
    return headers


def _reject_constant(name: str) -> float:
    msg = f"Invalid JSON data: {name} is not a valid JSON number"
    raise ConfigError(msg)


def parse_json_data(raw: str) -> JSONValue:
    """Decode the fixed ``-data`` payload.

    ``NaN``, ``Infinity`` and ``-Infinity`` are rejected: Python's decoder
    accepts them but they cannot be sent as JSON.

    Raises:
        ConfigError: If *raw* is not valid JSON.
    """
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON data: {exc}"
        raise ConfigError(msg) from exc
