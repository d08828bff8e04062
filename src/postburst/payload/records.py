"""Nginx-style access log records and the random draws behind them."""

from __future__ import annotations

import base64
import json
import string
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import random

ALPHANUMERIC = string.ascii_letters + string.digits

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")
STATUS_CODES = (200, 201, 400, 401, 403, 404, 500)

PATHS = (
    "/api/users",
    "/api/posts",
    "/api/comments",
    "/api/products",
    "/api/orders",
    "/api/categories",
    "/api/search",
    "/api/analytics",
    "/api/reports",
    "/api/settings",
    "/api/profile",
    "/api/dashboard",
    "/api/notifications",
    "/api/messages",
    "/api/files",
    "/api/upload",
)

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 14_7_1 like Mac OS X) AppleWebKit/605.1.15",
    "Mozilla/5.0 (Android 11; Mobile; rv:68.0) Gecko/68.0 Firefox/68.0",
)

REFERERS = (
    "https://www.google.com",
    "https://www.facebook.com",
    "https://www.twitter.com",
    "https://www.linkedin.com",
    "https://www.github.com",
    "https://www.stackoverflow.com",
    "https://www.reddit.com",
    "https://www.youtube.com",
    "https://www.amazon.com",
)

# Body size bounds in KB, inclusive.
MIN_BODY_KB = 1
MAX_BODY_KB = 199

BYTES_RANGE = (100, 10_100)
REQUEST_TIME_RANGE = (0.1, 2.1)


def now_rfc3339() -> str:
    """Current local time in RFC 3339 form with a numeric UTC offset."""
    return datetime.now().astimezone().isoformat(timespec="seconds")


def random_string(rng: random.Random, length: int) -> str:
    """Return *length* random ASCII letters and digits."""
    return "".join(rng.choices(ALPHANUMERIC, k=length))


def random_ip(rng: random.Random) -> str:
    """Return a random dotted-quad IPv4 address."""
    return ".".join(str(rng.randrange(256)) for _ in range(4))


def random_body(rng: random.Random) -> str:
    """Return base64 of 1KB to 199KB of random bytes, in whole KB steps."""
    size_kb = rng.randint(MIN_BODY_KB, MAX_BODY_KB)
    return base64.b64encode(rng.randbytes(size_kb * 1024)).decode("ascii")


@dataclass
class LogRecord:
    """A single access log entry as nginx would write it.

    Attributes:
        timestamp: RFC 3339 time the record was generated.
        ip: Client address.
        method: HTTP method, one of ``HTTP_METHODS``.
        path: Request path, one of ``PATHS``.
        status: Response status, one of ``STATUS_CODES``.
        bytes: Response size, in ``BYTES_RANGE``.
        user_agent: Client user agent.
        referer: Referring site.
        request_time: Request time in seconds, in ``REQUEST_TIME_RANGE``.
        remote_addr: Upstream peer address.
        server_name: Virtual server name.
        body: Base64 request body, present only when body generation is on.
    """

    timestamp: str
    ip: str
    method: str
    path: str
    status: int
    bytes: int
    user_agent: str
    referer: str
    request_time: float
    remote_addr: str
    server_name: str
    body: str | None = None

    @classmethod
    def draw(cls, rng: random.Random, *, enable_body: bool = False) -> LogRecord:
        """Draw a fresh record from *rng*."""
        low_t, high_t = REQUEST_TIME_RANGE
        return cls(
            timestamp=now_rfc3339(),
            ip=random_ip(rng),
            method=rng.choice(HTTP_METHODS),
            path=rng.choice(PATHS),
            status=rng.choice(STATUS_CODES),
            bytes=rng.randrange(*BYTES_RANGE),
            user_agent=rng.choice(USER_AGENTS),
            referer=rng.choice(REFERERS),
            request_time=low_t + rng.random() * (high_t - low_t),
            remote_addr=random_ip(rng),
            server_name=f"nginx-server-{random_string(rng, 4)}",
            body=random_body(rng) if enable_body else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the record as a dict, omitting ``body`` when absent."""
        data = asdict(self)
        if data["body"] is None:
            del data["body"]
        return data

    def to_json(self) -> str:
        """Serialize to compact JSON text."""
        return json.dumps(self.to_dict(), separators=(",", ":"))
