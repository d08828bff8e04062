"""Payload generation for postburst.

Payloads are either a fixed JSON value sent with every request or freshly
synthesized records wrapping nginx-style access logs. Both variants
implement :class:`PayloadSource` and are called once per request by the
dispatcher's worker threads.
"""

from __future__ import annotations

from postburst.payload.generator import PayloadGenerator
from postburst.payload.records import LogRecord
from postburst.payload.source import (
    ConstantPayload,
    GeneratedPayload,
    PayloadSource,
    build_payload_source,
)

__all__ = [
    "ConstantPayload",
    "GeneratedPayload",
    "LogRecord",
    "PayloadGenerator",
    "PayloadSource",
    "build_payload_source",
]
