"""postburst: concurrent JSON POST load generator."""

from __future__ import annotations

from postburst._internal.config import ClientConfig, GeneratorConfig
from postburst._internal.errors import (
    ConfigError,
    DispatchError,
    EncodingError,
    NetworkError,
    PostBurstError,
    RequestError,
    ResponseReadError,
)
from postburst.client.executor import RequestExecutor, execute
from postburst.engine.dispatcher import Dispatcher
from postburst.metrics.models import RequestOutcome, Summary, WorkItem
from postburst.payload import (
    ConstantPayload,
    GeneratedPayload,
    LogRecord,
    PayloadGenerator,
    PayloadSource,
    build_payload_source,
)
from postburst.report.summary import format_summary

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "ConfigError",
    "ConstantPayload",
    "DispatchError",
    "Dispatcher",
    "EncodingError",
    "GeneratedPayload",
    "GeneratorConfig",
    "LogRecord",
    "NetworkError",
    "PayloadGenerator",
    "PayloadSource",
    "PostBurstError",
    "RequestError",
    "RequestExecutor",
    "RequestOutcome",
    "ResponseReadError",
    "Summary",
    "WorkItem",
    "build_payload_source",
    "execute",
    "format_summary",
]
