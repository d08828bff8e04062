"""Structured logging setup for postburst."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime


class _JsonFormatter(logging.Formatter):
    """Structured JSON log formatter.

    Emits one-line JSON objects with keys: timestamp, level, logger, thread,
    message.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON string.

        Args:
            record: The log record to format.

        Returns:
            A single-line JSON string.
        """
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


class _StderrHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Stream handler that always writes to the current ``sys.stderr``.

    The CLI may run several times in one process with stderr swapped in
    between, so the stream is looked up on every emit.
    """

    @property  # type: ignore[override]
    def stream(self) -> object:
        return sys.stderr

    @stream.setter
    def stream(self, value: object) -> None:
        pass


def _build_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return _JsonFormatter()
    return logging.Formatter(
        "%(asctime)s [%(levelname)-8s] %(name)s (%(threadName)s): %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(
    level: int = logging.WARNING,
    *,
    json_format: bool = False,
) -> logging.Logger:
    """Configure and return the root postburst logger.

    Installs one stderr handler on the ``postburst`` namespace, so log
    output never mixes with the request lines printed on stdout. Calling
    it again reuses that handler and applies the new level and format.

    Args:
        level: Logging level (e.g., ``logging.DEBUG``). Defaults to WARNING.
        json_format: If True, emit structured JSON logs. If False, emit
            human-readable logs.

    Returns:
        The configured ``postburst`` root logger.
    """
    logger = logging.getLogger("postburst")
    logger.setLevel(level)
    logger.propagate = False

    if not logger.handlers:
        logger.addHandler(_StderrHandler())

    formatter = _build_formatter(json_format)
    for handler in logger.handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the ``postburst`` namespace.

    Args:
        name: Logger name, appended to ``postburst.`` prefix.
            Example: ``get_logger("engine.dispatcher")`` returns
            ``logging.getLogger("postburst.engine.dispatcher")``.

    Returns:
        A configured child logger.
    """
    return logging.getLogger(f"postburst.{name}")
