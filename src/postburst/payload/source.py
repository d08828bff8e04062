"""Payload sources: the producer each worker calls once per request."""

from __future__ import annotations

import copy
import random
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from postburst._internal.config import parse_json_data
from postburst.payload.generator import PayloadGenerator

if TYPE_CHECKING:
    from collections.abc import Callable

    from postburst._internal.config import GeneratorConfig
    from postburst._internal.types import JSONValue


class PayloadSource(ABC):
    """Callable that yields the payload for the next request.

    Implementations must be safe to call from many worker threads at once
    without external locking.
    """

    @abstractmethod
    def __call__(self) -> JSONValue:
        """Return the payload for one request."""

    @abstractmethod
    def describe(self) -> str:
        """Return a short human-readable description for logs."""


class ConstantPayload(PayloadSource):
    """Send the same fixed payload with every request.

    The value is deep-copied once at construction so that later changes by
    the caller cannot leak into a running dispatch.
    """

    def __init__(self, data: JSONValue) -> None:
        self._data = copy.deepcopy(data)

    def __call__(self) -> JSONValue:
        return self._data

    def describe(self) -> str:
        return "fixed data"


class GeneratedPayload(PayloadSource):
    """Synthesize a fresh payload for every request.

    Each calling thread lazily gets its own ``PayloadGenerator`` with its
    own random instance from *rng_factory*, so no random state is shared
    between workers.

    Args:
        config: Generation settings shared read-only by all threads.
        rng_factory: Zero-argument callable returning a new
            ``random.Random``. Defaults to OS-seeded instances.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        rng_factory: Callable[[], random.Random] = random.Random,
    ) -> None:
        self.config = config
        self._rng_factory = rng_factory
        self._local = threading.local()

    def __call__(self) -> JSONValue:
        return self._generator().generate()

    def describe(self) -> str:
        cfg = self.config
        shape = "object" if cfg.records_per_request == 1 else f"{cfg.records_per_request} records"
        body = ", with body" if cfg.enable_body else ""
        return f"auto-generated ({shape}, {cfg.field_count} fields{body})"

    def _generator(self) -> PayloadGenerator:
        generator: PayloadGenerator | None = getattr(self._local, "generator", None)
        if generator is None:
            generator = PayloadGenerator(self.config, self._rng_factory())
            self._local.generator = generator
        return generator


def build_payload_source(raw_data: str, config: GeneratorConfig) -> PayloadSource:
    """Pick the payload source for a run.

    Args:
        raw_data: The ``-data`` argument. Empty selects auto-generation.
        config: Generation settings, used only in auto-generation mode.

    Returns:
        A ``ConstantPayload`` for non-empty *raw_data*, else a
        ``GeneratedPayload``.

    Raises:
        ConfigError: If *raw_data* is non-empty and not valid JSON.
    """
    if raw_data:
        return ConstantPayload(parse_json_data(raw_data))
    return GeneratedPayload(config)
