"""Random JSON payload generation."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Any

from postburst.payload.records import LogRecord, now_rfc3339, random_string

if TYPE_CHECKING:
    from postburst._internal.config import GeneratorConfig
    from postburst._internal.types import JSONValue

# Base names for the synthetic fields; the field index is appended.
FIELD_NAMES = (
    "user_id",
    "session_id",
    "action",
    "resource",
    "category",
    "priority",
    "level",
    "source",
    "target",
    "metadata",
)

# timestamp, request_id and message
RESERVED_FIELDS = 3

REQUEST_ID_LENGTH = 16


class PayloadGenerator:
    """Builds fresh JSON-serializable payloads from a ``GeneratorConfig``.

    Every draw goes through the injected ``random.Random``. An instance is
    meant to be used by one thread at a time; ``GeneratedPayload`` keeps
    one generator per worker thread.

    Example::

        gen = PayloadGenerator(GeneratorConfig(field_count=8), random.Random(1))
        record = gen.generate()
        assert len(record) == 8
    """

    def __init__(
        self,
        config: GeneratorConfig,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self._rng = rng if rng is not None else random.Random()  # noqa: S311

    def generate(self) -> JSONValue:
        """Return one record, or a list of records when ``records_per_request > 1``."""
        if self.config.records_per_request == 1:
            return self.generate_record()
        return [self.generate_record() for _ in range(self.config.records_per_request)]

    def generate_record(self) -> dict[str, Any]:
        """Return a single top-level record.

        The record holds ``message`` (a serialized ``LogRecord``),
        ``timestamp``, ``request_id`` and ``field_count - 3`` synthetic
        fields of random type.
        """
        rng = self._rng
        log = LogRecord.draw(rng, enable_body=self.config.enable_body)
        data: dict[str, Any] = {
            "message": log.to_json(),
            "timestamp": now_rfc3339(),
            "request_id": random_string(rng, REQUEST_ID_LENGTH),
        }

        for i in range(self.config.field_count - RESERVED_FIELDS):
            name = f"{FIELD_NAMES[i % len(FIELD_NAMES)]}{i}"
            data[name] = self._random_value()

        return data

    def _random_value(self) -> str | int | bool:
        rng = self._rng
        kind = rng.randrange(3)
        if kind == 0:
            return random_string(rng, rng.randint(5, 24))
        if kind == 1:
            return rng.randrange(10_000)
        return rng.random() < 0.5
