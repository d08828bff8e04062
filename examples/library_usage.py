"""Drive postburst from Python instead of the CLI.

Sends 20 generated access-log batches with 4 worker threads and prints the
summary. Start ``examples/stub_server.py`` first, then:

    python examples/library_usage.py
"""

from __future__ import annotations

from postburst import (
    ClientConfig,
    Dispatcher,
    GeneratedPayload,
    GeneratorConfig,
    format_summary,
)


def main() -> None:
    """Run a small dispatch against the local stub server."""
    config = ClientConfig(url="http://127.0.0.1:5080/ingest", headers={"X-Source": "example"})
    source = GeneratedPayload(GeneratorConfig(field_count=8, records_per_request=5))
    summary = Dispatcher(config, source).run(times=20, threads=4)
    print(format_summary(summary))  # noqa: T201


if __name__ == "__main__":
    main()
