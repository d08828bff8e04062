"""End-to-end tests for the postburst CLI."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from postburst import __version__
from postburst.cli.app import app

runner = CliRunner()


# ---------------------------------------------------------------------------
# Tests: version and help
# ---------------------------------------------------------------------------


def test_version_flag():
    """--version prints version and exits 0."""
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_version_short_flag():
    """-V also prints version."""
    result = runner.invoke(app, ["-V"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_output():
    """--help shows usage information."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "postburst" in result.output.lower()


def test_run_help():
    """postburst run --help lists the request options."""
    result = runner.invoke(app, ["run", "--help"])
    assert result.exit_code == 0
    assert "threads" in result.output
    assert "times" in result.output


# ---------------------------------------------------------------------------
# Tests: postburst run
# ---------------------------------------------------------------------------


@pytest.mark.timeout(60)
def test_run_fixed_data(stub_server):
    """Three fixed-data requests print three status lines and a clean summary."""
    result = runner.invoke(
        app,
        [
            "run",
            "-url",
            f"{stub_server.url}/ok",
            "-times",
            "3",
            "-threads",
            "1",
            "-data",
            '{"test":"data"}',
        ],
    )
    assert result.exit_code == 0, result.output
    assert result.output.count("Status: 200") == 3
    assert result.output.count("Response Body: ok") == 3
    for index in (1, 2, 3):
        assert f"[Request {index}/3]" in result.output
    assert "Successful: 3" in result.output
    assert "Failed: 0" in result.output


@pytest.mark.timeout(60)
def test_run_double_dash_flags(stub_server):
    """Double-dash spellings are accepted too."""
    result = runner.invoke(
        app,
        ["run", "--url", f"{stub_server.url}/collect", "--times", "2", "--threads", "2"],
    )
    assert result.exit_code == 0, result.output
    assert len(stub_server.receipts) == 2


@pytest.mark.timeout(60)
def test_run_auto_generated_records(stub_server):
    """Auto-generation sends an array when -records > 1."""
    result = runner.invoke(
        app,
        [
            "run",
            "-url",
            f"{stub_server.url}/collect",
            "-times",
            "4",
            "-threads",
            "2",
            "-records",
            "2",
            "-fields",
            "6",
        ],
    )
    assert result.exit_code == 0, result.output
    assert len(stub_server.receipts) == 4
    for receipt in stub_server.receipts:
        assert isinstance(receipt, list)
        assert len(receipt) == 2
        assert all(len(record) == 6 for record in receipt)
    assert "Successful: 4" in result.output


@pytest.mark.timeout(60)
def test_run_preview(stub_server):
    """--preview prints a sample payload before dispatching."""
    result = runner.invoke(
        app,
        ["run", "-url", f"{stub_server.url}/ok", "--preview"],
    )
    assert result.exit_code == 0, result.output
    assert "Sample payload" in result.output
    assert "request_id" in result.output


@pytest.mark.timeout(60)
def test_run_custom_header(stub_server):
    """-header values reach the server."""
    result = runner.invoke(
        app,
        [
            "run",
            "-url",
            f"{stub_server.url}/echo",
            "-data",
            "{}",
            "-header",
            "X-Test: yes",
        ],
    )
    assert result.exit_code == 0, result.output
    assert '"X-Test": "yes"' in result.output


@pytest.mark.timeout(60)
def test_run_failures_still_exit_zero(closed_port_url: str):
    """Request failures are reported in the summary, not the exit code."""
    result = runner.invoke(
        app,
        ["run", "-url", closed_port_url, "-times", "2", "-data", "{}"],
    )
    assert result.exit_code == 0, result.output
    assert "NetworkError" in result.output
    assert "Failed: 2" in result.output


@pytest.mark.timeout(60)
def test_run_many_threads_warns(stub_server):
    """More than 100 threads prints a warning but still runs."""
    result = runner.invoke(
        app,
        ["run", "-url", f"{stub_server.url}/ok", "-threads", "101", "-data", "{}"],
    )
    assert result.exit_code == 0, result.output
    assert result.output.count("may cause performance issues") == 1
    assert "Successful: 1" in result.output


@pytest.mark.timeout(60)
def test_run_prints_body_verbatim(stub_server):
    """Emoji shortcodes in a response body are printed as received."""
    result = runner.invoke(
        app,
        ["run", "-url", f"{stub_server.url}/echo", "-data", '{"note": ":fire: :+1:"}'],
    )
    assert result.exit_code == 0, result.output
    assert ":fire: :+1:" in result.output
    assert "\U0001f525" not in result.output


# ---------------------------------------------------------------------------
# Tests: configuration errors
# ---------------------------------------------------------------------------


def test_run_zero_threads(stub_server):
    """-threads 0 exits 1 before any request is sent."""
    result = runner.invoke(
        app,
        ["run", "-url", f"{stub_server.url}/collect", "-threads", "0"],
    )
    assert result.exit_code == 1
    assert "threads must be at least 1" in result.output
    assert stub_server.receipts == []


def test_run_invalid_data(stub_server):
    """Malformed -data exits 1 before any request is sent."""
    result = runner.invoke(
        app,
        ["run", "-url", f"{stub_server.url}/collect", "-data", "{not json"],
    )
    assert result.exit_code == 1
    assert "Invalid JSON data" in result.output
    assert stub_server.receipts == []


@pytest.mark.parametrize("data", ['{"v": NaN}', "Infinity", "[-Infinity]"])
def test_run_non_finite_data(stub_server, data: str):
    """NaN and Infinity are not JSON: exit 1 before any request is sent."""
    result = runner.invoke(
        app,
        ["run", "-url", f"{stub_server.url}/collect", "-times", "2", "-data", data],
    )
    assert result.exit_code == 1
    assert "Invalid JSON data" in result.output
    assert stub_server.receipts == []


def test_run_header_with_newline(stub_server):
    """A header carrying a line break is a config error, not a dead worker."""
    result = runner.invoke(
        app,
        ["run", "-url", f"{stub_server.url}/collect", "-times", "2", "-header", "X-A: a\nb"],
    )
    assert result.exit_code == 1
    assert "control characters" in result.output
    assert stub_server.receipts == []


def test_run_empty_url():
    result = runner.invoke(app, ["run", "-url", ""])
    assert result.exit_code == 1
    assert "URL is required" in result.output


def test_run_malformed_header():
    result = runner.invoke(app, ["run", "-header", "no-colon-here"])
    assert result.exit_code == 1
    assert "key:value" in result.output


def test_run_invalid_records():
    result = runner.invoke(app, ["run", "-records", "0"])
    assert result.exit_code == 1
    assert "records must be >= 1" in result.output


# ---------------------------------------------------------------------------
# Tests: postburst preview
# ---------------------------------------------------------------------------


def test_preview_prints_json():
    result = runner.invoke(app, ["preview", "-fields", "7", "--seed", "3"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert len(payload) == 7
    assert {"timestamp", "request_id", "message"} <= set(payload)


def test_preview_seed_is_repeatable():
    first = json.loads(runner.invoke(app, ["preview", "--seed", "9"]).output)
    second = json.loads(runner.invoke(app, ["preview", "--seed", "9"]).output)
    assert first["request_id"] == second["request_id"]


def test_preview_records_and_body():
    result = runner.invoke(app, ["preview", "-records", "3", "-body", "--seed", "1"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert isinstance(payload, list)
    assert len(payload) == 3
    assert all("body" in json.loads(record["message"]) for record in payload)


def test_preview_rejects_negative_fields():
    result = runner.invoke(app, ["preview", "-fields", "-1"])
    assert result.exit_code == 1
