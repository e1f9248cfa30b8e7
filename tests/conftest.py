"""Shared test fixtures for ahrefs-cli.

Provides fixtures for isolated config environments, output state, a mock
API transport and a CLI runner.  These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from ahrefs_cli.client import AhrefsClient
from ahrefs_cli.models import ClientSettings
from ahrefs_cli.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager's Rich console caches sys.stderr at creation time.
    When Typer's CliRunner redirects the streams and the test finishes,
    the cached reference becomes stale.  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config, clears the AHREFS_*
    environment variables and disables colour so diagnostics are plain.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("ahrefs_cli.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("NO_COLOR", "1")
    for var in ["AHREFS_API_KEY", "AHREFS_BASE_URL"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Mock API
# ---------------------------------------------------------------------------


Handler = Callable[[httpx.Request], httpx.Response]


def json_response(data: Any, status_code: int = 200, headers: dict[str, str] | None = None) -> httpx.Response:
    """Build an httpx.Response with a JSON body."""
    return httpx.Response(
        status_code=status_code,
        content=json.dumps(data).encode("utf-8"),
        headers={"content-type": "application/json", **(headers or {})},
    )


class MockAPI:
    """Records requests and answers them with a configurable handler."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Handler = lambda request: json_response({})

    def respond_with(self, handler: Handler) -> None:
        self.handler = handler

    def respond_json(self, data: Any, status_code: int = 200, headers: dict[str, str] | None = None) -> None:
        self.handler = lambda request: json_response(data, status_code, headers)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def mock_api(monkeypatch: pytest.MonkeyPatch) -> MockAPI:
    """Route every client built by the CLI through an in-memory transport.

    Retries run without backoff so retry tests stay fast.
    """
    api = MockAPI()

    def _create_client(settings: ClientSettings) -> AhrefsClient:
        settings = settings.model_copy(update={"retry_backoff": 0})
        return AhrefsClient(settings, transport=httpx.MockTransport(api))

    monkeypatch.setattr("ahrefs_cli.commands.runner.create_client", _create_client)
    return api


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout and stderr
    separately.
    """
    from typer.testing import CliRunner

    return CliRunner()
