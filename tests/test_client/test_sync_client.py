"""Tests for the synchronous HTTP client."""

from __future__ import annotations

import json
import threading

import httpx
import pytest

from ahrefs_cli.client.sync_client import AhrefsClient, build_url
from ahrefs_cli.exceptions import (
    APIError,
    ConfigError,
    ConnectionError_,
    RequestCancelledError,
    RequestFailedError,
)
from ahrefs_cli.exit_codes import EXIT_AUTH_FAILURE, EXIT_CONNECTION_ERROR, EXIT_RATE_LIMITED
from ahrefs_cli.models import ClientSettings, HTTPMethod, Request
from ahrefs_cli.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _settings(**overrides) -> ClientSettings:
    values = {
        "api_key": "test-key",
        "base_url": "https://api.example.com/v3",
        "max_retries": 3,
        "retry_backoff": 0,
    }
    values.update(overrides)
    return ClientSettings(**values)


def _json(data, status_code: int = 200, headers=None) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        content=json.dumps(data).encode(),
        headers={"content-type": "application/json", **(headers or {})},
    )


class _Recorder:
    """Transport handler returning queued responses in order."""

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return httpx.Response(item.status_code, content=item.content, headers=item.headers)


class _RecordingEvent(threading.Event):
    """Event that records backoff delays instead of waiting."""

    def __init__(self) -> None:
        super().__init__()
        self.delays: list[float] = []

    def wait(self, timeout=None) -> bool:
        self.delays.append(timeout)
        return False


def _client(handler, **overrides) -> AhrefsClient:
    return AhrefsClient(_settings(**overrides), transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def _clean_output():
    """Reset the global output manager between tests."""
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# URL building
# ---------------------------------------------------------------------------


class TestBuildURL:
    def test_sorted_query(self) -> None:
        request = Request.build("GET", "/site-explorer/backlinks", {"target": "example.com", "limit": 10, "mode": "domain"})
        assert build_url("https://api.ahrefs.com/v3", request) == (
            "https://api.ahrefs.com/v3/site-explorer/backlinks?limit=10&mode=domain&target=example.com"
        )

    def test_no_params_no_question_mark(self) -> None:
        request = Request.build("GET", "/subscription-info/limits-and-usage")
        assert build_url("https://api.ahrefs.com/v3/", request) == (
            "https://api.ahrefs.com/v3/subscription-info/limits-and-usage"
        )

    def test_values_are_encoded(self) -> None:
        request = Request.build("GET", "/x", {"where": "domain_rating>50"})
        assert build_url("https://h", request) == "https://h/x?where=domain_rating%3E50"


# ---------------------------------------------------------------------------
# Construction and context manager
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_empty_api_key_rejected(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            AhrefsClient(_settings(api_key=""))
        assert exc_info.value.message == "API key is required"
        assert "config set-key" in exc_info.value.suggestion

    def test_context_manager_opens_and_closes(self) -> None:
        client = _client(_Recorder(_json({})))
        assert client._client is None
        with client:
            assert client._client is not None
        assert client._client is None

    def test_execute_outside_context_manager(self) -> None:
        client = _client(_Recorder(_json({})))
        with pytest.raises(RuntimeError):
            client.get("/x")


# ---------------------------------------------------------------------------
# Successful requests
# ---------------------------------------------------------------------------


class TestSuccess:
    def test_headers_sent(self) -> None:
        recorder = _Recorder(_json({"ok": True}))
        with _client(recorder) as client:
            client.get("/site-explorer/domain-rating", {"target": "example.com"})

        sent = recorder.requests[0]
        assert sent.headers["Authorization"] == "Bearer test-key"
        assert sent.headers["Accept"] == "application/json"
        assert sent.headers["User-Agent"].startswith("ahrefs-cli/")
        assert sent.method == "GET"
        assert str(sent.url) == "https://api.example.com/v3/site-explorer/domain-rating?target=example.com"

    def test_post_method(self) -> None:
        recorder = _Recorder(_json({}))
        with _client(recorder) as client:
            client.post("/x")
        assert recorder.requests[0].method == "POST"

    def test_response_body_and_meta(self) -> None:
        recorder = _Recorder(
            _json(
                {"domain_rating": {"domain_rating": 91}},
                headers={"X-API-Units-Consumed": "5", "X-RateLimit-Remaining": "995"},
            )
        )
        with _client(recorder) as client:
            response = client.get("/site-explorer/domain-rating")

        assert response.status_code == 200
        assert json.loads(response.body) == {"domain_rating": {"domain_rating": 91}}
        assert response.meta.units_consumed == 5
        assert response.meta.rate_limit_remaining == 995
        assert response.meta.response_time_ms >= 0
        assert response.attempts == 1

    def test_missing_and_malformed_headers_are_zero(self) -> None:
        recorder = _Recorder(_json({}, headers={"X-API-Units-Consumed": "lots"}))
        with _client(recorder) as client:
            response = client.get("/x")
        assert response.meta.units_consumed == 0
        assert response.meta.rate_limit_remaining == 0

    def test_execute_prebuilt_request(self) -> None:
        recorder = _Recorder(_json({}))
        request = Request.build(HTTPMethod.GET, "/x", {"country": "us"})
        with _client(recorder) as client:
            client.execute(request)
        assert recorder.requests[0].url.params["country"] == "us"


# ---------------------------------------------------------------------------
# Errors and retries
# ---------------------------------------------------------------------------


class TestRetry:
    @pytest.mark.parametrize("status", [400, 402, 403, 404, 409, 422, 499])
    def test_every_client_error_sent_once(self, status: int) -> None:
        recorder = _Recorder(_json({"error": {"message": "no"}}, status_code=status))
        with _client(recorder) as client:
            with pytest.raises(APIError) as exc_info:
                client.get("/x")
        assert len(recorder.requests) == 1
        assert exc_info.value.status_code == status

    def test_client_error_not_retried(self) -> None:
        recorder = _Recorder(_json({"error": {"message": "Invalid API key"}}, status_code=401))
        with _client(recorder) as client:
            with pytest.raises(APIError) as exc_info:
                client.get("/x")

        assert len(recorder.requests) == 1
        assert exc_info.value.status_code == 401
        assert exc_info.value.code == "AUTH_ERROR"
        assert exc_info.value.message == "Invalid API key"
        assert exc_info.value.exit_code == EXIT_AUTH_FAILURE

    def test_server_error_then_success(self) -> None:
        recorder = _Recorder(
            _json({}, status_code=503),
            _json({}, status_code=502),
            _json({"ok": True}),
        )
        with _client(recorder) as client:
            response = client.get("/x")

        assert response.status_code == 200
        assert response.attempts == 3
        assert len(recorder.requests) == 3

    def test_rate_limit_exhausts_retries(self) -> None:
        recorder = _Recorder(_json({"error": {"message": "slow down"}}, status_code=429))
        with _client(recorder, max_retries=2) as client:
            with pytest.raises(RequestFailedError) as exc_info:
                client.get("/x")

        exc = exc_info.value
        assert len(recorder.requests) == 3
        assert exc.attempts == 3
        assert exc.message.startswith("request failed after 2 retries")
        assert isinstance(exc.last_error, APIError)
        assert exc.last_error.status_code == 429
        assert exc.__cause__ is exc.last_error
        assert exc.exit_code == EXIT_RATE_LIMITED

    def test_zero_retries_sends_once(self) -> None:
        recorder = _Recorder(_json({}, status_code=500))
        with _client(recorder, max_retries=0) as client:
            with pytest.raises(RequestFailedError) as exc_info:
                client.get("/x")
        assert len(recorder.requests) == 1
        assert exc_info.value.message.startswith("request failed after 0 retries")

    def test_transport_error_retried(self) -> None:
        recorder = _Recorder(httpx.ConnectError("refused"), _json({"ok": True}))
        with _client(recorder) as client:
            response = client.get("/x")
        assert response.attempts == 2

    def test_transport_error_exhausted(self) -> None:
        recorder = _Recorder(httpx.ConnectError("refused"))
        with _client(recorder, max_retries=1) as client:
            with pytest.raises(RequestFailedError) as exc_info:
                client.get("/x")
        assert isinstance(exc_info.value.last_error, ConnectionError_)
        assert "refused" in exc_info.value.message
        assert exc_info.value.exit_code == EXIT_CONNECTION_ERROR

    def test_linear_backoff(self) -> None:
        cancel = _RecordingEvent()
        recorder = _Recorder(_json({}, status_code=500))
        with _client(recorder, max_retries=3, retry_backoff=1.5) as client:
            with pytest.raises(RequestFailedError):
                client.get("/x", cancel=cancel)
        assert cancel.delays == [1.5, 3.0, 4.5]

    def test_wait_without_event_is_interruptible(self, monkeypatch: pytest.MonkeyPatch) -> None:
        waits: list[float] = []
        monkeypatch.setattr(threading.Event, "wait", lambda self, timeout=None: waits.append(timeout) or False)
        recorder = _Recorder(_json({}, status_code=500))
        with _client(recorder, max_retries=2, retry_backoff=2) as client:
            with pytest.raises(RequestFailedError):
                client.get("/x")
        assert waits == [2, 4]

    def test_cancel_during_backoff(self) -> None:
        cancel = threading.Event()
        cancel.set()
        recorder = _Recorder(_json({}, status_code=500))
        with _client(recorder, retry_backoff=10) as client:
            with pytest.raises(RequestCancelledError):
                client.get("/x", cancel=cancel)
        assert len(recorder.requests) == 1

    def test_retries_logged_in_verbose_mode(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(no_color=True, verbose=True))
        recorder = _Recorder(_json({}, status_code=500), _json({}))
        with _client(recorder) as client:
            client.get("/x")
        assert "[debug]" in capsys.readouterr().err
