"""Synchronous HTTP client with bearer auth, latency metering and retry.

This module provides :class:`AhrefsClient`, the blocking client used by
every ahrefs-cli command.  It wraps :class:`httpx.Client` and layers on:

- **Bearer auth** -- the API key is sent as ``Authorization: Bearer <key>``
  on every attempt.
- **Metering** -- wall-clock latency and the ``X-API-Units-Consumed`` /
  ``X-RateLimit-Remaining`` headers are recorded in
  :class:`~ahrefs_cli.models.ResponseMeta`.
- **Retry with linear backoff** -- transport errors, 5xx and 429 are
  retried; the wait before attempt *n* is ``n * retry_backoff`` seconds and
  can be cut short through a :class:`threading.Event`.
- **Error classification** -- failed responses become
  :class:`~ahrefs_cli.exceptions.APIError` via
  :func:`~ahrefs_cli.client.errors.classify_error`.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from ahrefs_cli.client.errors import classify_error
from ahrefs_cli.exceptions import (
    AhrefsError,
    APIError,
    ConfigError,
    ConnectionError_,
    RequestCancelledError,
    RequestFailedError,
)
from ahrefs_cli.models import ClientSettings, HTTPMethod, Request, Response, ResponseMeta
from ahrefs_cli.output import get_output

logger = logging.getLogger(__name__)

UNITS_CONSUMED_HEADER = "X-API-Units-Consumed"
RATE_LIMIT_REMAINING_HEADER = "X-RateLimit-Remaining"


def build_url(base_url: str, request: Request) -> str:
    """Return the full URL for *request*: base URL, endpoint and query string.

    Parameter keys are sorted so the same logical request always produces
    the same URL.  Used both for sending and for ``--dry-run`` output.
    """
    url = base_url.rstrip("/") + "/" + request.endpoint.lstrip("/")
    query = request.query_string
    return f"{url}?{query}" if query else url


def _header_int(headers: httpx.Headers, name: str) -> int:
    """Parse an integer header, returning 0 when absent or malformed."""
    raw = headers.get(name)
    if raw is None:
        return 0
    try:
        return int(raw.strip())
    except ValueError:
        logger.debug("Ignoring malformed %s header: %r", name, raw)
        return 0


def _is_retryable(error: AhrefsError) -> bool:
    if isinstance(error, APIError):
        return error.status_code >= 500 or error.status_code == 429
    return isinstance(error, ConnectionError_)


class AhrefsClient:
    """Synchronous client for the Ahrefs API.

    Must be used as a context manager so that the underlying
    :class:`httpx.Client` is opened and closed exactly once.

    Args:
        settings: Base URL, API key, timeout and retry configuration.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.

    Raises:
        ConfigError: If ``settings.api_key`` is empty.  No network call is
            attempted in that case.

    Example::

        with AhrefsClient(ClientSettings(api_key=key)) as client:
            response = client.get("/site-explorer/domain-rating",
                                  {"target": "example.com"})
    """

    def __init__(
        self,
        settings: ClientSettings,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not settings.api_key:
            raise ConfigError(
                "API key is required",
                suggestion="Set AHREFS_API_KEY, pass --api-key or run 'ahrefs config set-key <your-key>'",
            )
        self._settings = settings
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> AhrefsClient:
        self._client = httpx.Client(
            timeout=self._settings.timeout,
            transport=self._transport,
            follow_redirects=True,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def get(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Response:
        """Send a GET request.  See :meth:`execute`."""
        return self.execute(Request.build(HTTPMethod.GET, endpoint, params), cancel=cancel)

    def post(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Response:
        """Send a POST request.  See :meth:`execute`."""
        return self.execute(Request.build(HTTPMethod.POST, endpoint, params), cancel=cancel)

    def url_for(self, request: Request) -> str:
        return build_url(self._settings.base_url, request)

    def execute(
        self,
        request: Request,
        cancel: Optional[threading.Event] = None,
    ) -> Response:
        """Execute *request*, retrying transient failures.

        Attempt 0 is sent immediately.  Before attempt *n* the client waits
        ``n * retry_backoff`` seconds.  Transport errors, 5xx and 429 are
        retried up to ``max_retries`` times; any other 4xx stops at once.

        Args:
            request: The request to send.
            cancel: Optional event.  Setting it while a backoff wait is in
                progress aborts the call with :class:`RequestCancelledError`.

        Returns:
            The successful :class:`Response` (status < 400), with
            ``attempts`` set to the number of attempts made.

        Raises:
            APIError: On a non-retryable 4xx response.
            RequestFailedError: When every attempt failed.  The last failure
                is available as ``last_error`` and as ``__cause__``.
            RequestCancelledError: When *cancel* fired during a backoff wait.
        """
        if self._client is None:
            raise RuntimeError("Client not initialised -- use as context manager")

        max_retries = self._settings.max_retries
        url = self.url_for(request)
        output = get_output()
        last_error: Optional[AhrefsError] = None

        for attempt in range(max_retries + 1):
            if attempt > 0:
                delay = attempt * self._settings.retry_backoff
                output.debug(
                    f"{last_error}, retrying in {delay:g}s "
                    f"(attempt {attempt + 1}/{max_retries + 1})"
                )
                if self._wait(delay, cancel):
                    raise RequestCancelledError("Request cancelled during retry backoff")

            try:
                response = self._send(request.method, url)
            except httpx.TransportError as exc:
                last_error = ConnectionError_(f"{type(exc).__name__}: {exc}")
                continue

            response.attempts = attempt + 1
            if response.status_code < 400:
                return response

            error = classify_error(response.status_code, response.body, response=response)
            if not _is_retryable(error):
                raise error
            last_error = error

        assert last_error is not None
        raise RequestFailedError(
            f"request failed after {max_retries} retries: {last_error}",
            attempts=max_retries + 1,
            last_error=last_error,
        ) from last_error

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _wait(delay: float, cancel: Optional[threading.Event]) -> bool:
        """Wait up to *delay* seconds.  Returns ``True`` if *cancel* fired."""
        return (cancel or threading.Event()).wait(delay)

    def _send(self, method: HTTPMethod, url: str) -> Response:
        """Perform one HTTP exchange and capture its metadata."""
        assert self._client is not None
        headers = {
            "Authorization": f"Bearer {self._settings.api_key}",
            "Accept": "application/json",
            "User-Agent": self._settings.user_agent,
        }
        started = time.monotonic()
        raw = self._client.request(method.value, url, headers=headers)
        body = raw.read()
        elapsed_ms = int((time.monotonic() - started) * 1000)

        logger.debug("%s %s -> %d in %dms", method.value, url, raw.status_code, elapsed_ms)
        return Response(
            status_code=raw.status_code,
            body=body,
            headers=dict(raw.headers),
            meta=ResponseMeta(
                response_time_ms=elapsed_ms,
                units_consumed=_header_int(raw.headers, UNITS_CONSUMED_HEADER),
                rate_limit_remaining=_header_int(raw.headers, RATE_LIMIT_REMAINING_HEADER),
            ),
        )
