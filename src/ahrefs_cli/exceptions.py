"""Exception hierarchy for ahrefs-cli.

All exceptions inherit from :class:`AhrefsError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`ahrefs_cli.exit_codes`
and an optional remediation ``suggestion``.  Commands render any
``AhrefsError`` through the active output writer and exit with its code;
:func:`ahrefs_cli.app.main` catches whatever escapes.

Subclass hierarchy::

    AhrefsError (exit 1)
    +-- ConfigError            (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- APIError               (exit by status: 2, 3, 4, 5, 7 or 1)
    +-- ConnectionError_       (exit 6)
    +-- RequestFailedError     (exit of the last failure)
    +-- RequestCancelledError  (exit 130)
    +-- DecodeError            (exit 1)
    +-- RenderError            (exit 1)
    +-- OutputError            (exit 1)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ahrefs_cli.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CANCELLED,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_RATE_LIMITED,
    EXIT_SERVER_ERROR,
)

if TYPE_CHECKING:
    from ahrefs_cli.models import Response


class AhrefsError(Exception):
    """Base exception for all ahrefs-cli errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`ahrefs_cli.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
        suggestion: Optional next step shown to the user alongside the error.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        suggestion: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(AhrefsError):
    """Raised for configuration problems (missing API key, unreadable config file)."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidUsageError(AhrefsError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


_STATUS_EXIT_CODES: dict[int, int] = {
    400: EXIT_INVALID_USAGE,
    401: EXIT_AUTH_FAILURE,
    403: EXIT_AUTH_FAILURE,
    404: EXIT_NOT_FOUND,
    429: EXIT_RATE_LIMITED,
}


class APIError(AhrefsError):
    """An error response (HTTP status >= 400) returned by the Ahrefs API.

    Built by :func:`~ahrefs_cli.client.errors.classify_error`.  ``code``,
    ``suggestion`` and ``docs_url`` are only populated for the status codes
    the classifier recognises; ``message`` is never empty.

    Attributes:
        status_code: The HTTP status of the failed response.
        code: Machine-readable code such as ``AUTH_ERROR``, or ``""``.
        suggestion: Remediation hint, or ``""``.
        docs_url: Link to the relevant API documentation, or ``""``.
        response: The raw :class:`~ahrefs_cli.models.Response`, when the
            error came from a real HTTP exchange.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        code: str = "",
        suggestion: str = "",
        docs_url: str = "",
        response: Optional[Response] = None,
    ):
        super().__init__(message, suggestion=suggestion)
        self.status_code = status_code
        self.code = code
        self.suggestion = suggestion
        self.docs_url = docs_url
        self.response = response
        if status_code >= 500:
            self.exit_code = EXIT_SERVER_ERROR
        else:
            self.exit_code = _STATUS_EXIT_CODES.get(status_code, EXIT_GENERIC_FAILURE)

    def __str__(self) -> str:
        return f"API error ({self.status_code}): {self.message}"


class ConnectionError_(AhrefsError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class RequestFailedError(AhrefsError):
    """Raised when every retry attempt failed.

    Args:
        message: Summary stating how many retries were made.
        attempts: Total number of attempts performed.
        last_error: The failure of the final attempt.  Its exit code is
            reused so that, for example, an exhausted 429 still exits with
            :data:`~ahrefs_cli.exit_codes.EXIT_RATE_LIMITED`.
    """

    def __init__(self, message: str, attempts: int, last_error: AhrefsError):
        super().__init__(
            message,
            exit_code=last_error.exit_code,
            suggestion=last_error.suggestion,
        )
        self.attempts = attempts
        self.last_error = last_error


class RequestCancelledError(AhrefsError):
    """Raised when a pending retry is cancelled during its backoff wait."""

    exit_code = EXIT_CANCELLED


class DecodeError(AhrefsError):
    """Raised when a successful response body does not match its response model."""

    exit_code = EXIT_GENERIC_FAILURE


class RenderError(AhrefsError):
    """Raised when a payload cannot be rendered in the selected output format."""

    exit_code = EXIT_GENERIC_FAILURE


class OutputError(AhrefsError):
    """Raised when the output sink cannot be opened or written."""

    exit_code = EXIT_GENERIC_FAILURE
