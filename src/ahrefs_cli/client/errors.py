"""Classification of failed API responses.

:func:`classify_error` turns an HTTP status and response body into an
:class:`~ahrefs_cli.exceptions.APIError`.  It is independent of the client
so that it can be unit-tested and reused by callers holding a raw body.

The Ahrefs API reports failures as::

    {"error": {"code": "...", "message": "..."}}

but bodies that do not follow that shape (plain text, HTML from a proxy, an
empty body) still produce a usable message.
"""

from __future__ import annotations

import http
from typing import Optional

from pydantic import BaseModel, ValidationError

from ahrefs_cli.exceptions import APIError
from ahrefs_cli.models import Response

DOCS_API_KEYS = "https://docs.ahrefs.com/docs/api/reference/api-keys-creation-and-management"
DOCS_LIMITS = "https://docs.ahrefs.com/docs/api/reference/limits-consumption"


class ErrorDetail(BaseModel):
    code: str = ""
    message: str = ""


class ErrorEnvelope(BaseModel):
    """The JSON error body returned by the API."""

    error: ErrorDetail = ErrorDetail()


# status -> (code, suggestion, docs_url)
_CLASSIFICATION: dict[int, tuple[str, str, str]] = {
    401: (
        "AUTH_ERROR",
        "Check your API key. Run 'ahrefs config set-key <your-key>' to configure",
        DOCS_API_KEYS,
    ),
    403: (
        "AUTH_ERROR",
        "Check your API key. Run 'ahrefs config set-key <your-key>' to configure",
        DOCS_API_KEYS,
    ),
    429: (
        "RATE_LIMIT_ERROR",
        "Rate limit exceeded. Wait before retrying or check your subscription limits",
        DOCS_LIMITS,
    ),
    400: (
        "VALIDATION_ERROR",
        "Check request parameters. Use 'ahrefs --list-commands' to see valid options",
        "",
    ),
    404: (
        "NOT_FOUND",
        "Endpoint or resource not found. Verify the target and endpoint",
        "",
    ),
}


def _reason_phrase(status: int) -> str:
    try:
        return http.HTTPStatus(status).phrase
    except ValueError:
        return ""


def _extract_message(status: int, body: bytes) -> str:
    """Pick the most specific message available for a failed response."""
    if body:
        try:
            envelope = ErrorEnvelope.model_validate_json(body)
        except ValidationError:
            envelope = None
        if envelope is not None and envelope.error.message:
            return envelope.error.message

        text = body.decode("utf-8", errors="replace").strip()
        if text:
            return text

    return _reason_phrase(status) or f"HTTP {status}"


def classify_error(
    status: int,
    body: bytes | str = b"",
    response: Optional[Response] = None,
) -> APIError:
    """Build the :class:`APIError` for a failed response.

    The message comes from ``error.message`` in a well-formed body, then
    the raw body text, then the HTTP reason phrase, and finally
    ``"HTTP <status>"``.  A code, suggestion and documentation link are
    attached for 400, 401, 403, 404 and 429; any other status carries the
    message alone, even when the body supplied a code of its own.

    Args:
        status: HTTP status code (expected to be >= 400).
        body: The raw response body.
        response: The originating response, attached to the error.

    Returns:
        The classified error.  It is returned, not raised.

    Example::

        >>> err = classify_error(401, b'{"error":{"message":"Invalid API key"}}')
        >>> err.code, err.exit_code
        ('AUTH_ERROR', 3)
    """
    if isinstance(body, str):
        body = body.encode("utf-8")

    message = _extract_message(status, body)
    code, suggestion, docs_url = _CLASSIFICATION.get(status, ("", "", ""))
    return APIError(
        status,
        message,
        code=code,
        suggestion=suggestion,
        docs_url=docs_url,
        response=response,
    )
