"""Canonical Pydantic models shared across ahrefs-cli modules.

The models fall into three groups:

**Settings** -- built once per invocation and injected downwards:
    :class:`ClientSettings`, :class:`GlobalOptions` and the persisted
    :class:`StoredConfig`.

**Transport** -- one instance per API call:
    :class:`Request`, :class:`Response` and :class:`ResponseMeta`.

**Enumerations** -- :class:`HTTPMethod`, :class:`OutputFormat` and
    :class:`TargetMode`.

Endpoint response payloads live in :mod:`ahrefs_cli.responses`.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any, Optional
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field

from ahrefs_cli import __version__

DEFAULT_BASE_URL = "https://api.ahrefs.com/v3"
DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_RETRIES = 3
USER_AGENT = f"ahrefs-cli/{__version__}"


# --- Enumerations ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods used by the API."""

    GET = "GET"
    POST = "POST"


class OutputFormat(str, enum.Enum):
    """Output formats selectable with ``--format``."""

    JSON = "json"
    YAML = "yaml"
    CSV = "csv"
    TABLE = "table"


class TargetMode(str, enum.Enum):
    """How a target is matched: a single URL, a whole domain, a path prefix,
    or the domain including its subdomains."""

    EXACT = "exact"
    DOMAIN = "domain"
    PREFIX = "prefix"
    SUBDOMAINS = "subdomains"


# --- Settings ---


class ClientSettings(BaseModel):
    """Configuration for :class:`~ahrefs_cli.client.AhrefsClient`.

    ``retry_backoff`` is the unit of the linear backoff: the wait before
    retry *n* is ``n * retry_backoff`` seconds.
    """

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT, description="Per-request timeout in seconds")
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    retry_backoff: float = Field(default=1.0, ge=0)
    user_agent: str = USER_AGENT


class GlobalOptions(BaseModel):
    """Global CLI flags, parsed once by the root callback.

    Stored in ``ctx.obj`` so that every command receives the same
    configuration explicitly instead of reading module-level state.
    """

    api_key: Optional[str] = None
    format: OutputFormat = OutputFormat.JSON
    output_file: Optional[str] = None
    verbose: bool = False
    quiet: bool = False
    dry_run: bool = False
    no_color: bool = False


class StoredConfig(BaseModel):
    """The JSON document persisted by :mod:`ahrefs_cli.config`."""

    model_config = ConfigDict(extra="allow")

    api_key: str = ""


# --- Transport ---


def _param_values(value: Any) -> list[str]:
    """Normalise one query-parameter value into a list of strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [v for item in value for v in _param_values(item)]
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, bool):
        return ["true" if value else "false"]
    text = str(value)
    return [text] if text != "" else []


class Request(BaseModel):
    """A single API request.  Immutable once built."""

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod = HTTPMethod.GET
    endpoint: str
    params: dict[str, list[str]] = Field(default_factory=dict)

    @classmethod
    def build(
        cls,
        method: HTTPMethod | str,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Request:
        """Build a request from any mapping of parameters.

        ``None`` and empty-string values are dropped, enums contribute their
        ``value`` and sequences become repeated parameters.
        """
        normalised: dict[str, list[str]] = {}
        for key, value in (params or {}).items():
            values = _param_values(value)
            if values:
                normalised[str(key)] = values
        if not isinstance(method, HTTPMethod):
            method = HTTPMethod(method.upper())
        return cls(method=method, endpoint=endpoint, params=normalised)

    @property
    def query_string(self) -> str:
        """The URL-encoded query string, keys sorted for a stable URL."""
        return urlencode(sorted(self.params.items()), doseq=True)


class ResponseMeta(BaseModel):
    """Per-call metadata reported in the success envelope."""

    response_time_ms: int = 0
    units_consumed: int = 0
    rate_limit_remaining: int = 0


class Response(BaseModel):
    """The raw result of one HTTP exchange."""

    status_code: int
    body: bytes = b""
    headers: dict[str, str] = Field(default_factory=dict)
    meta: ResponseMeta = Field(default_factory=ResponseMeta)
    attempts: int = Field(default=1, description="Attempts taken to obtain this response")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")
