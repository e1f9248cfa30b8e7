"""HTTP client module for ahrefs-cli.

Wraps :mod:`httpx` with bearer auth, latency metering, linear-backoff retry
and error classification.

Classes and functions:
    :class:`AhrefsClient` -- blocking client backed by :class:`httpx.Client`.
    :func:`build_url` -- full request URL, also used for ``--dry-run``.
    :func:`classify_error` -- failed status + body to :class:`APIError`.
    :func:`decode_payload` -- response body to a typed response model.

Example::

    from ahrefs_cli.client import AhrefsClient

    with AhrefsClient(settings) as client:
        resp = client.get("/site-explorer/domain-rating", {"target": "example.com"})
"""

from ahrefs_cli.client.errors import classify_error
from ahrefs_cli.client.response import decode_payload
from ahrefs_cli.client.sync_client import AhrefsClient, build_url

__all__ = ["AhrefsClient", "build_url", "classify_error", "decode_payload"]
