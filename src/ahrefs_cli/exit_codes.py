"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~ahrefs_cli.exceptions.AhrefsError` subclass.
Agents and shell wrappers can branch on the exit code without parsing the
rendered error envelope.

Example::

    $ ahrefs se domain-rating --target example.com
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the API key was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments, or the API rejected the parameters."""

EXIT_AUTH_FAILURE = 3
"""Authentication or authorisation failed."""

EXIT_NOT_FOUND = 4
"""The requested endpoint or resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_RATE_LIMITED = 7
"""The API rate limit was exceeded (HTTP 429)."""

EXIT_CANCELLED = 130
"""The operation was interrupted (Ctrl-C or explicit cancellation)."""
