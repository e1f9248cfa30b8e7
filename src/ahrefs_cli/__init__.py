"""ahrefs-cli -- an agent-friendly command-line client for the Ahrefs API v3.

Every sub-command maps onto a single API endpoint: flags become query-string
parameters, the response is decoded into a typed model and rendered as JSON,
a YAML-like tree, CSV or an aligned table.

Typical workflow::

    ahrefs config set-key sk_xxx
    ahrefs site-explorer domain-rating --target example.com
    ahrefs --format csv se backlinks --target example.com --limit 50

Modules:
    app: Typer application, root callback and console entry point.
    client: HTTP request executor with retry and error classification.
    render: Output envelope rendering (json, yaml, csv, table).
    config: Persisted API key and environment resolution.
    models: Pydantic models shared across the package.
    responses: Response models for the API endpoints.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stderr diagnostics with Rich support.
"""

__version__ = "0.1.0"
