"""``ahrefs site-explorer`` -- backlink and organic search data for a target.

Every command here is declared as an :class:`~ahrefs_cli.commands.endpoints.Endpoint`
and generated into a Typer command.  The group is also reachable under the
hidden alias ``se``.
"""

from __future__ import annotations

import typer

from ahrefs_cli import responses
from ahrefs_cli.commands.endpoints import (
    COUNTRY,
    DATE,
    DATE_FROM,
    DATE_TO,
    LIMIT,
    MODE,
    OFFSET,
    SELECT,
    TARGET,
    WHERE,
    Endpoint,
    order_by,
    register_endpoints,
)
from ahrefs_cli.commands.runner import run_endpoint

GROUP_HELP = (
    "Access Site Explorer data including domain rating, backlinks, "
    "referring domains, anchors, organic keywords, and more."
)

ENDPOINTS: list[Endpoint] = [
    Endpoint(
        name="domain-rating",
        path="/site-explorer/domain-rating",
        summary="Get domain rating for a target",
        description=(
            "Get the domain rating (DR) for a domain or URL.\n\n"
            "Domain Rating shows the strength of a website's backlink profile "
            "on a logarithmic scale from 0 to 100."
        ),
        examples=(
            "ahrefs site-explorer domain-rating --target example.com\n"
            "ahrefs site-explorer domain-rating --target example.com/page --mode exact\n"
            "ahrefs site-explorer domain-rating --target example.com --date 2024-01-01"
        ),
        params=(TARGET, MODE, DATE),
        response_model=responses.DomainRatingResponse,
    ),
    Endpoint(
        name="backlinks-stats",
        path="/site-explorer/backlinks-stats",
        summary="Get backlinks statistics",
        description="Get aggregated statistics about backlinks for a target.",
        examples=(
            "ahrefs site-explorer backlinks-stats --target example.com\n"
            "ahrefs site-explorer backlinks-stats --target example.com/page --mode exact"
        ),
        params=(TARGET, MODE, DATE),
        response_model=responses.BacklinksStatsResponse,
    ),
    Endpoint(
        name="backlinks",
        path="/site-explorer/backlinks",
        summary="Get backlinks for a target",
        description="List backlinks pointing to a target domain or URL.",
        examples=(
            "ahrefs site-explorer backlinks --target example.com --limit 100\n"
            "ahrefs site-explorer backlinks --target example.com "
            "--select url_from,url_to,domain_rating --limit 50\n"
            "ahrefs site-explorer backlinks --target example.com "
            "--where 'domain_rating>50'"
        ),
        params=(TARGET, MODE, LIMIT, OFFSET, SELECT, WHERE),
        response_model=responses.BacklinksResponse,
    ),
    Endpoint(
        name="refdomains",
        path="/site-explorer/refdomains",
        summary="Get referring domains",
        description="List domains that link to the target.",
        examples=(
            "ahrefs site-explorer refdomains --target example.com --limit 100\n"
            "ahrefs site-explorer refdomains --target example.com --order-by domain_rating:desc"
        ),
        params=(TARGET, MODE, LIMIT, OFFSET, SELECT, WHERE, order_by("domain_rating:desc")),
        response_model=responses.RefDomainsResponse,
    ),
    Endpoint(
        name="anchors",
        path="/site-explorer/anchors",
        summary="Get anchor text distribution",
        description="List anchor texts used in backlinks pointing to the target.",
        examples=(
            "ahrefs site-explorer anchors --target example.com --limit 100\n"
            "ahrefs site-explorer anchors --target example.com "
            "--select anchor,backlinks,refdomains --limit 50"
        ),
        params=(TARGET, MODE, LIMIT, OFFSET, SELECT, WHERE, order_by("backlinks:desc")),
        response_model=responses.AnchorsResponse,
    ),
    Endpoint(
        name="organic-keywords",
        path="/site-explorer/organic-keywords",
        summary="Get organic keywords",
        description="List organic keywords that the target ranks for in search engines.",
        examples=(
            "ahrefs site-explorer organic-keywords --target example.com --limit 100\n"
            "ahrefs site-explorer organic-keywords --target example.com --country us --limit 50\n"
            "ahrefs site-explorer organic-keywords --target example.com "
            "--order-by traffic:desc --limit 20"
        ),
        params=(
            TARGET, MODE, LIMIT, OFFSET, SELECT, WHERE, order_by("traffic:desc"), COUNTRY,
        ),
        response_model=responses.OrganicKeywordsResponse,
    ),
    Endpoint(
        name="top-pages",
        path="/site-explorer/top-pages",
        summary="Get top pages by organic traffic",
        description="List pages that receive the most organic search traffic.",
        examples=(
            "ahrefs site-explorer top-pages --target example.com --limit 100\n"
            "ahrefs site-explorer top-pages --target example.com --country gb --limit 50\n"
            "ahrefs site-explorer top-pages --target example.com --select url,traffic,keywords"
        ),
        params=(
            TARGET, MODE, LIMIT, OFFSET, SELECT, WHERE, order_by("traffic:desc"), COUNTRY,
        ),
        response_model=responses.TopPagesResponse,
    ),
    Endpoint(
        name="broken-backlinks",
        path="/site-explorer/broken-backlinks",
        summary="Get broken backlinks",
        description="List backlinks pointing to non-existing pages (404 errors) on the target.",
        examples=(
            "ahrefs site-explorer broken-backlinks --target example.com --limit 100\n"
            "ahrefs site-explorer broken-backlinks --target example.com "
            "--order-by domain_rating:desc"
        ),
        params=(TARGET, MODE, LIMIT, OFFSET, SELECT, WHERE, order_by("domain_rating:desc")),
        response_model=responses.BrokenBacklinksResponse,
    ),
    Endpoint(
        name="linked-domains",
        path="/site-explorer/linked-domains",
        summary="Get linked domains",
        description="List domains that the target links out to.",
        examples=(
            "ahrefs site-explorer linked-domains --target example.com --limit 100\n"
            "ahrefs site-explorer linked-domains --target example.com "
            "--where 'domain_rating>50'"
        ),
        params=(TARGET, MODE, LIMIT, OFFSET, SELECT, WHERE, order_by("domain_rating:desc")),
        response_model=responses.LinkedDomainsResponse,
    ),
    Endpoint(
        name="metrics",
        path="/site-explorer/metrics",
        summary="Get site metrics overview",
        description="Get organic and paid traffic metrics for a target.",
        examples=(
            "ahrefs site-explorer metrics --target example.com\n"
            "ahrefs site-explorer metrics --target example.com --country us"
        ),
        params=(TARGET, MODE, SELECT, COUNTRY),
        response_model=responses.MetricsResponse,
    ),
    Endpoint(
        name="metrics-history",
        path="/site-explorer/metrics-history",
        summary="Get historical metrics",
        description="Get historical organic and paid traffic metrics for a target.",
        examples=(
            "ahrefs site-explorer metrics-history --target example.com\n"
            "ahrefs site-explorer metrics-history --target example.com "
            "--date-from 2024-01-01 --date-to 2024-06-30\n"
            "ahrefs site-explorer metrics-history --target example.com --country us"
        ),
        params=(TARGET, MODE, SELECT, COUNTRY, DATE_FROM, DATE_TO),
        response_model=responses.MetricsHistoryResponse,
    ),
    Endpoint(
        name="pages-by-traffic",
        path="/site-explorer/pages-by-traffic",
        summary="Get pages sorted by traffic",
        description="List pages sorted by organic search traffic.",
        examples=(
            "ahrefs site-explorer pages-by-traffic --target example.com --limit 100\n"
            "ahrefs site-explorer pages-by-traffic --target example.com --country de"
        ),
        params=(
            TARGET, MODE, LIMIT, OFFSET, SELECT, WHERE, order_by("traffic:desc"), COUNTRY,
        ),
        response_model=responses.PagesByTrafficResponse,
    ),
    Endpoint(
        name="best-by-links",
        path="/site-explorer/best-by-links",
        summary="Get best pages by backlinks",
        description="List pages sorted by the number of backlinks they receive.",
        examples=(
            "ahrefs site-explorer best-by-links --target example.com --limit 100\n"
            "ahrefs site-explorer best-by-links --target example.com --order-by refdomains:desc"
        ),
        params=(TARGET, MODE, LIMIT, OFFSET, SELECT, WHERE, order_by("backlinks:desc")),
        response_model=responses.BestByLinksResponse,
    ),
]


def build_app() -> typer.Typer:
    """Build a fresh ``site-explorer`` group with one command per endpoint."""
    app = typer.Typer(help=GROUP_HELP, no_args_is_help=True)
    register_endpoints(app, ENDPOINTS, run_endpoint)
    return app


app = build_app()
