"""Response models for the Ahrefs API v3 endpoints.

One top-level model per endpoint.  Field order is significant: the renderer
derives CSV/table columns and YAML keys from declaration order.  Fields whose
wire name differs from the Python identifier declare it as an ``alias``,
which the renderer uses as the column name.

Every model allows extra keys, so columns requested with ``--select`` that
are not modelled here still reach the output.
"""

from __future__ import annotations

from typing import Any, Optional, Union, get_origin

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

# Ratings arrive as integers or floats; keep whichever the API sent.
Number = Union[int, float]


class APIModel(BaseModel):
    """Base for all response models."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def null_list_is_empty(cls, value: Any, info: ValidationInfo) -> Any:
        # The API sends null for an empty result set.
        if value is None and info.field_name is not None:
            if get_origin(cls.model_fields[info.field_name].annotation) is list:
                return []
        return value


# --- Domain rating ---


class DomainRating(APIModel):
    domain_rating: Optional[Number] = None


class DomainRatingResponse(APIModel):
    domain_rating: DomainRating = Field(default_factory=DomainRating)


# --- Backlinks ---


class BacklinksMetrics(APIModel):
    live: Optional[int] = None
    refdomains: Optional[int] = None
    dofollow: Optional[int] = None
    governmental: Optional[int] = None
    educational: Optional[int] = None


class BacklinksStatsResponse(APIModel):
    metrics: BacklinksMetrics = Field(default_factory=BacklinksMetrics)


class Backlink(APIModel):
    url_from: Optional[str] = None
    url_to: Optional[str] = None
    domain_rating: Optional[Number] = None
    ahrefs_rank: Optional[int] = None
    anchor: Optional[str] = None
    http_code: Optional[int] = None
    first_seen: Optional[str] = None
    last_visited: Optional[str] = None
    link_type: Optional[str] = None
    url_rating: Optional[Number] = None
    traffic: Optional[int] = None


class BacklinksResponse(APIModel):
    backlinks: list[Backlink] = Field(default_factory=list)


class BrokenBacklink(APIModel):
    url_from: Optional[str] = None
    url_to: Optional[str] = None
    domain_rating: Optional[Number] = None
    http_code: Optional[int] = None
    anchor: Optional[str] = None
    first_seen: Optional[str] = None
    last_visited: Optional[str] = None


class BrokenBacklinksResponse(APIModel):
    backlinks: list[BrokenBacklink] = Field(default_factory=list)


# --- Referring / linked domains ---


class RefDomain(APIModel):
    domain: Optional[str] = None
    domain_rating: Optional[Number] = None
    url_rating: Optional[Number] = None
    ahrefs_rank: Optional[int] = None
    backlinks: Optional[int] = None
    dofollow: Optional[int] = None
    linked_pages: Optional[int] = None
    first_seen: Optional[str] = None
    last_visited: Optional[str] = None


class RefDomainsResponse(APIModel):
    refdomains: list[RefDomain] = Field(default_factory=list)


class LinkedDomain(APIModel):
    domain: Optional[str] = None
    domain_rating: Optional[Number] = None
    linked_pages: Optional[int] = None
    backlinks: Optional[int] = None
    first_seen: Optional[str] = None


class LinkedDomainsResponse(APIModel):
    linked_domains: list[LinkedDomain] = Field(default_factory=list)


# --- Anchors ---


class Anchor(APIModel):
    anchor: Optional[str] = None
    backlinks: Optional[int] = None
    refdomains: Optional[int] = None
    first_seen: Optional[str] = None
    last_visited: Optional[str] = None


class AnchorsResponse(APIModel):
    anchors: list[Anchor] = Field(default_factory=list)


# --- Organic search ---


class OrganicKeyword(APIModel):
    keyword: Optional[str] = None
    position: Optional[int] = None
    search_volume: Optional[int] = Field(default=None, alias="volume")
    traffic: Optional[int] = None
    kd: Optional[Number] = None
    url: Optional[str] = None
    country: Optional[str] = None


class OrganicKeywordsResponse(APIModel):
    keywords: list[OrganicKeyword] = Field(default_factory=list)


class TopPage(APIModel):
    url: Optional[str] = None
    traffic: Optional[int] = None
    traffic_value: Optional[int] = None
    keywords: Optional[int] = None
    top_keyword: Optional[str] = None
    position: Optional[int] = None
    volume: Optional[int] = None
    url_rating: Optional[Number] = None


class TopPagesResponse(APIModel):
    pages: list[TopPage] = Field(default_factory=list)


class PageByTraffic(APIModel):
    url: Optional[str] = None
    traffic: Optional[int] = None
    traffic_value: Optional[int] = None
    keywords: Optional[int] = None
    url_rating: Optional[Number] = None


class PagesByTrafficResponse(APIModel):
    pages: list[PageByTraffic] = Field(default_factory=list)


class PageByLinks(APIModel):
    url: Optional[str] = None
    backlinks: Optional[int] = None
    refdomains: Optional[int] = None
    url_rating: Optional[Number] = None
    traffic: Optional[int] = None
    first_seen: Optional[str] = None


class BestByLinksResponse(APIModel):
    pages: list[PageByLinks] = Field(default_factory=list)


# --- Metrics ---


class SiteMetrics(APIModel):
    org_keywords: Optional[int] = None
    org_keywords_2: Optional[int] = None
    org_traffic: Optional[int] = None
    org_cost: Optional[Number] = None
    paid_keywords: Optional[int] = None
    paid_traffic: Optional[int] = None
    paid_cost: Optional[Number] = None
    featured_snippets: Optional[int] = None


class MetricsResponse(APIModel):
    metrics: SiteMetrics = Field(default_factory=SiteMetrics)


class MetricsHistoryEntry(APIModel):
    date: Optional[str] = None
    org_keywords: Optional[int] = None
    org_traffic: Optional[int] = None
    org_cost: Optional[Number] = None
    paid_keywords: Optional[int] = None
    paid_traffic: Optional[int] = None
    domain_rating: Optional[Number] = None


class MetricsHistoryResponse(APIModel):
    metrics: list[MetricsHistoryEntry] = Field(default_factory=list)


# --- Subscription info ---


class LimitsAndUsage(APIModel):
    subscription: Optional[str] = None
    usage_reset_date: Optional[str] = None
    units_limit_workspace: Optional[int] = None
    units_usage_workspace: Optional[int] = None
    units_limit_api_key: Optional[int] = None
    units_usage_api_key: Optional[int] = None
    api_key_expiration_date: Optional[str] = None


class LimitsAndUsageResponse(APIModel):
    limits_and_usage: LimitsAndUsage = Field(default_factory=LimitsAndUsage)
