"""Service layer entry points for the server directory."""

from __future__ import annotations

from .aggregate import AggregateResult, aggregate, sort_by_users_desc  # noqa: F401
from .fetcher import HomepageCache, InstanceFetcher  # noqa: F401
from .pipeline import EnrichmentPipeline  # noqa: F401

__all__ = [
    "AggregateResult",
    "EnrichmentPipeline",
    "HomepageCache",
    "InstanceFetcher",
    "aggregate",
    "sort_by_users_desc",
]
