"""Grouping and ordering of processed server records."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from pydantic import BaseModel, Field

from fediservers.models import ServerRecord
from fediservers.sources import DomainGroups

__all__ = ["AggregateResult", "aggregate", "partition", "sort_by_users_desc"]


class AggregateResult(BaseModel):
    """The three published views of a run."""

    combined: List[ServerRecord] = Field(default_factory=list)
    official: List[ServerRecord] = Field(default_factory=list)
    community: List[ServerRecord] = Field(default_factory=list)


def sort_by_users_desc(records: Iterable[ServerRecord]) -> List[ServerRecord]:
    """Order by ``total_users`` descending, then ``domain`` ascending."""

    return sorted(records, key=lambda record: (-(record.total_users or 0), record.domain))


def partition(
    records: Iterable[ServerRecord], groups: DomainGroups
) -> Tuple[List[ServerRecord], List[ServerRecord]]:
    """Split ``records`` into official and community lists.

    A domain listed in both source files belongs to the official group.
    Records for domains in neither group are dropped.
    """

    official: List[ServerRecord] = []
    community: List[ServerRecord] = []
    for record in records:
        group = groups.group_of(record.domain)
        if group == "official":
            official.append(record)
        elif group == "community":
            community.append(record)
    return official, community


def aggregate(records: Iterable[ServerRecord], groups: DomainGroups) -> AggregateResult:
    official, community = partition(records, groups)
    official_sorted = sort_by_users_desc(official)
    community_sorted = sort_by_users_desc(community)
    return AggregateResult(
        combined=official_sorted + community_sorted,
        official=official_sorted,
        community=community_sorted,
    )
