"""Filtered view over the campaign library."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .layouts_models import Campaign, Placement


@dataclass(frozen=True, slots=True)
class CampaignQuery:
    q: str = ""
    placement: str | None = None

    @classmethod
    def build(cls, q: str | None = None, placement: str | Placement | None = None) -> "CampaignQuery":
        """Normalise UI input: ``"all"`` and blanks mean no placement filter."""
        if isinstance(placement, Placement):
            placement = placement.value
        if not placement or placement == "all":
            placement = None
        return cls(q=q or "", placement=placement)


def filter_campaigns(
    campaigns: Iterable[Campaign],
    query: str = "",
    placement: str | Placement | None = None,
) -> list[Campaign]:
    needle = query.casefold() if query else ""
    if isinstance(placement, Placement):
        placement = placement.value
    return [
        campaign
        for campaign in campaigns
        if (not needle or needle in campaign.name.casefold())
        and (not placement or campaign.placement == placement)
    ]


__all__ = ["CampaignQuery", "filter_campaigns"]
