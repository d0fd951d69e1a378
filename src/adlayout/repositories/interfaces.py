"""Repository interfaces for layout store implementations."""

from __future__ import annotations

from typing import Protocol

from ..layouts.layouts_models import Campaign, Device, Layout, SlotAssignment


class LayoutStore(Protocol):
    """Persistence operations for ad layouts, their slots and slot assignments."""

    async def get_layout(self, page_key: str, device: Device) -> Layout | None:
        """Return the layout for ``page_key``/``device`` or ``None`` when absent."""

    async def upsert_layout(self, layout: Layout) -> str:
        """Create or replace a layout with its full slot set, returning the layout id.

        Slot ids in ``layout`` are ignored; slots are matched by ``slot_key``.
        """

    async def assign_campaign_to_slot(
        self, slot_id: str, campaign_id: str, rotation_index: int
    ) -> None:
        """Attach a campaign to a persisted slot."""

    async def update_slot_assignment_order(
        self, slot_id: str, campaign_id: str, rotation_index: int
    ) -> None:
        """Set the rotation index of an existing assignment."""

    async def remove_slot_assignment(self, slot_id: str, campaign_id: str) -> None:
        """Detach a campaign from a slot."""

    async def list_active_campaigns(self) -> list[Campaign]:
        """Return active campaigns ordered by priority, highest first."""

    async def list_page_keys(self) -> list[str]:
        """Return the known page keys ordered by key."""

    async def list_slot_assignments(self, slot_id: str) -> list[SlotAssignment]:
        """Return active assignments of ``slot_id`` ordered by rotation index."""
