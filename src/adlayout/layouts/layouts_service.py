"""Layout builder orchestration: page/device selection, load and save."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Callable, Sequence

import structlog

from ..config import DEFAULT_PAGE_KEYS, AppConfig
from ..exceptions import AppError, LayoutStoreError
from ..notifications import NotificationBus
from .campaign_filter import CampaignQuery, filter_campaigns
from .drag_drop import DragDropController
from .grid import SlotGrid, cells_per_row
from .layouts_models import (
    Campaign,
    Device,
    GridConfig,
    Layout,
    LayoutSlot,
    Placement,
    SlotAssignment,
)

if TYPE_CHECKING:
    from ..repositories.interfaces import LayoutStore

log = structlog.get_logger(__name__)

PREVIEW_PATHS: dict[str, str] = {
    "home": "/",
    "past_papers": "/past-papers",
    "pdf_viewer": "/past-papers",
    "global_header": "/",
    "dashboard": "/dashboard",
}
STARTER_SLOT_KEY = "header_top"


class LayoutBuilder:
    """Own the selected page and device, the draft slots and their assignments.

    Remote calls made by one action are awaited one after another. Failures
    end the action with an error notification and leave the draft as it was.
    """

    def __init__(
        self,
        store: LayoutStore,
        *,
        notifier: NotificationBus,
        page_key: str = "home",
        device: Device = Device.DESKTOP,
        page_keys: Sequence[str] = DEFAULT_PAGE_KEYS,
        row_height: int = 40,
        gap: int = 8,
        append_new_assignments: bool = False,
        key_factory: Callable[[], str] | None = None,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.page_key = page_key
        self.default_page_keys = list(page_keys)
        self.page_keys = list(page_keys)
        self.grid = SlotGrid(device, row_height=row_height, gap=gap, key_factory=key_factory)
        self.layout_id: str | None = None
        self.campaigns: list[Campaign] = []
        self.assignments: dict[str, list[SlotAssignment]] = {}
        self.selected_slot_key: str | None = None
        self.library_filter = CampaignQuery()
        self.append_new_assignments = append_new_assignments
        self.drag = DragDropController(self)

    @classmethod
    def from_config(
        cls,
        store: LayoutStore,
        notifier: NotificationBus,
        config: AppConfig,
        *,
        key_factory: Callable[[], str] | None = None,
    ) -> "LayoutBuilder":
        return cls(
            store,
            notifier=notifier,
            page_key=config.default_page_key,
            page_keys=config.default_page_keys,
            row_height=config.row_height,
            gap=config.gap,
            append_new_assignments=config.append_new_assignments,
            key_factory=key_factory,
        )

    @property
    def device(self) -> Device:
        return self.grid.device

    @property
    def slots(self) -> list[LayoutSlot]:
        return self.grid.slots

    @property
    def selected_slot(self) -> LayoutSlot | None:
        if self.selected_slot_key is None:
            return None
        return self.grid.get(self.selected_slot_key)

    @property
    def filtered_campaigns(self) -> list[Campaign]:
        return filter_campaigns(
            self.campaigns, self.library_filter.q, self.library_filter.placement
        )

    def preview_path(self, page_key: str | None = None) -> str:
        return PREVIEW_PATHS.get(page_key or self.page_key, "/")

    def build_layout(self) -> Layout:
        """Snapshot of the draft as it would be submitted on save."""
        return Layout(
            layout_id=self.layout_id,
            page_key=self.page_key,
            device=self.device,
            grid=replace(self.grid.grid),
            slots=[replace(slot, config=dict(slot.config)) for slot in self.grid.slots],
        )

    def _starter_layout(self) -> Layout:
        cols = cells_per_row(self.device)
        return Layout(
            page_key=self.page_key,
            device=self.device,
            grid=GridConfig(cols=cols, row_height=self.grid.grid.row_height, gap=self.grid.grid.gap),
            slots=[
                LayoutSlot(
                    slot_key=STARTER_SLOT_KEY,
                    placement=Placement.HEADER,
                    device=self.device,
                    x=0,
                    y=0,
                    w=cols,
                    h=2,
                    order_index=0,
                )
            ],
        )

    # --- loading ---------------------------------------------------------------

    async def initialize(self) -> None:
        """Load campaigns and page keys side by side, then the layout."""
        await asyncio.gather(self.load_campaigns(), self.load_page_keys())
        await self.load_layout()

    async def load_campaigns(self) -> list[Campaign]:
        try:
            self.campaigns = await self.store.list_active_campaigns()
        except AppError as exc:
            log.warning("campaigns.load_failed", error=str(exc))
            self.notifier.error(str(exc))
        return self.campaigns

    async def load_page_keys(self) -> list[str]:
        try:
            keys = await self.store.list_page_keys()
        except AppError as exc:
            log.warning("page_keys.load_failed", error=str(exc))
            self.notifier.error(str(exc))
            return self.page_keys
        if keys:
            self.page_keys = list(keys)
            if self.page_key not in self.page_keys:
                self.page_key = self.page_keys[0]
        else:
            self.page_keys = list(self.default_page_keys)
        return self.page_keys

    async def load_layout(self) -> Layout | None:
        try:
            layout, provisioned = await self._fetch_layout()
        except AppError as exc:
            log.warning(
                "layout.load_failed", page_key=self.page_key, device=self.device.value, error=str(exc)
            )
            self.notifier.error(str(exc))
            return None
        self.notifier.success("Layout initialized" if provisioned else "Layout loaded")
        return layout

    async def _fetch_layout(self) -> tuple[Layout, bool]:
        layout = await self.store.get_layout(self.page_key, self.device)
        provisioned = False
        if layout is None or layout.layout_id is None:
            await self.store.upsert_layout(self._starter_layout())
            layout = await self.store.get_layout(self.page_key, self.device)
            if layout is None:
                raise LayoutStoreError(
                    f"layout for '{self.page_key}' ({self.device.value}) could not be provisioned"
                )
            provisioned = True
            log.info("layout.provisioned", page_key=self.page_key, device=self.device.value)
        self._apply(layout)
        log.info(
            "layout.loaded",
            page_key=self.page_key,
            device=self.device.value,
            layout_id=layout.layout_id,
            slots=len(layout.slots),
        )
        return layout, provisioned

    def _apply(self, layout: Layout) -> None:
        self.layout_id = layout.layout_id
        self.grid.grid.row_height = layout.grid.row_height
        self.grid.grid.gap = layout.grid.gap
        self.grid.replace_slots(layout.slots)
        if self.selected_slot_key is not None and self.grid.get(self.selected_slot_key) is None:
            self.selected_slot_key = None

    # --- saving ----------------------------------------------------------------

    async def persist_layout(self) -> str:
        """Upsert the full draft and reload it to pick up slot ids. Raises on failure."""
        layout_id = await self.store.upsert_layout(self.build_layout())
        self.layout_id = layout_id
        log.info(
            "layout.saved",
            page_key=self.page_key,
            device=self.device.value,
            layout_id=layout_id,
            slots=len(self.grid.slots),
        )
        await self._fetch_layout()
        return layout_id

    async def save_layout(self) -> str | None:
        try:
            layout_id = await self.persist_layout()
        except AppError as exc:
            log.warning("layout.save_failed", page_key=self.page_key, error=str(exc))
            self.notifier.error(str(exc))
            return None
        self.notifier.success("Saved", "Layout updated")
        return layout_id

    # --- selection -------------------------------------------------------------

    async def reload(
        self, *, page_key: str | None = None, device: Device | str | None = None
    ) -> Layout | None:
        """Switch page and/or device, drop the selection and load the layout."""
        if page_key:
            self.page_key = page_key
        if device is not None:
            self.grid.set_device(device)
        self._clear_selection()
        return await self.load_layout()

    async def select_page(self, page_key: str) -> Layout | None:
        return await self.reload(page_key=page_key)

    async def select_device(self, device: Device | str) -> Layout | None:
        return await self.reload(device=device)

    async def select_slot(self, slot_key: str | None) -> list[SlotAssignment]:
        """Select a slot and pull its assignments when it has a persisted id."""
        if slot_key is None or self.grid.get(slot_key) is None:
            self.selected_slot_key = None
            return []
        self.selected_slot_key = slot_key
        try:
            slot_id = await self.resolve_slot_id(slot_key)
            if slot_id:
                return await self.refresh_assignments(slot_id, slot_key)
        except AppError as exc:
            log.warning("assignments.load_failed", slot_key=slot_key, error=str(exc))
            self.notifier.error(str(exc))
        return self.assignments.get(slot_key, [])

    def _clear_selection(self) -> None:
        self.selected_slot_key = None
        self.assignments.clear()
        self.drag.abort()

    # --- draft edits -----------------------------------------------------------

    def add_slot(self) -> LayoutSlot:
        slot = self.grid.add_slot()
        self.selected_slot_key = slot.slot_key
        return slot

    def remove_slot(self, slot_key: str) -> None:
        self.grid.remove_slot(slot_key)
        self.assignments.pop(slot_key, None)
        if self.selected_slot_key == slot_key:
            self.selected_slot_key = None

    def remove_selected_slot(self) -> None:
        if self.selected_slot_key is not None:
            self.remove_slot(self.selected_slot_key)

    def update_slot(self, slot_key: str, **fields: Any) -> LayoutSlot | None:
        slot: LayoutSlot | None = None
        for name, value in fields.items():
            slot = self.grid.update_slot_field(slot_key, name, value)
            if slot is None:
                return None
        return slot if fields else self.grid.get(slot_key)

    def set_rotation_ms(self, slot_key: str, rotation_ms: int) -> LayoutSlot | None:
        slot = self.grid.get(slot_key)
        if slot is None:
            return None
        config = dict(slot.config or {})
        config["rotationMs"] = int(rotation_ms)
        return self.grid.update_slot_field(slot_key, "config", config)

    def set_library_filter(self, q: str | None = None, placement: str | None = None) -> list[Campaign]:
        self.library_filter = CampaignQuery.build(q, placement)
        return self.filtered_campaigns

    # --- assignments -----------------------------------------------------------

    async def resolve_slot_id(self, slot_key: str) -> str | None:
        """Return the persisted id of ``slot_key``, asking the store when the draft lacks it."""
        slot = self.grid.get(slot_key)
        if slot is not None and slot.slot_id:
            return slot.slot_id
        layout = await self.store.get_layout(self.page_key, self.device)
        if layout is None:
            return None
        for candidate in layout.slots:
            if candidate.slot_key == slot_key:
                return candidate.slot_id
        return None

    async def refresh_assignments(self, slot_id: str, slot_key: str) -> list[SlotAssignment]:
        items = await self.store.list_slot_assignments(slot_id)
        self.assignments[slot_key] = items
        return items

    async def next_rotation_index(self, slot_id: str, slot_key: str) -> int:
        """Rotation index for a newly dropped campaign.

        Defaults to 0, so every new assignment shares the first rotation
        position. With ``append_new_assignments`` the current list is fetched
        and the campaign goes to its end.
        """
        if not self.append_new_assignments:
            return 0
        current = await self.refresh_assignments(slot_id, slot_key)
        return len(current)


__all__ = ["LayoutBuilder", "PREVIEW_PATHS", "STARTER_SLOT_KEY"]
