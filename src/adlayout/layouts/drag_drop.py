"""Drag and drop interaction controller for the layout builder.

Two gestures are interpreted: moving a slot across the grid (a pure draft
edit) and dropping a campaign onto a slot (remote calls, issued strictly in
sequence: save if needed, resolve the slot id, assign, refetch).
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

import structlog

from ..exceptions import AppError, SlotResolutionError
from .grid import pixel_to_cell
from .layouts_models import GridBounds, LayoutSlot, SlotAssignment

if TYPE_CHECKING:
    from .layouts_service import LayoutBuilder

log = structlog.get_logger(__name__)

UNRESOLVED_SLOT_MESSAGE = "Could not resolve slot id. Save layout then try again."


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING_SLOT = "dragging_slot"
    DRAGGING_CAMPAIGN = "dragging_campaign"


class DragDropController:
    """Per-gesture state machine bound to a :class:`LayoutBuilder`."""

    def __init__(self, builder: "LayoutBuilder") -> None:
        self._builder = builder
        self.state = DragState.IDLE
        self.payload: str | None = None
        self.hovered_slot_key: str | None = None

    def start_slot_drag(self, slot_key: str) -> None:
        self.state = DragState.DRAGGING_SLOT
        self.payload = slot_key
        self.hovered_slot_key = None

    def start_campaign_drag(self, campaign_id: str) -> None:
        self.state = DragState.DRAGGING_CAMPAIGN
        self.payload = campaign_id
        self.hovered_slot_key = None

    def hover_slot(self, slot_key: str | None) -> None:
        if self.state is DragState.DRAGGING_CAMPAIGN:
            self.hovered_slot_key = slot_key

    def abort(self) -> None:
        self._reset()

    def drop_on_grid(
        self, pointer_x: float, pointer_y: float, bounds: GridBounds
    ) -> LayoutSlot | None:
        """Finish a slot drag; returns the moved slot or ``None`` when nothing changed."""
        try:
            if self.state is not DragState.DRAGGING_SLOT or self.payload is None:
                return None
            if not bounds.contains(pointer_x, pointer_y):
                log.info("drag.slot_dropped_outside", slot_key=self.payload)
                return None
            grid = self._builder.grid
            col, row = pixel_to_cell(pointer_x, pointer_y, bounds, grid.grid)
            moved = grid.move_slot(self.payload, col, row)
            if moved is not None:
                log.info("drag.slot_moved", slot_key=moved.slot_key, x=moved.x, y=moved.y)
            return moved
        finally:
            self._reset()

    async def drop_on_slot(self, slot_key: str) -> list[SlotAssignment] | None:
        """Finish a campaign drag over ``slot_key``.

        Returns the refreshed assignment list, or ``None`` when no assignment
        was made. A drop while dragging a slot is left to :meth:`drop_on_grid`.
        """
        if self.state is DragState.DRAGGING_SLOT:
            return None
        if self.state is not DragState.DRAGGING_CAMPAIGN or self.payload is None:
            self._reset()
            return None
        campaign_id = self.payload
        try:
            return await self._assign(campaign_id, slot_key)
        except AppError as exc:
            log.warning(
                "assignment.failed", slot_key=slot_key, campaign_id=campaign_id, error=str(exc)
            )
            self._builder.notifier.error(str(exc))
            return None
        finally:
            self._reset()

    async def move_assignment(
        self, slot_key: str, index: int, direction: int
    ) -> list[SlotAssignment]:
        """Swap the assignment at ``index`` with its neighbour in ``direction``."""
        if direction not in (-1, 1):
            raise ValueError("direction must be -1 or 1")
        builder = self._builder
        current = builder.assignments.get(slot_key, [])
        new_index = index + direction
        if not (0 <= index < len(current) and 0 <= new_index < len(current)):
            return current
        try:
            slot_id = await builder.resolve_slot_id(slot_key)
            if not slot_id:
                return current
            first, second = current[index], current[new_index]
            # Two independent writes; a failure in between leaves the pair half swapped.
            await builder.store.update_slot_assignment_order(slot_id, first.campaign_id, new_index)
            await builder.store.update_slot_assignment_order(slot_id, second.campaign_id, index)
            log.info("assignment.reordered", slot_key=slot_key, index=index, new_index=new_index)
            return await builder.refresh_assignments(slot_id, slot_key)
        except AppError as exc:
            log.warning("assignment.reorder_failed", slot_key=slot_key, error=str(exc))
            builder.notifier.error(str(exc))
            return builder.assignments.get(slot_key, [])

    async def remove_assignment(self, slot_key: str, campaign_id: str) -> list[SlotAssignment]:
        builder = self._builder
        try:
            slot_id = await builder.resolve_slot_id(slot_key)
            if not slot_id:
                return builder.assignments.get(slot_key, [])
            await builder.store.remove_slot_assignment(slot_id, campaign_id)
            log.info("assignment.removed", slot_key=slot_key, campaign_id=campaign_id)
            return await builder.refresh_assignments(slot_id, slot_key)
        except AppError as exc:
            log.warning("assignment.remove_failed", slot_key=slot_key, error=str(exc))
            builder.notifier.error(str(exc))
            return builder.assignments.get(slot_key, [])

    async def _assign(self, campaign_id: str, slot_key: str) -> list[SlotAssignment]:
        builder = self._builder
        slot = builder.grid.get(slot_key)
        if slot is None:
            raise SlotResolutionError(f"slot '{slot_key}' is not part of the layout")
        if slot.slot_id is None:
            # The whole draft is saved, not only the target slot.
            await builder.persist_layout()
        slot_id = await builder.resolve_slot_id(slot_key)
        if not slot_id:
            raise SlotResolutionError(UNRESOLVED_SLOT_MESSAGE)
        rotation_index = await builder.next_rotation_index(slot_id, slot_key)
        await builder.store.assign_campaign_to_slot(slot_id, campaign_id, rotation_index)
        log.info(
            "assignment.created",
            slot_key=slot_key,
            slot_id=slot_id,
            campaign_id=campaign_id,
            rotation_index=rotation_index,
        )
        builder.notifier.success("Assigned", "Campaign assigned to slot")
        return await builder.refresh_assignments(slot_id, slot_key)

    def _reset(self) -> None:
        self.state = DragState.IDLE
        self.payload = None
        self.hovered_slot_key = None


__all__ = ["DragDropController", "DragState", "UNRESOLVED_SLOT_MESSAGE"]
