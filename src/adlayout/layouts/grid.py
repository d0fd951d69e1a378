"""Slot grid model: cell/pixel geometry and the working set of draft slots."""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Iterable
from uuid import uuid4

from ..exceptions import InvalidSlotFieldError
from .layouts_models import (
    COLS_BY_DEVICE,
    DEFAULT_ROTATION_MS,
    Device,
    GridBounds,
    GridConfig,
    LayoutSlot,
    PixelRect,
    Placement,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"x", "y", "w", "h", "placement", "config", "is_active", "order_index"})
_INT_FIELDS = frozenset({"x", "y", "w", "h", "order_index"})


def cells_per_row(device: Device | str) -> int:
    return COLS_BY_DEVICE[Device(device)]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def pixel_to_cell(
    pointer_x: float,
    pointer_y: float,
    bounds: GridBounds,
    grid: GridConfig,
) -> tuple[int, int]:
    """Map a pointer position onto the (col, row) cell under it.

    The column is clamped to ``[0, cols - 1]`` and the row to ``>= 0`` so
    pointers outside the grid still land on a valid cell.
    """
    cols = grid.cols
    col_width = (bounds.width - grid.gap * (cols - 1)) / cols
    rel_x = pointer_x - bounds.left
    rel_y = pointer_y - bounds.top
    col = _round_half_up(rel_x / (col_width + grid.gap))
    row = _round_half_up(rel_y / (grid.row_height + grid.gap))
    return max(0, min(cols - 1, col)), max(0, row)


def cell_to_pixel_rect(slot: LayoutSlot, grid: GridConfig, cols: int | None = None) -> PixelRect:
    """Percentage based horizontal placement, pixel based vertical placement."""
    cols = cols or grid.cols
    column_percent = 100 / cols
    return PixelRect(
        left_percent=column_percent * slot.x,
        width_percent=column_percent * slot.w,
        top_px=slot.y * (grid.row_height + grid.gap),
        height_px=slot.h * grid.row_height + (slot.h - 1) * grid.gap,
    )


def rotation_ms(slot: LayoutSlot) -> int:
    """Rotation interval of ``slot``; unset or non-numeric values fall back to the default."""
    value = (slot.config or {}).get("rotationMs")
    if not value or isinstance(value, bool):
        return DEFAULT_ROTATION_MS
    try:
        return int(value)
    except (TypeError, ValueError):
        return DEFAULT_ROTATION_MS


def _random_slot_key() -> str:
    return f"slot_{uuid4().hex[:8]}"


class SlotGrid:
    """Working set of draft slots for the selected page and device.

    Edits addressed to an unknown key are silent no-ops.
    """

    def __init__(
        self,
        device: Device = Device.DESKTOP,
        *,
        row_height: int = 40,
        gap: int = 8,
        slots: Iterable[LayoutSlot] = (),
        key_factory: Callable[[], str] | None = None,
    ) -> None:
        self.device = Device(device)
        self.grid = GridConfig(cols=cells_per_row(self.device), row_height=row_height, gap=gap)
        self.slots: list[LayoutSlot] = list(slots)
        self._key_factory = key_factory or _random_slot_key

    @property
    def cols(self) -> int:
        return self.grid.cols

    def set_device(self, device: Device | str) -> None:
        self.device = Device(device)
        self.grid.cols = cells_per_row(self.device)

    def replace_slots(self, slots: Iterable[LayoutSlot]) -> None:
        self.slots = list(slots)

    def get(self, slot_key: str) -> LayoutSlot | None:
        for slot in self.slots:
            if slot.slot_key == slot_key:
                return slot
        return None

    def keys(self) -> list[str]:
        return [slot.slot_key for slot in self.slots]

    def add_slot(self) -> LayoutSlot:
        existing = set(self.keys())
        key = self._key_factory()
        while key in existing:
            key = self._key_factory()
        slot = LayoutSlot(
            slot_key=key,
            placement=Placement.INLINE,
            device=self.device,
            x=0,
            y=0,
            w=max(4, self.cols // 3),
            h=2,
            order_index=len(self.slots),
            config={},
            is_active=True,
        )
        self.slots.append(slot)
        return slot

    def remove_slot(self, slot_key: str) -> None:
        self.slots = [slot for slot in self.slots if slot.slot_key != slot_key]

    def update_slot_field(self, slot_key: str, field: str, value: Any) -> LayoutSlot | None:
        if field not in EDITABLE_FIELDS:
            raise InvalidSlotFieldError(f"field '{field}' is not editable")
        slot = self.get(slot_key)
        if slot is None:
            return None
        setattr(slot, field, self._coerce(slot, field, value))
        return slot

    def move_slot(self, slot_key: str, col: int, row: int) -> LayoutSlot | None:
        slot = self.get(slot_key)
        if slot is None:
            return None
        self.update_slot_field(slot_key, "x", col)
        self.update_slot_field(slot_key, "y", row)
        return slot

    def rect_for(self, slot: LayoutSlot) -> PixelRect:
        return cell_to_pixel_rect(slot, self.grid, self.cols)

    def _coerce(self, slot: LayoutSlot, field: str, value: Any) -> Any:
        if field in _INT_FIELDS:
            try:
                number = int(value)
            except (TypeError, ValueError):
                raise InvalidSlotFieldError(f"{field} must be an integer, got {value!r}") from None
            return self._clamp(slot, field, number)
        if field == "placement":
            try:
                return Placement(value)
            except ValueError:
                raise InvalidSlotFieldError(f"unknown placement {value!r}") from None
        if field == "config":
            if not isinstance(value, dict):
                raise InvalidSlotFieldError("config must be a mapping")
            return dict(value)
        return bool(value)

    def _clamp(self, slot: LayoutSlot, field: str, value: int) -> int:
        cols = self.cols
        if field == "x":
            clamped = max(0, min(value, cols - slot.w))
        elif field == "w":
            clamped = max(1, min(value, cols - slot.x))
        elif field == "h":
            clamped = max(1, value)
        else:
            clamped = max(0, value)
        if clamped != value:
            logger.debug(
                "slot.field_clamped",
                extra={"slot_key": slot.slot_key, "field": field, "requested": value, "applied": clamped},
            )
        return clamped


__all__ = [
    "EDITABLE_FIELDS",
    "SlotGrid",
    "cell_to_pixel_rect",
    "cells_per_row",
    "pixel_to_cell",
    "rotation_ms",
]
