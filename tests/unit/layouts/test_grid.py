from __future__ import annotations

import pytest

from src.adlayout.exceptions import InvalidSlotFieldError
from src.adlayout.layouts.grid import (
    SlotGrid,
    cell_to_pixel_rect,
    cells_per_row,
    pixel_to_cell,
    rotation_ms,
)
from src.adlayout.layouts.layouts_models import (
    Device,
    GridBounds,
    GridConfig,
    LayoutSlot,
    Placement,
)


BOUNDS = GridBounds(left=100.0, top=50.0, width=1200.0, height=600.0)


@pytest.mark.parametrize(
    ("device", "expected"),
    [(Device.DESKTOP, 12), (Device.TABLET, 8), (Device.MOBILE, 4), ("mobile", 4)],
)
def test_cells_per_row(device, expected):
    assert cells_per_row(device) == expected


@pytest.mark.parametrize("device", list(Device))
def test_rect_top_left_maps_back_to_same_cell(device):
    cols = cells_per_row(device)
    grid = GridConfig(cols=cols, row_height=40, gap=8)
    for x, y in [(0, 0), (1, 3), (cols // 2, 7), (cols - 1, 12)]:
        for w in {1, cols - x}:
            slot = LayoutSlot(slot_key="s", placement=Placement.INLINE, device=device, x=x, y=y, w=w, h=2)
            rect = cell_to_pixel_rect(slot, grid, cols)
            pointer_x = BOUNDS.left + rect.left_percent / 100 * BOUNDS.width
            pointer_y = BOUNDS.top + rect.top_px

            assert pixel_to_cell(pointer_x, pointer_y, BOUNDS, grid) == (x, y)


@pytest.mark.parametrize(
    ("pointer_x", "pointer_y"),
    [(-500.0, -500.0), (0.0, 0.0), (5000.0, 20.0), (5000.0, 9000.0), (101.0, -1.0)],
)
def test_pixel_to_cell_clamps_outside_pointers(pointer_x, pointer_y):
    grid = GridConfig(cols=12, row_height=40, gap=8)

    col, row = pixel_to_cell(pointer_x, pointer_y, BOUNDS, grid)

    assert 0 <= col <= 11
    assert row >= 0


def test_pixel_to_cell_rounds_half_up():
    grid = GridConfig(cols=4, row_height=40, gap=8)
    bounds = GridBounds(width=400.0, height=400.0)
    # column pitch is (400 - 24) / 4 + 8 = 102, row pitch is 48
    assert pixel_to_cell(51.0, 24.0, bounds, grid) == (1, 1)
    assert pixel_to_cell(50.9, 23.9, bounds, grid) == (0, 0)


def test_cell_to_pixel_rect_uses_percent_columns_and_pixel_rows():
    grid = GridConfig(cols=12, row_height=40, gap=8)
    slot = LayoutSlot(slot_key="s", placement=Placement.HEADER, device=Device.DESKTOP, x=3, y=2, w=6, h=3)

    rect = cell_to_pixel_rect(slot, grid)

    assert rect.left_percent == pytest.approx(25.0)
    assert rect.width_percent == pytest.approx(50.0)
    assert rect.top_px == 96
    assert rect.height_px == 3 * 40 + 2 * 8


def test_add_slot_defaults():
    grid = SlotGrid(Device.DESKTOP, key_factory=lambda: "slot_X")

    slot = grid.add_slot()

    assert slot.slot_key == "slot_X"
    assert slot.placement is Placement.INLINE
    assert (slot.x, slot.y, slot.w, slot.h) == (0, 0, 4, 2)
    assert slot.order_index == 0
    assert slot.is_active is True
    assert slot.slot_id is None


def test_add_slot_appends_order_index_and_random_keys_are_unique():
    grid = SlotGrid(Device.TABLET)

    for _ in range(10_000):
        grid.add_slot()

    keys = grid.keys()
    assert len(set(keys)) == 10_000
    assert all(key.startswith("slot_") for key in keys)
    assert grid.slots[-1].order_index == 9_999


def test_add_slot_regenerates_colliding_keys():
    keys = iter(["slot_a", "slot_a", "slot_b"])
    grid = SlotGrid(key_factory=lambda: next(keys))

    first = grid.add_slot()
    second = grid.add_slot()

    assert (first.slot_key, second.slot_key) == ("slot_a", "slot_b")


def test_remove_and_update_unknown_key_are_noops():
    grid = SlotGrid(key_factory=lambda: "slot_1")
    grid.add_slot()

    grid.remove_slot("missing")
    result = grid.update_slot_field("missing", "x", 3)

    assert result is None
    assert grid.keys() == ["slot_1"]


def test_remove_slot():
    grid = SlotGrid(key_factory=iter(["slot_1", "slot_2"]).__next__)
    grid.add_slot()
    grid.add_slot()

    grid.remove_slot("slot_1")

    assert grid.keys() == ["slot_2"]


def test_update_slot_field_clamps_geometry_to_grid():
    grid = SlotGrid(Device.DESKTOP, key_factory=lambda: "slot_1")
    grid.add_slot()

    grid.update_slot_field("slot_1", "x", 10)
    assert grid.get("slot_1").x == 8  # w=4 must still fit in 12 columns

    grid.update_slot_field("slot_1", "w", 20)
    assert grid.get("slot_1").w == 4

    grid.update_slot_field("slot_1", "x", 2)
    grid.update_slot_field("slot_1", "w", 20)
    assert grid.get("slot_1").w == 10

    grid.update_slot_field("slot_1", "y", -3)
    grid.update_slot_field("slot_1", "h", 0)
    slot = grid.get("slot_1")
    assert (slot.y, slot.h) == (0, 1)
    assert slot.x + slot.w <= grid.cols


def test_update_slot_field_coerces_and_validates():
    grid = SlotGrid(key_factory=lambda: "slot_1")
    grid.add_slot()

    grid.update_slot_field("slot_1", "placement", "pdf_sidebar")
    grid.update_slot_field("slot_1", "y", "4")
    grid.update_slot_field("slot_1", "config", {"rotationMs": 8000})
    grid.update_slot_field("slot_1", "is_active", False)

    slot = grid.get("slot_1")
    assert slot.placement is Placement.PDF_SIDEBAR
    assert slot.y == 4
    assert rotation_ms(slot) == 8000
    assert slot.is_active is False

    with pytest.raises(InvalidSlotFieldError):
        grid.update_slot_field("slot_1", "placement", "banner")
    with pytest.raises(InvalidSlotFieldError):
        grid.update_slot_field("slot_1", "slot_key", "other")
    with pytest.raises(InvalidSlotFieldError):
        grid.update_slot_field("slot_1", "w", "wide")
    with pytest.raises(InvalidSlotFieldError):
        grid.update_slot_field("slot_1", "config", ["rotationMs"])


def test_rotation_ms_defaults_when_unset():
    slot = LayoutSlot(slot_key="s", placement=Placement.POPUP, device=Device.MOBILE)

    assert rotation_ms(slot) == 5000


@pytest.mark.parametrize("value", ["fast", "2.5", None, [], {"ms": 1}, True])
def test_rotation_ms_falls_back_for_unusable_values(value):
    slot = LayoutSlot(
        slot_key="s", placement=Placement.POPUP, device=Device.MOBILE, config={"rotationMs": value}
    )

    assert rotation_ms(slot) == 5000


def test_rotation_ms_accepts_numeric_strings():
    slot = LayoutSlot(
        slot_key="s", placement=Placement.POPUP, device=Device.MOBILE, config={"rotationMs": "7000"}
    )

    assert rotation_ms(slot) == 7000


def test_set_device_changes_columns():
    grid = SlotGrid(Device.DESKTOP)

    grid.set_device("mobile")

    assert grid.device is Device.MOBILE
    assert grid.cols == 4
    assert grid.add_slot().w == 4
