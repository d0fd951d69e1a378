"""Layout domain dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Device(str, Enum):
    DESKTOP = "desktop"
    TABLET = "tablet"
    MOBILE = "mobile"


class Placement(str, Enum):
    HEADER = "header"
    FOOTER = "footer"
    SIDEBAR = "sidebar"
    INLINE = "inline"
    POPUP = "popup"
    PDF_SIDEBAR = "pdf_sidebar"
    FLOATER = "floater"


COLS_BY_DEVICE: dict[Device, int] = {
    Device.DESKTOP: 12,
    Device.TABLET: 8,
    Device.MOBILE: 4,
}

DEFAULT_ROTATION_MS = 5000


@dataclass(slots=True)
class GridConfig:
    cols: int = 12
    row_height: int = 40
    gap: int = 8


@dataclass(slots=True)
class GridBounds:
    """Bounding box of the rendered grid in pointer coordinates."""

    width: float
    height: float
    left: float = 0.0
    top: float = 0.0

    def contains(self, x: float, y: float) -> bool:
        return (
            self.left <= x <= self.left + self.width
            and self.top <= y <= self.top + self.height
        )


@dataclass(slots=True)
class PixelRect:
    left_percent: float
    width_percent: float
    top_px: float
    height_px: float


@dataclass(slots=True)
class LayoutSlot:
    """Slot view-model as edited in the local draft."""

    slot_key: str
    placement: Placement
    device: Device
    x: int = 0
    y: int = 0
    w: int = 4
    h: int = 2
    order_index: int = 0
    config: dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    slot_id: str | None = None


@dataclass(slots=True)
class Layout:
    page_key: str
    device: Device
    grid: GridConfig
    slots: list[LayoutSlot] = field(default_factory=list)
    name: str = "default"
    route_pattern: str | None = None
    layout_id: str | None = None


@dataclass(slots=True)
class Campaign:
    id: str
    name: str
    placement: str
    is_active: bool = True
    priority: int = 0


@dataclass(slots=True)
class SlotAssignment:
    campaign_id: str
    name: str
    rotation_index: int
    is_active: bool = True


__all__ = [
    "COLS_BY_DEVICE",
    "DEFAULT_ROTATION_MS",
    "Campaign",
    "Device",
    "GridBounds",
    "GridConfig",
    "Layout",
    "LayoutSlot",
    "PixelRect",
    "Placement",
    "SlotAssignment",
]
