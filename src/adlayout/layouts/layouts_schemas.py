"""Pydantic schemas for the layout store wire format and the admin API."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .layouts_models import (
    Campaign,
    Device,
    GridConfig,
    Layout,
    LayoutSlot,
    PixelRect,
    Placement,
    SlotAssignment,
)


# --- wire format of the managed data service -------------------------------


class GridConfigPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cols: int = Field(default=12, ge=1)
    row_height: int = Field(default=40, ge=1, alias="rowHeight")
    gap: int = Field(default=8, ge=0)

    @classmethod
    def from_domain(cls, grid: GridConfig) -> "GridConfigPayload":
        return cls(cols=grid.cols, row_height=grid.row_height, gap=grid.gap)

    def to_domain(self) -> GridConfig:
        return GridConfig(cols=self.cols, row_height=self.row_height, gap=self.gap)


class LayoutSlotPayload(BaseModel):
    slot_key: str = Field(..., min_length=1)
    placement: Placement
    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    w: int = Field(..., ge=0)
    h: int = Field(..., ge=0)
    order_index: int = 0
    config: dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True

    @classmethod
    def from_domain(cls, slot: LayoutSlot) -> "LayoutSlotPayload":
        return cls(
            slot_key=slot.slot_key,
            placement=slot.placement,
            x=slot.x,
            y=slot.y,
            w=slot.w,
            h=slot.h,
            order_index=slot.order_index,
            config=dict(slot.config or {}),
            is_active=slot.is_active,
        )


class LayoutUpsertPayload(BaseModel):
    page_key: str = Field(..., min_length=1)
    route_pattern: str | None = None
    device: Device
    name: str = "default"
    grid_config: GridConfigPayload
    slots: list[LayoutSlotPayload] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, layout: Layout) -> "LayoutUpsertPayload":
        return cls(
            page_key=layout.page_key,
            route_pattern=layout.route_pattern,
            device=layout.device,
            name=layout.name,
            grid_config=GridConfigPayload.from_domain(layout.grid),
            slots=[LayoutSlotPayload.from_domain(slot) for slot in layout.slots],
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class LayoutSlotRecord(LayoutSlotPayload):
    slot_id: str
    device: Device | None = None

    def to_domain(self, default_device: Device) -> LayoutSlot:
        return LayoutSlot(
            slot_id=self.slot_id,
            slot_key=self.slot_key,
            placement=self.placement,
            device=self.device or default_device,
            x=self.x,
            y=self.y,
            w=self.w,
            h=self.h,
            order_index=self.order_index,
            config=dict(self.config or {}),
            is_active=self.is_active,
        )


class LayoutRecord(BaseModel):
    layout_id: str | None = None
    name: str | None = None
    grid_config: GridConfigPayload | None = None
    slots: list[LayoutSlotRecord] = Field(default_factory=list)

    def to_domain(self, page_key: str, device: Device) -> Layout:
        grid = self.grid_config.to_domain() if self.grid_config else GridConfig()
        return Layout(
            layout_id=self.layout_id,
            page_key=page_key,
            device=device,
            name=self.name or "default",
            grid=grid,
            slots=[slot.to_domain(device) for slot in self.slots],
        )


class CampaignRecord(BaseModel):
    id: str
    name: str
    placement: str
    is_active: bool = True
    priority: int = 0

    def to_domain(self) -> Campaign:
        return Campaign(
            id=self.id,
            name=self.name,
            placement=self.placement,
            is_active=self.is_active,
            priority=self.priority,
        )


class _CampaignName(BaseModel):
    name: str


class SlotAssignmentRecord(BaseModel):
    campaign_id: str
    rotation_index: int
    ad_campaigns: _CampaignName

    def to_domain(self) -> SlotAssignment:
        return SlotAssignment(
            campaign_id=self.campaign_id,
            name=self.ad_campaigns.name,
            rotation_index=self.rotation_index,
        )


# --- admin API ---------------------------------------------------------------


class PixelRectResponse(BaseModel):
    left_percent: float
    width_percent: float
    top_px: float
    height_px: float

    @classmethod
    def from_domain(cls, rect: PixelRect) -> "PixelRectResponse":
        return cls(
            left_percent=rect.left_percent,
            width_percent=rect.width_percent,
            top_px=rect.top_px,
            height_px=rect.height_px,
        )


class SlotResponse(BaseModel):
    slot_key: str
    slot_id: str | None
    placement: Placement
    device: Device
    x: int
    y: int
    w: int
    h: int
    order_index: int
    config: dict[str, Any]
    is_active: bool
    rotation_ms: int
    rect: PixelRectResponse


class GridResponse(BaseModel):
    cols: int
    row_height: int
    gap: int


class BuilderStateResponse(BaseModel):
    page_key: str
    device: Device
    layout_id: str | None
    grid: GridResponse
    slots: list[SlotResponse]
    selected_slot_key: str | None
    page_keys: list[str]
    preview_path: str
    drag_state: str
    drag_payload: str | None
    hovered_slot_key: str | None


class LoadLayoutRequest(BaseModel):
    page_key: str | None = None
    device: Device | None = None


class SlotUpdateRequest(BaseModel):
    x: int | None = None
    y: int | None = None
    w: int | None = None
    h: int | None = None
    order_index: int | None = None
    placement: Placement | None = None
    config: dict[str, Any] | None = None
    is_active: bool | None = None
    rotation_ms: int | None = Field(default=None, ge=0)


class SlotDragRequest(BaseModel):
    slot_key: str


class SlotHoverRequest(BaseModel):
    slot_key: str | None = None


class CampaignDragRequest(BaseModel):
    campaign_id: str


class GridBoundsPayload(BaseModel):
    left: float = 0.0
    top: float = 0.0
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class GridDropRequest(BaseModel):
    pointer_x: float
    pointer_y: float
    bounds: GridBoundsPayload


class GridDropResponse(BaseModel):
    moved: bool
    slot: SlotResponse | None = None


class AssignmentResponse(BaseModel):
    campaign_id: str
    name: str
    rotation_index: int


class SlotDropResponse(BaseModel):
    assigned: bool
    assignments: list[AssignmentResponse]


class MoveAssignmentRequest(BaseModel):
    direction: Literal[-1, 1]


class CampaignResponse(BaseModel):
    id: str
    name: str
    placement: str
    is_active: bool
    priority: int


class NotificationResponse(BaseModel):
    title: str
    description: str | None
    variant: str
