"""Admin routes driving the layout builder (draft edits, drag and drop, assignments)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ..exceptions import InvalidSlotFieldError
from ..notifications import NotificationBus
from .grid import rotation_ms
from .layouts_models import GridBounds, LayoutSlot, SlotAssignment
from .layouts_schemas import (
    AssignmentResponse,
    BuilderStateResponse,
    CampaignDragRequest,
    CampaignResponse,
    GridDropRequest,
    GridDropResponse,
    GridResponse,
    LoadLayoutRequest,
    MoveAssignmentRequest,
    NotificationResponse,
    PixelRectResponse,
    SlotDragRequest,
    SlotDropResponse,
    SlotHoverRequest,
    SlotResponse,
    SlotUpdateRequest,
)
from .layouts_service import LayoutBuilder

router = APIRouter(prefix="/api/ad-layouts", tags=["ad-layouts"])


def get_builder(request: Request) -> LayoutBuilder:
    try:
        return request.app.state.layout_builder  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover
        raise RuntimeError("LayoutBuilder is not configured") from exc


def get_notifier(request: Request) -> NotificationBus:
    try:
        return request.app.state.notification_bus  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover
        raise RuntimeError("NotificationBus is not configured") from exc


@router.get("/")
def fetch_state(builder: LayoutBuilder = Depends(get_builder)) -> BuilderStateResponse:
    return _state(builder)


@router.post("/load")
async def load_layout(
    payload: LoadLayoutRequest,
    builder: LayoutBuilder = Depends(get_builder),
) -> BuilderStateResponse:
    layout = await builder.reload(page_key=payload.page_key, device=payload.device)
    if layout is None:
        raise _store_failure(builder)
    return _state(builder)


@router.post("/save")
async def save_layout(builder: LayoutBuilder = Depends(get_builder)) -> BuilderStateResponse:
    layout_id = await builder.save_layout()
    if layout_id is None:
        raise _store_failure(builder)
    return _state(builder)


@router.post("/slots", status_code=status.HTTP_201_CREATED)
def add_slot(builder: LayoutBuilder = Depends(get_builder)) -> SlotResponse:
    return _slot(builder, builder.add_slot())


@router.patch("/slots/{slot_key}")
def update_slot(
    slot_key: str,
    payload: SlotUpdateRequest,
    builder: LayoutBuilder = Depends(get_builder),
) -> SlotResponse:
    _require_slot(builder, slot_key)
    fields = payload.model_dump(exclude_unset=True, exclude_none=True)
    rotation = fields.pop("rotation_ms", None)
    try:
        builder.update_slot(slot_key, **fields)
        if rotation is not None:
            builder.set_rotation_ms(slot_key, rotation)
    except InvalidSlotFieldError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"status": "error", "failure_reason": "invalid_slot_field", "details": str(exc)},
        ) from None
    return _slot(builder, _require_slot(builder, slot_key))


@router.delete("/slots/{slot_key}", status_code=status.HTTP_204_NO_CONTENT)
def remove_slot(slot_key: str, builder: LayoutBuilder = Depends(get_builder)) -> None:
    builder.remove_slot(slot_key)


@router.post("/slots/{slot_key}/select")
async def select_slot(
    slot_key: str, builder: LayoutBuilder = Depends(get_builder)
) -> list[AssignmentResponse]:
    _require_slot(builder, slot_key)
    return _assignments(await builder.select_slot(slot_key))


@router.get("/slots/{slot_key}/assignments")
def list_assignments(
    slot_key: str, builder: LayoutBuilder = Depends(get_builder)
) -> list[AssignmentResponse]:
    _require_slot(builder, slot_key)
    return _assignments(builder.assignments.get(slot_key, []))


@router.post("/slots/{slot_key}/assignments/{index}/move")
async def move_assignment(
    slot_key: str,
    index: int,
    payload: MoveAssignmentRequest,
    builder: LayoutBuilder = Depends(get_builder),
) -> list[AssignmentResponse]:
    _require_slot(builder, slot_key)
    return _assignments(await builder.drag.move_assignment(slot_key, index, payload.direction))


@router.delete("/slots/{slot_key}/assignments/{campaign_id}")
async def remove_assignment(
    slot_key: str,
    campaign_id: str,
    builder: LayoutBuilder = Depends(get_builder),
) -> list[AssignmentResponse]:
    _require_slot(builder, slot_key)
    return _assignments(await builder.drag.remove_assignment(slot_key, campaign_id))


@router.post("/drag/slot")
def start_slot_drag(
    payload: SlotDragRequest, builder: LayoutBuilder = Depends(get_builder)
) -> BuilderStateResponse:
    _require_slot(builder, payload.slot_key)
    builder.drag.start_slot_drag(payload.slot_key)
    return _state(builder)


@router.post("/drag/campaign")
def start_campaign_drag(
    payload: CampaignDragRequest, builder: LayoutBuilder = Depends(get_builder)
) -> BuilderStateResponse:
    builder.drag.start_campaign_drag(payload.campaign_id)
    return _state(builder)


@router.post("/drag/hover")
def hover_slot(
    payload: SlotHoverRequest, builder: LayoutBuilder = Depends(get_builder)
) -> BuilderStateResponse:
    """Highlight the slot under a dragged campaign; ignored for other gestures."""
    builder.drag.hover_slot(payload.slot_key)
    return _state(builder)


@router.post("/drag/abort")
def abort_drag(builder: LayoutBuilder = Depends(get_builder)) -> BuilderStateResponse:
    builder.drag.abort()
    return _state(builder)


@router.post("/drop/grid")
def drop_on_grid(
    payload: GridDropRequest, builder: LayoutBuilder = Depends(get_builder)
) -> GridDropResponse:
    bounds = GridBounds(
        left=payload.bounds.left,
        top=payload.bounds.top,
        width=payload.bounds.width,
        height=payload.bounds.height,
    )
    moved = builder.drag.drop_on_grid(payload.pointer_x, payload.pointer_y, bounds)
    if moved is None:
        return GridDropResponse(moved=False)
    return GridDropResponse(moved=True, slot=_slot(builder, moved))


@router.post("/drop/slot/{slot_key}")
async def drop_on_slot(
    slot_key: str, builder: LayoutBuilder = Depends(get_builder)
) -> SlotDropResponse:
    result = await builder.drag.drop_on_slot(slot_key)
    if result is None:
        return SlotDropResponse(
            assigned=False, assignments=_assignments(builder.assignments.get(slot_key, []))
        )
    return SlotDropResponse(assigned=True, assignments=_assignments(result))


@router.get("/campaigns")
async def list_campaigns(
    q: str = Query(default=""),
    placement: str | None = Query(default=None),
    refresh: bool = Query(default=False),
    builder: LayoutBuilder = Depends(get_builder),
) -> list[CampaignResponse]:
    if refresh or not builder.campaigns:
        await builder.load_campaigns()
    return [
        CampaignResponse(
            id=campaign.id,
            name=campaign.name,
            placement=campaign.placement,
            is_active=campaign.is_active,
            priority=campaign.priority,
        )
        for campaign in builder.set_library_filter(q, placement)
    ]


@router.get("/notifications")
def list_notifications(
    limit: int = Query(default=20, ge=1, le=200),
    notifier: NotificationBus = Depends(get_notifier),
) -> list[NotificationResponse]:
    return [
        NotificationResponse(
            title=item.title, description=item.description, variant=item.variant.value
        )
        for item in notifier.recent(limit)
    ]


def _require_slot(builder: LayoutBuilder, slot_key: str) -> LayoutSlot:
    slot = builder.grid.get(slot_key)
    if slot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"status": "error", "failure_reason": "slot_not_found"},
        )
    return slot


def _store_failure(builder: LayoutBuilder) -> HTTPException:
    latest = builder.notifier.recent(1)
    details = latest[0].description if latest else None
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={"status": "error", "failure_reason": "layout_store_failed", "details": details},
    )


def _slot(builder: LayoutBuilder, slot: LayoutSlot) -> SlotResponse:
    return SlotResponse(
        slot_key=slot.slot_key,
        slot_id=slot.slot_id,
        placement=slot.placement,
        device=slot.device,
        x=slot.x,
        y=slot.y,
        w=slot.w,
        h=slot.h,
        order_index=slot.order_index,
        config=dict(slot.config or {}),
        is_active=slot.is_active,
        rotation_ms=rotation_ms(slot),
        rect=PixelRectResponse.from_domain(builder.grid.rect_for(slot)),
    )


def _assignments(items: list[SlotAssignment]) -> list[AssignmentResponse]:
    return [
        AssignmentResponse(
            campaign_id=item.campaign_id, name=item.name, rotation_index=item.rotation_index
        )
        for item in items
    ]


def _state(builder: LayoutBuilder) -> BuilderStateResponse:
    grid = builder.grid.grid
    return BuilderStateResponse(
        page_key=builder.page_key,
        device=builder.device,
        layout_id=builder.layout_id,
        grid=GridResponse(cols=grid.cols, row_height=grid.row_height, gap=grid.gap),
        slots=[_slot(builder, slot) for slot in builder.slots],
        selected_slot_key=builder.selected_slot_key,
        page_keys=list(builder.page_keys),
        preview_path=builder.preview_path(),
        drag_state=builder.drag.state.value,
        drag_payload=builder.drag.payload,
        hovered_slot_key=builder.drag.hovered_slot_key,
    )
