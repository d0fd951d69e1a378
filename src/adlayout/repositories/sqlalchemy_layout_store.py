"""Layout store backed by a local SQLAlchemy database.

Mirrors the remote procedures of the managed data service so the builder can
run against SQLite during development and in tests.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..db.db_models import (
    AdCampaignModel,
    AdLayoutModel,
    AdPageModel,
    AdSlotAssignmentModel,
    AdSlotModel,
)
from ..exceptions import ensure_found, handle_sqlalchemy_errors
from ..layouts.layouts_models import (
    Campaign,
    Device,
    GridConfig,
    Layout,
    LayoutSlot,
    Placement,
    SlotAssignment,
)

logger = logging.getLogger(__name__)


class SqlAlchemyLayoutStore:
    """Provide layout store operations on top of the ORM models.

    Methods are coroutines to satisfy :class:`LayoutStore`, but the session
    work runs synchronously on the calling loop. Database errors surface as
    :class:`LayoutStoreError` subclasses on reads and writes alike.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    async def get_layout(self, page_key: str, device: Device) -> Layout | None:
        with handle_sqlalchemy_errors(entity="layout"), self._session_factory() as session:
            row = self._find_layout(session, page_key, Device(device).value)
            if row is None:
                return None
            return self._to_domain(row)

    async def upsert_layout(self, layout: Layout) -> str:
        device = Device(layout.device).value
        with handle_sqlalchemy_errors(entity="layout"), self._session_factory() as session:
            row = self._find_layout(session, layout.page_key, device)
            if row is None:
                row = AdLayoutModel(page_key=layout.page_key, device=device)
                session.add(row)
            row.name = layout.name
            row.route_pattern = layout.route_pattern
            row.grid_config_json = json.dumps(
                {"cols": layout.grid.cols, "rowHeight": layout.grid.row_height, "gap": layout.grid.gap}
            )
            row.updated_at = datetime.now(timezone.utc)

            existing = {slot.slot_key: slot for slot in row.slots}
            incoming_keys = {slot.slot_key for slot in layout.slots}
            for key, slot_row in existing.items():
                if key not in incoming_keys:
                    row.slots.remove(slot_row)
            for slot in layout.slots:
                slot_row = existing.get(slot.slot_key)
                if slot_row is None:
                    slot_row = AdSlotModel(slot_key=slot.slot_key)
                    row.slots.append(slot_row)
                slot_row.placement = Placement(slot.placement).value
                slot_row.device = device
                slot_row.x = slot.x
                slot_row.y = slot.y
                slot_row.w = slot.w
                slot_row.h = slot.h
                slot_row.order_index = slot.order_index
                slot_row.config_json = json.dumps(slot.config or {})
                slot_row.is_active = slot.is_active
            session.commit()
            logger.info(
                "layout_store.upserted",
                extra={"layout_id": row.id, "page_key": layout.page_key, "slots": len(layout.slots)},
            )
            return row.id

    async def assign_campaign_to_slot(
        self, slot_id: str, campaign_id: str, rotation_index: int
    ) -> None:
        with handle_sqlalchemy_errors(entity="slot assignment"), self._session_factory() as session:
            ensure_found(session.get(AdSlotModel, slot_id), entity="Slot", identifier=slot_id)
            ensure_found(
                session.get(AdCampaignModel, campaign_id), entity="Campaign", identifier=campaign_id
            )
            assignment = session.get(AdSlotAssignmentModel, (slot_id, campaign_id))
            if assignment is None:
                assignment = AdSlotAssignmentModel(slot_id=slot_id, campaign_id=campaign_id)
                session.add(assignment)
            assignment.rotation_index = rotation_index
            assignment.is_active = True
            session.commit()

    async def update_slot_assignment_order(
        self, slot_id: str, campaign_id: str, rotation_index: int
    ) -> None:
        with handle_sqlalchemy_errors(entity="slot assignment"), self._session_factory() as session:
            assignment = ensure_found(
                session.get(AdSlotAssignmentModel, (slot_id, campaign_id)),
                entity="Assignment",
                identifier=f"{slot_id}/{campaign_id}",
            )
            assignment.rotation_index = rotation_index  # type: ignore[attr-defined]
            session.commit()

    async def remove_slot_assignment(self, slot_id: str, campaign_id: str) -> None:
        with handle_sqlalchemy_errors(entity="slot assignment"), self._session_factory() as session:
            assignment = session.get(AdSlotAssignmentModel, (slot_id, campaign_id))
            if assignment is None:
                return
            session.delete(assignment)
            session.commit()

    async def list_active_campaigns(self) -> list[Campaign]:
        with handle_sqlalchemy_errors(entity="campaign"), self._session_factory() as session:
            rows = session.scalars(
                select(AdCampaignModel)
                .where(AdCampaignModel.is_active.is_(True))
                .order_by(AdCampaignModel.priority.desc(), AdCampaignModel.created_at)
            ).all()
            return [
                Campaign(
                    id=row.id,
                    name=row.name,
                    placement=row.placement,
                    is_active=row.is_active,
                    priority=row.priority,
                )
                for row in rows
            ]

    async def list_page_keys(self) -> list[str]:
        with handle_sqlalchemy_errors(entity="page"), self._session_factory() as session:
            return list(session.scalars(select(AdPageModel.key).order_by(AdPageModel.key)).all())

    async def list_slot_assignments(self, slot_id: str) -> list[SlotAssignment]:
        with handle_sqlalchemy_errors(entity="slot assignment"), self._session_factory() as session:
            rows = session.execute(
                select(AdSlotAssignmentModel, AdCampaignModel.name)
                .join(AdCampaignModel, AdCampaignModel.id == AdSlotAssignmentModel.campaign_id)
                .where(
                    AdSlotAssignmentModel.slot_id == slot_id,
                    AdSlotAssignmentModel.is_active.is_(True),
                )
                .order_by(AdSlotAssignmentModel.rotation_index, AdSlotAssignmentModel.created_at)
            ).all()
            return [
                SlotAssignment(
                    campaign_id=assignment.campaign_id,
                    name=name,
                    rotation_index=assignment.rotation_index,
                    is_active=assignment.is_active,
                )
                for assignment, name in rows
            ]

    @staticmethod
    def _find_layout(session: Session, page_key: str, device: str) -> AdLayoutModel | None:
        return (
            session.query(AdLayoutModel)
            .options(selectinload(AdLayoutModel.slots))
            .filter(AdLayoutModel.page_key == page_key, AdLayoutModel.device == device)
            .one_or_none()
        )

    @staticmethod
    def _to_domain(model: AdLayoutModel) -> Layout:
        try:
            grid_raw = json.loads(model.grid_config_json or "{}")
        except json.JSONDecodeError:
            grid_raw = {}
        device = Device(model.device)
        return Layout(
            layout_id=model.id,
            page_key=model.page_key,
            device=device,
            name=model.name,
            route_pattern=model.route_pattern,
            grid=GridConfig(
                cols=int(grid_raw.get("cols", 12)),
                row_height=int(grid_raw.get("rowHeight", 40)),
                gap=int(grid_raw.get("gap", 8)),
            ),
            slots=[SqlAlchemyLayoutStore._slot_to_domain(slot) for slot in model.slots],
        )

    @staticmethod
    def _slot_to_domain(model: AdSlotModel) -> LayoutSlot:
        try:
            config = json.loads(model.config_json or "{}")
        except json.JSONDecodeError:
            config = {}
        return LayoutSlot(
            slot_id=model.id,
            slot_key=model.slot_key,
            placement=Placement(model.placement),
            device=Device(model.device),
            x=model.x,
            y=model.y,
            w=model.w,
            h=model.h,
            order_index=model.order_index,
            config=config,
            is_active=model.is_active,
        )
