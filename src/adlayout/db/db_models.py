"""SQLAlchemy ORM models for the local layout store."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base declarative class."""


class AdPageModel(Base):
    __tablename__ = "ad_pages"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)


class AdCampaignModel(Base):
    __tablename__ = "ad_campaigns"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    placement: Mapped[str] = mapped_column(String(32), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)


class AdLayoutModel(Base):
    __tablename__ = "ad_layouts"
    __table_args__ = (UniqueConstraint("page_key", "device", name="uq_ad_layouts_page_device"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    page_key: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    device: Mapped[str] = mapped_column(String(16), nullable=False)
    name: Mapped[str] = mapped_column(String(64), nullable=False, default="default")
    route_pattern: Mapped[str | None] = mapped_column(String(256))
    grid_config_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)

    slots: Mapped[list["AdSlotModel"]] = relationship(
        back_populates="layout",
        cascade="all, delete-orphan",
        order_by="AdSlotModel.order_index",
    )


class AdSlotModel(Base):
    __tablename__ = "ad_slots"
    __table_args__ = (UniqueConstraint("layout_id", "slot_key", name="uq_ad_slots_layout_key"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    layout_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("ad_layouts.id"), nullable=False, index=True
    )
    slot_key: Mapped[str] = mapped_column(String(64), nullable=False)
    placement: Mapped[str] = mapped_column(String(32), nullable=False)
    device: Mapped[str] = mapped_column(String(16), nullable=False)
    x: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    y: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    w: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    h: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    config_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    layout: Mapped[AdLayoutModel] = relationship(back_populates="slots")
    assignments: Mapped[list["AdSlotAssignmentModel"]] = relationship(
        back_populates="slot",
        cascade="all, delete-orphan",
    )


class AdSlotAssignmentModel(Base):
    __tablename__ = "ad_slot_assignments"

    slot_id: Mapped[str] = mapped_column(String(36), ForeignKey("ad_slots.id"), primary_key=True)
    campaign_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("ad_campaigns.id"), primary_key=True
    )
    rotation_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)

    slot: Mapped[AdSlotModel] = relationship(back_populates="assignments")
    campaign: Mapped[AdCampaignModel] = relationship()
