"""Dependency wiring helpers."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from .config import AppConfig
from .db.db_init import build_session_factory, init_db
from .layouts.layouts_api import router as layouts_router
from .layouts.layouts_service import LayoutBuilder
from .notifications import NotificationBus
from .repositories.interfaces import LayoutStore
from .repositories.sqlalchemy_layout_store import SqlAlchemyLayoutStore
from .repositories.supabase_layout_store import SupabaseLayoutStore

logger = logging.getLogger(__name__)


def build_store(config: AppConfig) -> LayoutStore:
    """Instantiate the layout store selected by ``config.store_backend``."""
    if config.store_backend == "supabase":
        assert config.supabase_url and config.supabase_key
        return SupabaseLayoutStore(
            base_url=config.supabase_url,
            api_key=config.supabase_key,
            timeout_seconds=config.request_timeout_seconds,
        )
    engine, session_factory = build_session_factory(config.database_url)
    init_db(engine, session_factory, page_keys=config.default_page_keys)
    return SqlAlchemyLayoutStore(session_factory)


def include_routers(app: FastAPI, config: AppConfig, store: LayoutStore | None = None) -> None:
    """Mount module routers and attach services."""
    layout_store = store if store is not None else build_store(config)
    notification_bus = NotificationBus(history_limit=config.notification_history_limit)
    layout_builder = LayoutBuilder.from_config(layout_store, notification_bus, config)

    app.state.config = config
    app.state.layout_store = layout_store
    app.state.notification_bus = notification_bus
    app.state.layout_builder = layout_builder

    app.include_router(layouts_router)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load campaigns, page keys and the first layout; close the store on exit."""
    if getattr(app.state, "disable_builder_bootstrap", False):
        logger.info("Layout builder bootstrap skipped: disabled via app state")
    else:
        await app.state.layout_builder.initialize()
    try:
        yield
    finally:
        close = getattr(app.state.layout_store, "aclose", None)
        if close is not None:
            await close()
