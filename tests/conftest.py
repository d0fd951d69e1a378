from __future__ import annotations

import os

os.environ.setdefault("ADLAYOUT_STORE_BACKEND", "sqlalchemy")
os.environ.setdefault("ADLAYOUT_DATABASE_URL", "sqlite:///:memory:")


import asyncio
from typing import Any, Coroutine, TypeVar

import pytest

from src.adlayout.layouts.layouts_models import Campaign
from src.adlayout.layouts.layouts_service import LayoutBuilder
from src.adlayout.notifications import NotificationBus
from tests.mocks.layout_store import InMemoryLayoutStore

T = TypeVar("T")


def run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


@pytest.fixture
def campaigns() -> list[Campaign]:
    return [
        Campaign(id="camp-a", name="Alpha Header", placement="header", priority=10),
        Campaign(id="camp-b", name="Beta Inline", placement="inline", priority=5),
        Campaign(id="camp-c", name="alphabet Sidebar", placement="sidebar", priority=1),
    ]


@pytest.fixture
def store(campaigns: list[Campaign]) -> InMemoryLayoutStore:
    return InMemoryLayoutStore(campaigns=campaigns, page_keys=["home", "dashboard"])


@pytest.fixture
def notifier() -> NotificationBus:
    return NotificationBus()


@pytest.fixture
def builder(store: InMemoryLayoutStore, notifier: NotificationBus) -> LayoutBuilder:
    return LayoutBuilder(store, notifier=notifier)
