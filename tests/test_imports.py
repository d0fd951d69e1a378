"""Smoke-check imports for the layout builder packages."""

from __future__ import annotations

from importlib import import_module
from types import ModuleType

import pytest

MODULES_AND_SYMBOLS = [
    ("src.adlayout.main", "create_app"),
    ("src.adlayout.config", "AppConfig"),
    ("src.adlayout.dependencies", "build_store"),
    ("src.adlayout.exceptions", "RemoteCallError"),
    ("src.adlayout.logging", "configure_logging"),
    ("src.adlayout.notifications", "NotificationBus"),
    ("src.adlayout.db", "init_db"),
    ("src.adlayout.layouts", "LayoutBuilder"),
    ("src.adlayout.layouts", "DragDropController"),
    ("src.adlayout.layouts", "SlotGrid"),
    ("src.adlayout.layouts", "filter_campaigns"),
    ("src.adlayout.layouts.layouts_api", "router"),
    ("src.adlayout.layouts.layouts_schemas", "LayoutUpsertPayload"),
    ("src.adlayout.repositories", "LayoutStore"),
    ("src.adlayout.repositories", "SqlAlchemyLayoutStore"),
    ("src.adlayout.repositories", "SupabaseLayoutStore"),
]


@pytest.mark.parametrize(("module_name", "symbol"), MODULES_AND_SYMBOLS)
def test_importable_symbols(module_name: str, symbol: str) -> None:
    """Import modules and verify that public symbols are exposed."""

    module: ModuleType = import_module(module_name)
    assert hasattr(module, symbol), f"{module_name} missing {symbol}"
