from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi import status
from fastapi.testclient import TestClient

from src.adlayout.config import AppConfig
from src.adlayout.main import create_app
from tests.mocks.layout_store import InMemoryLayoutStore

BOUNDS = {"left": 100.0, "top": 50.0, "width": 1200.0, "height": 600.0}
BASE = "/api/ad-layouts"


@pytest.fixture
def api_store(campaigns) -> InMemoryLayoutStore:
    return InMemoryLayoutStore(campaigns=campaigns, page_keys=["home", "dashboard"])


@pytest.fixture
def client(api_store) -> TestClient:
    app = create_app(config=AppConfig(), store=api_store)
    client = TestClient(app)
    response = client.post(f"{BASE}/load", json={})
    assert response.status_code == status.HTTP_200_OK
    return client


def test_lifespan_bootstraps_builder(api_store) -> None:
    app = create_app(config=AppConfig(), store=api_store)

    with TestClient(app) as client:
        state = client.get(f"{BASE}/").json()

    assert state["page_keys"] == ["dashboard", "home"]
    assert [slot["slot_key"] for slot in state["slots"]] == ["header_top"]
    assert state["preview_path"] == "/"
    assert state["drag_state"] == "idle"


def test_load_other_device(client: TestClient) -> None:
    response = client.post(f"{BASE}/load", json={"device": "tablet"})

    state = response.json()
    assert state["device"] == "tablet"
    assert state["grid"] == {"cols": 8, "row_height": 40, "gap": 8}
    assert state["slots"][0]["w"] == 8


def test_load_failure_maps_to_bad_gateway(client: TestClient, api_store) -> None:
    api_store.fail_on.add("get_layout")

    response = client.post(f"{BASE}/load", json={"page_key": "dashboard"})

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert response.json()["detail"]["failure_reason"] == "layout_store_failed"


def test_add_update_and_remove_slot(client: TestClient) -> None:
    created = client.post(f"{BASE}/slots")
    assert created.status_code == status.HTTP_201_CREATED
    key = created.json()["slot_key"]
    assert created.json()["w"] == 4
    assert client.get(f"{BASE}/").json()["selected_slot_key"] == key

    updated = client.patch(f"{BASE}/slots/{key}", json={"x": 11, "placement": "footer", "rotation_ms": 7000})
    body = updated.json()
    assert (body["x"], body["placement"], body["rotation_ms"]) == (8, "footer", 7000)
    assert body["rect"]["left_percent"] == pytest.approx(100 / 12 * 8)

    assert client.delete(f"{BASE}/slots/{key}").status_code == status.HTTP_204_NO_CONTENT
    assert client.patch(f"{BASE}/slots/{key}", json={"x": 1}).status_code == status.HTTP_404_NOT_FOUND


def test_invalid_slot_field_is_rejected(client: TestClient) -> None:
    response = client.patch(f"{BASE}/slots/header_top", json={"placement": "banner"})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_free_form_config_does_not_break_state(client: TestClient) -> None:
    updated = client.patch(f"{BASE}/slots/header_top", json={"config": {"rotationMs": "fast"}})

    assert updated.status_code == status.HTTP_200_OK
    assert updated.json()["config"] == {"rotationMs": "fast"}
    assert updated.json()["rotation_ms"] == 5000
    state = client.get(f"{BASE}/")
    assert state.status_code == status.HTTP_200_OK
    assert state.json()["slots"][0]["rotation_ms"] == 5000


def test_drag_slot_to_cell(client: TestClient) -> None:
    key = client.post(f"{BASE}/slots").json()["slot_key"]
    client.post(f"{BASE}/drag/slot", json={"slot_key": key})

    response = client.post(
        f"{BASE}/drop/grid", json={"pointer_x": 704.0, "pointer_y": 194.0, "bounds": BOUNDS}
    )

    body = response.json()
    assert body["moved"] is True
    assert (body["slot"]["x"], body["slot"]["y"]) == (6, 3)
    assert client.get(f"{BASE}/").json()["drag_state"] == "idle"


def test_drop_campaign_assigns_and_lists(client: TestClient, api_store) -> None:
    state = client.post(f"{BASE}/drag/campaign", json={"campaign_id": "camp-a"}).json()
    assert (state["drag_state"], state["drag_payload"]) == ("dragging_campaign", "camp-a")

    response = client.post(f"{BASE}/drop/slot/header_top")

    assert response.json() == {
        "assigned": True,
        "assignments": [{"campaign_id": "camp-a", "name": "Alpha Header", "rotation_index": 0}],
    }
    assert client.get(f"{BASE}/slots/header_top/assignments").json()[0]["campaign_id"] == "camp-a"
    notifications = client.get(f"{BASE}/notifications", params={"limit": 1}).json()
    assert notifications == [
        {"title": "Assigned", "description": "Campaign assigned to slot", "variant": "default"}
    ]


def test_hover_highlights_slot_only_while_dragging_campaign(client: TestClient) -> None:
    idle = client.post(f"{BASE}/drag/hover", json={"slot_key": "header_top"}).json()
    assert idle["hovered_slot_key"] is None

    client.post(f"{BASE}/drag/campaign", json={"campaign_id": "camp-a"})
    hovered = client.post(f"{BASE}/drag/hover", json={"slot_key": "header_top"}).json()
    assert hovered["hovered_slot_key"] == "header_top"

    left = client.post(f"{BASE}/drag/hover", json={"slot_key": None}).json()
    assert left["hovered_slot_key"] is None
    assert left["drag_state"] == "dragging_campaign"


def test_reorder_and_remove_assignments(client: TestClient, api_store) -> None:
    api_store.assignments["s1"] = {"camp-a": 0, "camp-b": 1}
    client.post(f"{BASE}/slots/header_top/select")

    moved = client.post(f"{BASE}/slots/header_top/assignments/0/move", json={"direction": 1}).json()
    assert [item["campaign_id"] for item in moved] == ["camp-b", "camp-a"]

    remaining = client.delete(f"{BASE}/slots/header_top/assignments/camp-b").json()
    assert [item["campaign_id"] for item in remaining] == ["camp-a"]

    bad = client.post(f"{BASE}/slots/header_top/assignments/0/move", json={"direction": 2})
    assert bad.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_campaign_library_filter(client: TestClient) -> None:
    response = client.get(f"{BASE}/campaigns", params={"q": "ALPHA", "placement": "all"})

    assert [item["id"] for item in response.json()] == ["camp-a", "camp-c"]

    sidebar = client.get(f"{BASE}/campaigns", params={"placement": "sidebar"}).json()
    assert [item["id"] for item in sidebar] == ["camp-c"]


def test_save_layout(client: TestClient, api_store) -> None:
    client.post(f"{BASE}/slots")

    response = client.post(f"{BASE}/save")

    assert response.status_code == status.HTTP_200_OK
    assert all(slot["slot_id"] for slot in response.json()["slots"])
    api_store.fail_on.add("upsert_layout")
    failed = client.post(f"{BASE}/save")
    assert failed.status_code == status.HTTP_502_BAD_GATEWAY
    assert failed.json()["detail"]["details"] == "upsert_layout rejected by store"
