"""Layout store talking to the managed data service over its PostgREST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from ..exceptions import RemoteCallError
from ..layouts.layouts_models import Campaign, Device, Layout, SlotAssignment
from ..layouts.layouts_schemas import (
    CampaignRecord,
    LayoutRecord,
    LayoutUpsertPayload,
    SlotAssignmentRecord,
)

logger = logging.getLogger(__name__)

_CAMPAIGNS = TypeAdapter(list[CampaignRecord])
_ASSIGNMENTS = TypeAdapter(list[SlotAssignmentRecord])


@dataclass(slots=True)
class SupabaseLayoutStore:
    """Call the layout procedures and tables exposed under ``/rest/v1``."""

    base_url: str
    api_key: str
    timeout_seconds: float = 10.0
    client: httpx.AsyncClient | None = None
    log: logging.Logger = field(default_factory=lambda: logger)

    def __post_init__(self) -> None:
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=f"{self.base_url.rstrip('/')}/rest/v1",
                headers={
                    "apikey": self.api_key,
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout_seconds,
            )

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()

    async def get_layout(self, page_key: str, device: Device) -> Layout | None:
        device = Device(device)
        body = await self._rpc("get_ad_layout", {"p_page_key": page_key, "p_device": device.value})
        if not body or not isinstance(body, dict) or not body.get("layout_id"):
            return None
        try:
            record = LayoutRecord.model_validate(body)
        except ValidationError as exc:
            raise RemoteCallError(f"get_ad_layout returned malformed data: {exc}") from exc
        return record.to_domain(page_key, device)

    async def upsert_layout(self, layout: Layout) -> str:
        payload = LayoutUpsertPayload.from_domain(layout).to_wire()
        body = await self._rpc("upsert_ad_layout", {"p_payload": payload})
        if not body:
            raise RemoteCallError("upsert_ad_layout did not return a layout id")
        return str(body)

    async def assign_campaign_to_slot(
        self, slot_id: str, campaign_id: str, rotation_index: int
    ) -> None:
        await self._rpc(
            "assign_campaign_to_slot",
            {"p_slot_id": slot_id, "p_campaign_id": campaign_id, "p_rotation_index": rotation_index},
        )

    async def update_slot_assignment_order(
        self, slot_id: str, campaign_id: str, rotation_index: int
    ) -> None:
        await self._rpc(
            "update_slot_assignment_order",
            {"p_slot_id": slot_id, "p_campaign_id": campaign_id, "p_rotation_index": rotation_index},
        )

    async def remove_slot_assignment(self, slot_id: str, campaign_id: str) -> None:
        await self._rpc("remove_slot_assignment", {"p_slot_id": slot_id, "p_campaign_id": campaign_id})

    async def list_active_campaigns(self) -> list[Campaign]:
        rows = await self._select(
            "ad_campaigns",
            {
                "select": "id,name,placement,is_active,priority",
                "is_active": "eq.true",
                "order": "priority.desc",
            },
        )
        try:
            records = _CAMPAIGNS.validate_python(rows)
        except ValidationError as exc:
            raise RemoteCallError(f"ad_campaigns returned malformed data: {exc}") from exc
        return [record.to_domain() for record in records]

    async def list_page_keys(self) -> list[str]:
        rows = await self._select("ad_pages", {"select": "key", "order": "key.asc"})
        return [str(row["key"]) for row in rows if isinstance(row, dict) and row.get("key")]

    async def list_slot_assignments(self, slot_id: str) -> list[SlotAssignment]:
        rows = await self._select(
            "ad_slot_assignments",
            {
                "select": "campaign_id,rotation_index,ad_campaigns!inner(name)",
                "slot_id": f"eq.{slot_id}",
                "is_active": "eq.true",
                "order": "rotation_index.asc",
            },
        )
        try:
            records = _ASSIGNMENTS.validate_python(rows)
        except ValidationError as exc:
            raise RemoteCallError(f"ad_slot_assignments returned malformed data: {exc}") from exc
        return [record.to_domain() for record in records]

    async def _rpc(self, function: str, params: dict[str, Any]) -> Any:
        assert self.client is not None
        try:
            response = await self.client.post(f"/rpc/{function}", json=params)
        except httpx.HTTPError as exc:
            self.log.warning("layout_store.rpc_unreachable", extra={"function": function})
            raise RemoteCallError(f"{function} failed: {exc}") from exc
        body = self._decode(response, function)
        self.log.info(
            "layout_store.rpc",
            extra={"function": function, "status_code": response.status_code},
        )
        return body

    async def _select(self, table: str, params: dict[str, str]) -> list[Any]:
        assert self.client is not None
        try:
            response = await self.client.get(f"/{table}", params=params)
        except httpx.HTTPError as exc:
            self.log.warning("layout_store.select_unreachable", extra={"table": table})
            raise RemoteCallError(f"{table} query failed: {exc}") from exc
        body = self._decode(response, table)
        if not isinstance(body, list):
            raise RemoteCallError(f"{table} query returned {type(body).__name__}, expected a list")
        return body

    @staticmethod
    def _decode(response: httpx.Response, operation: str) -> Any:
        if response.status_code >= 400:
            message = response.text
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                message = body.get("message") or body.get("error") or message
            raise RemoteCallError(
                f"{operation} failed with status {response.status_code}: {message}",
                status_code=response.status_code,
            )
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteCallError(f"{operation} returned invalid JSON") from exc
