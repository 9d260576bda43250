"""
Fake RFID device endpoints.

Uses:
GET  /api/v1/fake_rfid/
POST /api/v1/fake_rfid/
PUT  /api/v1/fake_rfid/{id}
POST /api/v1/fake_rfid/delete-many     {"rfid_ids": [...]}
"""

from __future__ import annotations

from typing import Any, List

from ..core.http import ApiClient
from ..schemas.listing import decode_listing, decode_record
from ..schemas.rfid import RfidRecord


class RfidApi:
    def __init__(self, client: ApiClient, *, base_path: str = "fake_rfid/") -> None:
        self.client = client
        self.base = base_path.strip("/")

    async def list(self) -> List[RfidRecord]:
        payload = await self.client.get_json(f"{self.base}/")
        return decode_listing(payload, RfidRecord)

    async def create(self, payload: dict[str, Any]) -> RfidRecord:
        return decode_record(await self.client.post_json(f"{self.base}/", payload), RfidRecord)

    async def update(self, rfid_id: int, payload: dict[str, Any]) -> RfidRecord:
        return decode_record(await self.client.put_json(f"{self.base}/{rfid_id}", payload), RfidRecord)

    async def delete_many(self, ids: List[int]) -> None:
        await self.client.post_json(f"{self.base}/delete-many", {"rfid_ids": list(ids)})
