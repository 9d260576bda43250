"""
Regula device and photo endpoints.

Uses:
GET    /api/v1/regula
POST   /api/v1/regula
PUT    /api/v1/regula/{id}
DELETE /api/v1/regula/{id}
POST   /api/v1/regula/delete-many      {"passport_ids": [...]}
GET    /api/v1/regula/photos
POST   /api/v1/regula/photo            {"image_data", "file_name", "content_type"} or multipart "file"
DELETE /api/v1/regula/photo/{id}
GET    /api/v1/regula/photo/{id}       raw image bytes
"""

from __future__ import annotations

import base64
import logging
from typing import Any, List

from ..core.http import ApiClient
from ..schemas.listing import decode_listing, decode_record
from ..schemas.regula import Photo, PhotoUpload, RegulaRecord


class RegulaApi:
    def __init__(
        self,
        client: ApiClient,
        *,
        base_path: str = "regula",
        photos_list_path: str = "photos",
        photo_path: str = "photo",
        upload_mode: str = "json",
    ) -> None:
        self.logger = logging.getLogger("regula.remote")
        self.client = client
        self.base = base_path.strip("/")
        self.photos_list_path = f"{self.base}/{photos_list_path.strip('/')}"
        self.photo_path = f"{self.base}/{photo_path.strip('/')}"
        self.upload_mode = upload_mode

    async def list(self) -> List[RegulaRecord]:
        payload = await self.client.get_json(self.base)
        return decode_listing(payload, RegulaRecord)

    async def create(self, payload: dict[str, Any]) -> RegulaRecord:
        return decode_record(await self.client.post_json(self.base, payload), RegulaRecord)

    async def update(self, regula_id: int, payload: dict[str, Any]) -> RegulaRecord:
        return decode_record(await self.client.put_json(f"{self.base}/{regula_id}", payload), RegulaRecord)

    async def delete(self, regula_id: int) -> None:
        await self.client.delete(f"{self.base}/{regula_id}")

    async def delete_many(self, ids: List[int]) -> None:
        await self.client.post_json(f"{self.base}/delete-many", {"passport_ids": list(ids)})

    async def list_photos(self) -> List[Photo]:
        payload = await self.client.get_json(self.photos_list_path)
        return decode_listing(payload, Photo)

    async def upload_photo(self, *, file_name: str, content: bytes, content_type: str) -> Photo:
        if self.upload_mode == "multipart":
            payload = await self.client.post_multipart(
                self.photo_path,
                field="file",
                file_name=file_name,
                content=content,
                content_type=content_type,
            )
        else:
            body = PhotoUpload(
                image_data=base64.b64encode(content).decode("ascii"),
                file_name=file_name,
                content_type=content_type,
            )
            payload = await self.client.post_json(self.photo_path, body.model_dump())
        photo = decode_record(payload, Photo)
        self.logger.info("Uploaded photo id=%s file_name=%s bytes=%s", photo.id, file_name, len(content))
        return photo

    async def delete_photo(self, photo_id: int) -> None:
        await self.client.delete(f"{self.photo_path}/{photo_id}")

    async def fetch_photo_bytes(self, photo_id: int) -> bytes:
        return await self.client.get_bytes(f"{self.photo_path}/{photo_id}")

    def photo_url(self, photo_id: int) -> str:
        return self.client.url_for(f"{self.photo_path}/{photo_id}")
