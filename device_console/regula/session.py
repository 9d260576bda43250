"""
Modal edit session for Regula passport records.

    closed --open_create/open_edit--> open
    open --submit ok--> closed
    open --submit failed--> open (error kept, draft intact)
    open --cancel--> closed (draft discarded)
"""

from __future__ import annotations

from typing import Any, Optional

from ..schemas.regula import RegulaDraft, RegulaRecord
from ..state.collection import ResourceCollectionStore
from ..state.notifications import NotificationChannel
from ..state.session import FormSession, SessionMode
from .photos import DEFAULT_MAX_UPLOAD_BYTES, PhotoManager
from .remote import RegulaApi


class RegulaEditSession(FormSession):
    def __init__(
        self,
        api: RegulaApi,
        store: ResourceCollectionStore[RegulaRecord],
        notifications: NotificationChannel,
        *,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self.mode = SessionMode.CREATE
        self.target_id: Optional[int] = None
        self.draft = RegulaDraft()
        super().__init__("regula.session", notifications)
        self.api = api
        self.store = store
        self.photos = PhotoManager(api, self, notifications, max_upload_bytes=max_upload_bytes)

    @property
    def title(self) -> str:
        return "Edit Record" if self.mode is SessionMode.EDIT else "Add New Record"

    def _reset_draft(self) -> None:
        self.mode = SessionMode.CREATE
        self.target_id = None
        self.draft = RegulaDraft()

    def _end(self) -> None:
        super()._end()
        self.photos.reset()

    def open_create(self) -> None:
        self._begin()
        self._reset_draft()
        self.photos.reset()
        self.logger.debug("Opened create session generation=%s", self.generation)
        self._emit("opened")

    def open_edit(self, record: RegulaRecord) -> None:
        self._begin()
        self.mode = SessionMode.EDIT
        self.target_id = record.id
        self.draft = RegulaDraft.from_record(record)
        self.photos.reset()
        self.logger.debug("Opened edit session id=%s generation=%s", record.id, self.generation)
        self._emit("opened")

    async def load_photos(self) -> bool:
        return await self.photos.load_photos()

    def update_field(self, name: str, value: Any) -> None:
        if name not in RegulaDraft.model_fields:
            raise KeyError(f"Unknown Regula field: {name}")
        if not self.is_open:
            self.logger.warning("update_field(%s) ignored: session is closed", name)
            return
        self.draft = RegulaDraft.model_validate({**self.draft.model_dump(), name: value})
        self._emit("field")

    async def submit(self) -> Optional[RegulaRecord]:
        payload = self.draft.to_payload()
        if self.mode is SessionMode.EDIT and self.target_id is not None:
            target_id = self.target_id
            return await self._submit_with(
                lambda: self.api.update(target_id, payload),
                apply=self.store.apply_updated,
                success_message="Record updated successfully",
                failure_message="Failed to update record",
            )
        return await self._submit_with(
            lambda: self.api.create(payload),
            apply=self.store.apply_created,
            success_message="Record created successfully",
            failure_message="Failed to create record",
        )

    def cancel(self) -> None:
        if not self.is_open:
            return
        self._end()
        self._emit("closed")
