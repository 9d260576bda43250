"""
RFID forms: the "Add New" dialog and inline row editing.
"""

from __future__ import annotations

import random
import string
from typing import Any, Optional

from ..schemas.rfid import RfidDraft, RfidRecord
from ..state.collection import ResourceCollectionStore
from ..state.notifications import NotificationChannel
from ..state.session import FormSession
from .remote import RfidApi

_TAG_ALPHABET = string.ascii_letters + string.digits


def random_device_name(rng: random.Random) -> str:
    return f"Device-{rng.randint(1000, 9999)}"


def random_tag(rng: random.Random, length: int = 10) -> str:
    return "".join(rng.choice(_TAG_ALPHABET) for _ in range(length))


def _check_field(name: str) -> None:
    if name not in RfidDraft.model_fields:
        raise KeyError(f"Unknown RFID field: {name}")


class RfidCreateForm(FormSession):
    """Create dialog; a successful submit prepends the device and closes."""

    keeps_draft = True

    def __init__(
        self,
        api: RfidApi,
        store: ResourceCollectionStore[RfidRecord],
        notifications: NotificationChannel,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.draft = RfidDraft()
        super().__init__("rfid.create", notifications)
        self.api = api
        self.store = store
        self._rng = rng or random.Random()

    @property
    def creating(self) -> bool:
        return self.submitting

    def _reset_draft(self) -> None:
        self.draft = RfidDraft()

    def open(self) -> None:
        # Reopening keeps what was typed before; only a successful create resets it.
        self._begin()
        self._emit("opened")

    def close(self) -> None:
        if not self.is_open:
            return
        self.generation += 1
        self.is_open = False
        self.submitting = False
        self._emit("closed")

    def update_field(self, name: str, value: Any) -> None:
        _check_field(name)
        self.draft = RfidDraft.model_validate({**self.draft.model_dump(), name: value})
        self._emit("field")

    def generate_random_data(self) -> None:
        """Fill name and tag with random values, keeping the status flags."""
        self.draft = self.draft.model_copy(
            update={"name": random_device_name(self._rng), "rfid": random_tag(self._rng)}
        )
        self._emit("field")

    def _clear_submitted(self, payload: dict[str, Any]) -> None:
        # Edits made after reopening the dialog are kept.
        if self.draft.to_payload() == payload:
            self._reset_draft()
            self._emit("field")

    async def submit(self) -> Optional[RfidRecord]:
        payload = self.draft.to_payload()
        return await self._submit_with(
            lambda: self.api.create(payload),
            apply=self.store.apply_created,
            success_message="Device created successfully!",
            failure_message="Failed to create device. Please try again.",
            on_success=lambda _record: self._clear_submitted(payload),
        )


class RfidInlineEditor(FormSession):
    """Row-scoped editor; one row is edited at a time."""

    def __init__(
        self,
        api: RfidApi,
        store: ResourceCollectionStore[RfidRecord],
        notifications: NotificationChannel,
    ) -> None:
        self.editing_id: Optional[int] = None
        self.draft: Optional[RfidDraft] = None
        super().__init__("rfid.inline", notifications)
        self.api = api
        self.store = store

    @property
    def updating(self) -> bool:
        return self.submitting

    def _reset_draft(self) -> None:
        self.editing_id = None
        self.draft = None

    def start_editing(self, record: RfidRecord) -> None:
        self._begin()
        self.editing_id = record.id
        self.draft = RfidDraft.from_record(record)
        self._emit("opened")

    def cancel_editing(self) -> None:
        if not self.is_open:
            return
        self._end()
        self._emit("closed")

    def update_field(self, name: str, value: Any) -> None:
        _check_field(name)
        if self.draft is None:
            self.logger.warning("update_field(%s) ignored: no row is being edited", name)
            return
        self.draft = RfidDraft.model_validate({**self.draft.model_dump(), name: value})
        self._emit("field")

    async def save(self) -> Optional[RfidRecord]:
        if self.draft is None or self.editing_id is None:
            self.logger.warning("save ignored: no row is being edited")
            return None
        target_id = self.editing_id
        payload = self.draft.to_payload()
        return await self._submit_with(
            lambda: self.api.update(target_id, payload),
            apply=self.store.apply_updated,
            success_message="Device updated successfully!",
            failure_message="Failed to update device",
        )
