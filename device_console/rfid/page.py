"""
RFID devices tab.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from ..schemas.rfid import RfidRecord
from ..state.bulk import BulkActionController
from ..state.collection import ResourceCollectionStore
from ..state.notifications import NotificationChannel
from .editing import RfidCreateForm, RfidInlineEditor
from .remote import RfidApi


class RfidPage:
    def __init__(
        self,
        api: RfidApi,
        notifications: NotificationChannel,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.logger = logging.getLogger("rfid.page")
        self.api = api
        self.store: ResourceCollectionStore[RfidRecord] = ResourceCollectionStore(
            "rfid",
            api.list,
            notifications,
            load_error_message="Failed to fetch RFID devices",
        )
        self.create_form = RfidCreateForm(api, self.store, notifications, rng=rng)
        self.editor = RfidInlineEditor(api, self.store, notifications)
        self.bulk = BulkActionController(self.store, api.delete_many, notifications)

    async def refresh(self) -> bool:
        return await self.store.refresh()

    def start_editing(self, rfid_id: int) -> bool:
        record = self.store.get(rfid_id)
        if record is None:
            self.logger.warning("Cannot edit unknown rfid id=%s", rfid_id)
            return False
        self.editor.start_editing(record)
        return True
