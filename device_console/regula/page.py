"""
Regula devices tab: collection, edit session, bulk bar and row deletes.
"""

from __future__ import annotations

import logging
from typing import List, Set

from ..core.errors import ApiError, log_exception
from ..schemas.regula import RegulaRecord
from ..state.bulk import BulkActionController
from ..state.collection import ResourceCollectionStore
from ..state.notifications import NotificationChannel
from .photos import DEFAULT_MAX_UPLOAD_BYTES
from .remote import RegulaApi
from .session import RegulaEditSession


def search_key(record: RegulaRecord) -> str:
    return (
        f"{record.last_name} {record.first_name} {record.middle_name or ''} "
        f"{record.series}{record.number}"
    ).lower()


def matches_search(record: RegulaRecord, term: str) -> bool:
    return (term or "").strip().lower() in search_key(record)


class RegulaPage:
    def __init__(
        self,
        api: RegulaApi,
        notifications: NotificationChannel,
        *,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self.logger = logging.getLogger("regula.page")
        self.api = api
        self.notifications = notifications
        self.store: ResourceCollectionStore[RegulaRecord] = ResourceCollectionStore(
            "regula",
            api.list,
            notifications,
            load_error_message="Failed to load data",
        )
        self.session = RegulaEditSession(api, self.store, notifications, max_upload_bytes=max_upload_bytes)
        self.bulk = BulkActionController(
            self.store,
            api.delete_many,
            notifications,
            success_message="Selected records deleted successfully",
            failure_message="Failed to delete records",
        )
        self.search_term = ""
        self._deleting: Set[int] = set()

    async def refresh(self) -> bool:
        return await self.store.refresh()

    def visible(self) -> List[RegulaRecord]:
        if not self.search_term.strip():
            return list(self.store.items)
        return self.store.filter(lambda r: matches_search(r, self.search_term))

    async def open_create(self) -> None:
        self.session.open_create()
        await self.session.load_photos()

    async def open_edit(self, regula_id: int) -> bool:
        record = self.store.get(regula_id)
        if record is None:
            self.logger.warning("Cannot edit unknown regula id=%s", regula_id)
            return False
        self.session.open_edit(record)
        await self.session.load_photos()
        return True

    async def delete_record(self, regula_id: int) -> bool:
        if regula_id in self._deleting:
            self.logger.info("Delete of regula id=%s already in flight", regula_id)
            return False
        self._deleting.add(regula_id)
        try:
            await self.api.delete(regula_id)
        except ApiError as exc:
            log_exception(self.logger, "Deleting regula failed", extra={"id": regula_id, "status": exc.status_code}, exc=exc)
            self.notifications.error(exc.user_message("Failed to delete record"))
            return False
        finally:
            self._deleting.discard(regula_id)
        self.store.apply_deleted({regula_id})
        self.notifications.success("Record deleted successfully")
        return True
