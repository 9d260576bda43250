"""
Bulk selection actions over a collection store.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, List, Optional

from ..core.errors import ApiError, log_exception
from .collection import ResourceCollectionStore
from .notifications import NotificationChannel
from .observable import Observable


class BulkActionController(Observable):
    """Derives the bulk bar state from the store and issues batched deletes."""

    def __init__(
        self,
        store: ResourceCollectionStore,
        delete_many: Callable[[List[int]], Awaitable[None]],
        notifications: NotificationChannel,
        *,
        success_message: str = "Selected devices deleted successfully!",
        failure_message: str = "Failed to delete devices",
    ) -> None:
        super().__init__()
        self.logger = logging.getLogger(f"bulk.{store.kind}")
        self.store = store
        self.notifications = notifications
        self.success_message = success_message
        self.failure_message = failure_message
        self._delete_many = delete_many
        self.deleting = False

    @property
    def any_selected(self) -> bool:
        return bool(self.store.selection)

    @property
    def show_bulk_bar(self) -> bool:
        return self.any_selected

    @property
    def all_selected(self) -> bool:
        ids = self.store.ids
        return bool(ids) and self.store.selection == frozenset(ids)

    @property
    def selected_count(self) -> int:
        return len(self.store.selection)

    def cancel(self) -> None:
        self.store.select_none()

    async def bulk_delete(self, ids: Optional[Iterable[int]] = None) -> bool:
        """Delete ``ids`` (default: the selection) in one request. All or nothing."""
        if self.deleting:
            self.logger.info("Bulk delete already in progress; ignoring request")
            return False
        targets = sorted(set(self.store.selection if ids is None else ids))
        if not targets:
            return False
        self.deleting = True
        self._emit("bulk_delete_started")
        try:
            await self._delete_many(targets)
        except ApiError as exc:
            log_exception(self.logger, "Bulk delete failed", extra={"ids": targets, "status": exc.status_code}, exc=exc)
            self.notifications.error(exc.user_message(self.failure_message))
            return False
        finally:
            self.deleting = False
            self._emit("bulk_delete_finished")
        self.store.apply_deleted(targets)
        self.logger.info("Bulk deleted %s ids=%s", self.store.kind, targets)
        self.notifications.success(self.success_message)
        return True
