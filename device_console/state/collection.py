"""
Resource collection store.

One store per device kind holds the last fetched records (always ordered by
id, newest first), the status of the last fetch and the multi-select set.
The store is the only writer of its list: ``refresh`` and the ``apply_*``
operations are the whole mutation surface.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Generic, Iterable, List, Optional, Protocol, Sequence, Tuple, TypeVar

from ..core.errors import ApiError, log_exception
from .notifications import NotificationChannel
from .observable import Observable


class HasId(Protocol):
    id: int


R = TypeVar("R", bound=HasId)

VIEW_LOADING = "loading"
VIEW_ERROR = "error"
VIEW_EMPTY = "empty"
VIEW_READY = "ready"


def _newest_first(records: Iterable[R]) -> Tuple[R, ...]:
    by_id: dict[int, R] = {}
    for record in records:
        by_id[record.id] = record
    return tuple(sorted(by_id.values(), key=lambda r: r.id, reverse=True))


class ResourceCollectionStore(Observable, Generic[R]):
    def __init__(
        self,
        kind: str,
        fetch: Callable[[], Awaitable[Sequence[R]]],
        notifications: NotificationChannel,
        *,
        load_error_message: str = "Failed to load data",
    ) -> None:
        super().__init__()
        self.kind = kind
        self.logger = logging.getLogger(f"collection.{kind}")
        self.notifications = notifications
        self.load_error_message = load_error_message
        self._fetch = fetch
        self._items: Tuple[R, ...] = ()
        self._selection: frozenset[int] = frozenset()
        self._refresh_seq = 0
        self.loading = False
        self.loaded = False
        self.error: Optional[str] = None

    # -- read side -------------------------------------------------------

    @property
    def items(self) -> Tuple[R, ...]:
        return self._items

    @property
    def ids(self) -> List[int]:
        return [r.id for r in self._items]

    @property
    def selection(self) -> frozenset[int]:
        return self._selection

    def get(self, record_id: int) -> Optional[R]:
        for record in self._items:
            if record.id == record_id:
                return record
        return None

    def filter(self, predicate: Callable[[R], bool]) -> List[R]:
        return [r for r in self._items if predicate(r)]

    @property
    def view_state(self) -> str:
        if self.loading and not self.loaded:
            return VIEW_LOADING
        if self.error and not self.loaded:
            return VIEW_ERROR
        if not self._items:
            return VIEW_EMPTY
        return VIEW_READY

    # -- fetch -----------------------------------------------------------

    async def refresh(self) -> bool:
        """Replace the collection with the backend's; False when nothing was applied."""
        self._refresh_seq += 1
        seq = self._refresh_seq
        self.loading = True
        self._emit("refresh_started")
        try:
            records = await self._fetch()
        except ApiError as exc:
            if seq != self._refresh_seq:
                self.logger.info("Ignoring failure of superseded %s refresh: %s", self.kind, exc)
                return False
            self.error = exc.user_message(self.load_error_message)
            log_exception(self.logger, f"Fetching {self.kind} failed", extra={"status": exc.status_code}, exc=exc)
            self.notifications.error(self.error)
            return False
        else:
            if seq != self._refresh_seq:
                self.logger.info("Dropping superseded %s refresh result", self.kind)
                return False
            self._set_items(records)
            self.error = None
            self.loaded = True
            self.logger.info("Loaded %s %s records", len(self._items), self.kind)
            return True
        finally:
            if seq == self._refresh_seq:
                self.loading = False
                self._emit("refresh_finished")

    # -- mutations -------------------------------------------------------

    def _set_items(self, records: Iterable[R]) -> None:
        self._items = _newest_first(records)
        self._intersect_selection()

    def _intersect_selection(self) -> None:
        present = {r.id for r in self._items}
        self._selection = frozenset(i for i in self._selection if i in present)

    def apply_created(self, record: R) -> None:
        self._set_items([*self._items, record])
        self._emit("created")

    def apply_updated(self, record: R) -> bool:
        for index, existing in enumerate(self._items):
            if existing.id == record.id:
                items = list(self._items)
                items[index] = record
                self._items = tuple(items)
                self._emit("updated")
                return True
        self.logger.warning("Update for unknown %s id=%s ignored", self.kind, record.id)
        return False

    def apply_deleted(self, ids: Iterable[int]) -> None:
        doomed = set(ids)
        self._items = tuple(r for r in self._items if r.id not in doomed)
        self._intersect_selection()
        self._emit("deleted")

    # -- selection -------------------------------------------------------

    def select_all(self) -> None:
        self._selection = frozenset(r.id for r in self._items)
        self._emit("selection")

    def select_none(self) -> None:
        self._selection = frozenset()
        self._emit("selection")

    def toggle(self, record_id: int) -> None:
        if self.get(record_id) is None:
            self.logger.warning("Cannot select unknown %s id=%s", self.kind, record_id)
            return
        if record_id in self._selection:
            self._selection = self._selection - {record_id}
        else:
            self._selection = self._selection | {record_id}
        self._emit("selection")
