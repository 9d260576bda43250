"""
Process-wide notification channel (toast queue).

The channel is created once per application, started with ``init()`` and
torn down with ``dispose()``. Components receive it by injection and push
(message, severity) pairs; the display layer reads ``active()`` and entries
expire after ``ttl_sec``.
"""

from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .observable import Observable


class Severity(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    id: int
    message: str
    severity: Severity
    created_at: float
    expires_at: float


class NotificationChannel(Observable):
    def __init__(
        self,
        ttl_sec: float = 3.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 20,
    ) -> None:
        super().__init__()
        self.logger = logging.getLogger("notifications")
        self.ttl_sec = ttl_sec
        self.max_entries = max_entries
        self._clock = clock
        self._ids = itertools.count(1)
        self._entries: List[Notification] = []
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    def init(self) -> "NotificationChannel":
        self._active = True
        self._entries = []
        self._emit("init")
        return self

    def dispose(self) -> None:
        self._active = False
        self._entries = []
        self._emit("dispose")

    def push(self, message: str, severity: Severity = Severity.SUCCESS) -> Notification:
        if not self._active:
            raise RuntimeError("Notification channel used before init() or after dispose()")
        now = self._clock()
        entry = Notification(
            id=next(self._ids),
            message=message,
            severity=Severity(severity),
            created_at=now,
            expires_at=now + self.ttl_sec,
        )
        if entry.severity is Severity.ERROR:
            self.logger.warning("notify error: %s", message)
        else:
            self.logger.info("notify: %s", message)
        self._entries.append(entry)
        if len(self._entries) > self.max_entries:
            self._entries = self._entries[-self.max_entries:]
        self._emit("push")
        return entry

    def success(self, message: str) -> Notification:
        return self.push(message, Severity.SUCCESS)

    def error(self, message: str) -> Notification:
        return self.push(message, Severity.ERROR)

    def active(self, now: Optional[float] = None) -> List[Notification]:
        now = self._clock() if now is None else now
        return [n for n in self._entries if n.expires_at > now]

    def expire(self, now: Optional[float] = None) -> int:
        """Drop entries whose TTL has elapsed; returns how many were removed."""
        now = self._clock() if now is None else now
        before = len(self._entries)
        self._entries = [n for n in self._entries if n.expires_at > now]
        removed = before - len(self._entries)
        if removed:
            self._emit("expire")
        return removed

    def dismiss(self, notification_id: int) -> bool:
        before = len(self._entries)
        self._entries = [n for n in self._entries if n.id != notification_id]
        if len(self._entries) == before:
            return False
        self._emit("dismiss")
        return True

    def drain(self) -> List[Notification]:
        """Return and clear every pending entry (used by the CLI after a command)."""
        entries, self._entries = self._entries, []
        if entries:
            self._emit("drain")
        return entries
