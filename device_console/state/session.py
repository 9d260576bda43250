"""
Shared lifecycle for form sessions (modal dialogs and inline row editors).

Every open and close bumps ``generation``. Async work captures the
generation when it starts and only touches session state afterwards if the
session is still open on that same generation, so a response that arrives
after the user closed or reopened the form is dropped.

Forms whose draft survives a close (``keeps_draft``) also refuse a new
submit while a create started under an earlier generation is unresolved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

from ..core.errors import ApiError, ConflictError, log_exception
from .notifications import NotificationChannel
from .observable import Observable

T = TypeVar("T")


class SessionMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class FormSession(Observable, ABC):
    keeps_draft = False

    def __init__(self, name: str, notifications: NotificationChannel) -> None:
        super().__init__()
        self.logger = logging.getLogger(name)
        self.notifications = notifications
        self.generation = 0
        self.is_open = False
        self.submitting = False
        self.error: Optional[str] = None
        self.conflict = False
        self._pending = 0

    def is_current(self, token: int) -> bool:
        return self.is_open and token == self.generation

    def _begin(self) -> int:
        self.generation += 1
        self.is_open = True
        self.submitting = self.keeps_draft and self._pending > 0
        self.error = None
        self.conflict = False
        return self.generation

    def _end(self) -> None:
        self.generation += 1
        self.is_open = False
        self.submitting = False
        self.error = None
        self.conflict = False
        self._reset_draft()

    @abstractmethod
    def _reset_draft(self) -> None:
        """Put the draft back to its empty template."""

    async def _submit_with(
        self,
        send: Callable[[], Awaitable[T]],
        *,
        apply: Callable[[T], None],
        success_message: str,
        failure_message: str,
        on_success: Optional[Callable[[T], None]] = None,
    ) -> Optional[T]:
        if not self.is_open:
            self.logger.warning("Submit ignored: session is closed")
            return None
        if self.submitting or (self.keeps_draft and self._pending):
            self.logger.info("Submit ignored: previous submit still in flight")
            return None
        token = self.generation
        self.submitting = True
        self._pending += 1
        self.error = None
        self.conflict = False
        self._emit("submit_started")
        try:
            result = await send()
        except ApiError as exc:
            message = exc.user_message(failure_message)
            log_exception(self.logger, "Submit failed", extra={"status": exc.status_code}, exc=exc)
            self.notifications.error(message)
            if self.is_current(token):
                self.error = message
                self.conflict = isinstance(exc, ConflictError)
            return None
        finally:
            self._pending -= 1
            # A reopened form that carried the draft over waits on this submit too.
            if token == self.generation or (self.keeps_draft and self.is_open):
                self.submitting = False
                self._emit("submit_finished")
        # The backend accepted the write; the collection follows it even if
        # the form was closed in the meantime.
        apply(result)
        self.notifications.success(success_message)
        if on_success is not None:
            on_success(result)
        if self.is_current(token):
            self._end()
            self._emit("closed")
        return result
