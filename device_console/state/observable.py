"""
Subscription mechanism shared by every stateful console component.

Each state transition ends with ``_emit(event)``; subscribers typically
re-run a pure render function over the component's public state.
"""

from __future__ import annotations

import logging
from typing import Callable, List

from ..core.errors import log_exception

Listener = Callable[[str, object], None]


class Observable:
    def __init__(self) -> None:
        self._listeners: List[Listener] = []
        self._observable_logger = logging.getLogger(f"state.{type(self).__name__}")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(event, source)``; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, event: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self)
            except Exception as exc:
                # One broken view must not stop the others from re-rendering.
                log_exception(self._observable_logger, "State listener failed", extra={"event": event}, exc=exc)
