"""
Error types and error-handling helpers for the device console.

Every failure that crosses the HTTP boundary is turned into an ``ApiError``
subclass so callers can pick the user-facing message without looking at
status codes themselves.
"""

from __future__ import annotations

import logging
from typing import Any, Optional


def _format_extra(extra: dict | None) -> str:
    if not extra:
        return ""
    parts: list[str] = []
    for key, value in extra.items():
        if value is None:
            continue
        parts.append(f"{key}={value}")
    return f" {' '.join(parts)}" if parts else ""


def log_exception(logger: logging.Logger, msg: str, *, extra: dict | None = None, exc: Exception | None = None) -> None:
    """
    Log an exception with context. Uses logger.exception for stack traces.
    """
    suffix = _format_extra(extra)
    if exc is not None:
        logger.error(f"{msg}{suffix}: {exc}", exc_info=exc)
        return
    logger.exception(f"{msg}{suffix}")


class ConsoleError(Exception):
    """Base class for every error raised by the console."""


class LocalValidationError(ConsoleError):
    """Input rejected before any request was sent."""


class ApiError(ConsoleError):
    """
    A backend call that did not produce a usable response.

    ``detail`` holds the server's structured ``detail`` string when one was
    returned; ``raw`` keeps the response body for diagnostics only.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        detail: str | None = None,
        raw: str | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
        self.raw = raw
        self.url = url

    def user_message(self, default: str) -> str:
        return default


class TransportFailure(ApiError):
    """The request never completed (connection refused, timeout, ...)."""


class ClientError(ApiError):
    """4xx response."""

    def user_message(self, default: str) -> str:
        return self.detail or default


class ConflictError(ClientError):
    """409 response, e.g. a duplicate passport document."""


class ServerError(ApiError):
    """5xx response."""


class MalformedResponseError(ApiError):
    """2xx response whose body could not be decoded into the expected shape."""


def describe(exc: BaseException) -> dict[str, Any]:
    """Compact diagnostic mapping for log lines."""
    out: dict[str, Any] = {"type": type(exc).__name__}
    if isinstance(exc, ApiError):
        out["status"] = exc.status_code
        out["url"] = exc.url
        if exc.raw:
            out["raw"] = exc.raw[:200]
    return out


def first_detail(payload: Any) -> Optional[str]:
    """Pull a string ``detail`` out of a decoded error body."""
    if isinstance(payload, dict):
        detail = payload.get("detail")
        if isinstance(detail, str) and detail.strip():
            return detail.strip()
    return None
