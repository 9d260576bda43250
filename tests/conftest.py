from __future__ import annotations

from typing import Callable

import httpx
import pytest

from device_console.console import DeviceConsole, create_console
from device_console.core.config import Settings
from fake_backend import FakeBackend


def make_settings(**overrides) -> Settings:
    values = {"backend_url": "http://testserver", "notification_ttl_sec": 60.0}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def console_for() -> Callable[..., DeviceConsole]:
    """Build a console talking to a FakeBackend (or any ASGI app / transport)."""

    def _build(target, **overrides) -> DeviceConsole:
        if isinstance(target, FakeBackend):
            transport: httpx.AsyncBaseTransport = httpx.ASGITransport(app=target.create_app())
        elif isinstance(target, httpx.AsyncBaseTransport):
            transport = target
        else:
            transport = httpx.ASGITransport(app=target)
        return create_console(make_settings(**overrides), transport=transport)

    return _build
