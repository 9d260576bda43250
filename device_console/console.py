"""
Application wiring for the device console.

``create_console`` builds the HTTP client, the notification channel and the
two device tabs from Settings. Use it as an async context manager so the
channel is initialised on entry and disposed (and the client closed) on
exit::

    async with create_console(settings) as console:
        await console.regula.refresh()
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .core.config import Settings
from .core.http import ApiClient
from .regula.page import RegulaPage
from .regula.remote import RegulaApi
from .rfid.page import RfidPage
from .rfid.remote import RfidApi
from .state.notifications import NotificationChannel

TAB_REGULA = "regula"
TAB_RFID = "rfid"
TAB_NOT_FOUND = "not_found"

_TAB_ROUTES = {
    "": TAB_REGULA,
    "/": TAB_REGULA,
    "/devices": TAB_REGULA,
    "/devices/regula": TAB_REGULA,
    "/devices/rfid": TAB_RFID,
}


def resolve_tab(path: str) -> str:
    normalized = "/" + (path or "").strip().strip("/")
    if normalized == "/":
        return TAB_REGULA
    return _TAB_ROUTES.get(normalized, TAB_NOT_FOUND)


class DeviceConsole:
    def __init__(self, settings: Settings, client: ApiClient, notifications: NotificationChannel) -> None:
        self.logger = logging.getLogger("console")
        self.settings = settings
        self.client = client
        self.notifications = notifications
        self.regula_api = RegulaApi(
            client,
            base_path=settings.regula_path,
            photos_list_path=settings.photos_list_path,
            photo_path=settings.photo_path,
            upload_mode=settings.photo_upload_mode,
        )
        self.rfid_api = RfidApi(client, base_path=settings.rfid_path)
        self.regula = RegulaPage(self.regula_api, notifications, max_upload_bytes=settings.max_upload_bytes)
        self.rfid = RfidPage(self.rfid_api, notifications)
        self.active_tab = TAB_REGULA

    def navigate(self, path: str) -> str:
        self.active_tab = resolve_tab(path)
        if self.active_tab == TAB_NOT_FOUND:
            self.logger.info("No console page for path %s", path)
        return self.active_tab

    async def refresh_active(self) -> bool:
        if self.active_tab == TAB_REGULA:
            return await self.regula.refresh()
        if self.active_tab == TAB_RFID:
            return await self.rfid.refresh()
        return False

    async def start(self) -> "DeviceConsole":
        self.notifications.init()
        self.logger.info("Console started backend=%s", self.settings.backend_url)
        return self

    async def aclose(self) -> None:
        self.notifications.dispose()
        await self.client.aclose()

    async def __aenter__(self) -> "DeviceConsole":
        return await self.start()

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def create_console(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> DeviceConsole:
    settings = settings or Settings()
    client = ApiClient(settings.api_root, timeout_sec=settings.request_timeout_sec, transport=transport)
    notifications = NotificationChannel(ttl_sec=settings.notification_ttl_sec)
    return DeviceConsole(settings, client, notifications)
