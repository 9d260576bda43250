"""
Async HTTP access to the device backend.

All requests go through ``ApiClient.request`` which converts transport
errors, non-2xx responses and undecodable bodies into the ``ApiError``
hierarchy from ``core.errors``. Raw bodies are logged for diagnostics and
never surfaced to the user.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional

import httpx

from .errors import (
    ClientError,
    ConflictError,
    MalformedResponseError,
    ServerError,
    TransportFailure,
    describe,
    first_detail,
)

logger = logging.getLogger("http")

Expect = Literal["json", "bytes", "none"]


class ApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` rooted at the API prefix."""

    def __init__(
        self,
        api_root: str,
        *,
        timeout_sec: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_root = api_root.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.api_root,
            timeout=timeout_sec,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def url_for(self, path: str) -> str:
        return f"{self.api_root}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        files: Any = None,
        expect: Expect = "json",
    ) -> Any:
        url = self.url_for(path)
        try:
            resp = await self._client.request(method, path.lstrip("/"), json=json, files=files)
        except httpx.DecodingError as exc:
            err = MalformedResponseError(f"{method} {url} returned an undecodable body: {exc}", url=url)
            logger.error("Undecodable body from %s %s: %s", method, url, exc)
            raise err from exc
        except httpx.RequestError as exc:
            failure = TransportFailure(f"{method} {url} did not complete: {exc}", url=url)
            logger.warning("Request failed %s %s: %s", method, url, exc)
            raise failure from exc

        if resp.status_code >= 400:
            raise self._status_error(method, url, resp)

        if expect == "bytes":
            return resp.content
        if expect == "none" or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            err = MalformedResponseError(
                f"{method} {url} returned invalid JSON",
                status_code=resp.status_code,
                raw=resp.text,
                url=url,
            )
            logger.error("Invalid JSON from %s %s: %s", method, url, describe(err))
            raise err from exc

    def _status_error(self, method: str, url: str, resp: httpx.Response) -> Exception:
        raw = resp.text
        detail = None
        try:
            detail = first_detail(resp.json())
        except ValueError:
            detail = None
        status = resp.status_code
        message = f"{method} {url} failed with HTTP {status}"
        if status == 409:
            err: Exception = ConflictError(message, status_code=status, detail=detail, raw=raw, url=url)
        elif status < 500:
            err = ClientError(message, status_code=status, detail=detail, raw=raw, url=url)
        else:
            err = ServerError(message, status_code=status, detail=detail, raw=raw, url=url)
        logger.warning("%s %s -> %s %s", method, url, status, describe(err))
        return err

    async def get_json(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post_json(self, path: str, payload: Any) -> Any:
        return await self.request("POST", path, json=payload)

    async def put_json(self, path: str, payload: Any) -> Any:
        return await self.request("PUT", path, json=payload)

    async def delete(self, path: str) -> None:
        await self.request("DELETE", path, expect="none")

    async def post_multipart(self, path: str, *, field: str, file_name: str, content: bytes, content_type: str) -> Any:
        return await self.request("POST", path, files={field: (file_name, content, content_type)})

    async def get_bytes(self, path: str) -> bytes:
        return await self.request("GET", path, expect="bytes")
