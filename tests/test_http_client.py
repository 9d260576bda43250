from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from device_console.core.errors import (
    ClientError,
    ConflictError,
    MalformedResponseError,
    ServerError,
    TransportFailure,
)
from device_console.core.http import ApiClient
from device_console.schemas.listing import decode_listing, decode_record
from device_console.schemas.rfid import RfidRecord


def _call(handler, method: str = "GET", path: str = "things", **kwargs):
    async def scenario():
        async with ApiClient("http://testserver/api/v1", transport=httpx.MockTransport(handler)) as client:
            return await client.request(method, path, **kwargs)

    return asyncio.run(scenario())


def test_requests_are_rooted_at_api_prefix() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"ok": True})

    assert _call(handler, path="/fake_rfid/") == {"ok": True}
    assert seen["url"] == "http://testserver/api/v1/fake_rfid/"


def test_conflict_carries_detail() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"detail": "Passport 1234 567890 already exists"})

    with pytest.raises(ConflictError) as info:
        _call(handler, method="POST", json={})
    assert info.value.status_code == 409
    assert info.value.user_message("Failed to create record") == "Passport 1234 567890 already exists"


def test_client_error_without_detail_uses_default() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"detail": [{"loc": ["body"], "msg": "bad"}]})

    with pytest.raises(ClientError) as info:
        _call(handler)
    assert info.value.detail is None
    assert info.value.user_message("Failed") == "Failed"


def test_server_error_hides_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="Traceback (most recent call last): ...")

    with pytest.raises(ServerError) as info:
        _call(handler)
    assert info.value.raw.startswith("Traceback")
    assert info.value.user_message("Failed to load data") == "Failed to load data"


def test_server_error_ignores_detail() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, json={"detail": "upstream db exploded"})

    with pytest.raises(ServerError) as info:
        _call(handler)
    assert info.value.user_message("Failed") == "Failed"


def test_transport_error_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportFailure) as info:
        _call(handler)
    assert info.value.status_code is None
    assert info.value.user_message("Failed to load data") == "Failed to load data"


def test_malformed_json_is_logged(caplog) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    with caplog.at_level(logging.ERROR, logger="http"):
        with pytest.raises(MalformedResponseError):
            _call(handler)
    assert "Invalid JSON" in caplog.text


def test_corrupt_content_encoding_is_malformed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            headers={"Content-Encoding": "gzip", "Content-Type": "application/json"},
            stream=httpx.ByteStream(b"not gzip at all"),
        )

    with pytest.raises(MalformedResponseError):
        _call(handler)


def test_too_many_redirects_is_a_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.TooManyRedirects("redirect loop", request=request)

    with pytest.raises(TransportFailure):
        _call(handler)


def test_refresh_survives_undecodable_body(console_for) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"Content-Encoding": "gzip"}, stream=httpx.ByteStream(b"not gzip at all"))

    async def scenario() -> None:
        async with console_for(httpx.MockTransport(handler)) as console:
            assert await console.regula.refresh() is False
            assert console.regula.store.error == "Failed to load data"
            assert console.regula.store.loading is False

    asyncio.run(scenario())


def test_bytes_and_empty_bodies() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(200, content=b"\xff\xd8\xff", headers={"content-type": "image/jpeg"})

    assert _call(handler, expect="bytes") == b"\xff\xd8\xff"
    assert _call(handler, method="DELETE", expect="none") is None


def test_decode_listing_shapes() -> None:
    row = {"id": 1, "name": "a", "rfid": "X"}
    assert [r.id for r in decode_listing([row], RfidRecord)] == [1]
    assert [r.id for r in decode_listing({"items": [row], "total": 1}, RfidRecord)] == [1]
    assert [r.id for r in decode_listing(row, RfidRecord)] == [1]
    assert decode_listing([], RfidRecord) == []


def test_decode_listing_rejects_garbage() -> None:
    with pytest.raises(MalformedResponseError):
        decode_listing("nope", RfidRecord)
    with pytest.raises(MalformedResponseError):
        decode_listing({"unexpected": True}, RfidRecord)
    with pytest.raises(MalformedResponseError):
        decode_listing([{"name": "no id"}], RfidRecord)
    with pytest.raises(MalformedResponseError):
        decode_record({"id": "abc"}, RfidRecord)
