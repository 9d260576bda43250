from __future__ import annotations

import asyncio
from typing import List

from device_console.core.errors import ServerError
from device_console.schemas.rfid import RfidRecord
from device_console.state.bulk import BulkActionController
from device_console.state.collection import ResourceCollectionStore
from device_console.state.notifications import NotificationChannel, Severity


def _controller(ids: List[int], fail: bool = False):
    channel = NotificationChannel().init()
    sent: List[List[int]] = []

    async def _fetch():
        return [RfidRecord(id=i, name=f"d{i}", rfid=f"T{i}") for i in ids]

    async def _delete_many(targets: List[int]) -> None:
        sent.append(list(targets))
        if fail:
            raise ServerError("boom", status_code=500)

    store = ResourceCollectionStore("rfid", _fetch, channel)
    asyncio.run(store.refresh())
    return BulkActionController(store, _delete_many, channel), store, channel, sent


def test_delete_subset_of_selection() -> None:
    bulk, store, channel, sent = _controller([1, 3, 5])
    store.select_all()
    assert asyncio.run(bulk.bulk_delete([3, 1])) is True
    assert sent == [[1, 3]]
    assert store.ids == [5]
    assert store.selection == frozenset({5})
    assert [n.message for n in channel.active()] == ["Selected devices deleted successfully!"]


def test_delete_defaults_to_selection() -> None:
    bulk, store, _, sent = _controller([1, 2, 3, 4])
    store.toggle(2)
    store.toggle(4)
    assert asyncio.run(bulk.bulk_delete()) is True
    assert sent == [[2, 4]]
    assert store.ids == [3, 1]
    assert store.selection == frozenset()
    assert bulk.show_bulk_bar is False


def test_failed_delete_changes_nothing() -> None:
    bulk, store, channel, _ = _controller([1, 2, 3], fail=True)
    store.select_all()
    assert asyncio.run(bulk.bulk_delete()) is False
    assert store.ids == [3, 2, 1]
    assert store.selection == frozenset({1, 2, 3})
    assert bulk.deleting is False
    notes = channel.active()
    assert [(n.severity, n.message) for n in notes] == [(Severity.ERROR, "Failed to delete devices")]


def test_empty_selection_is_a_no_op() -> None:
    bulk, _, channel, sent = _controller([1])
    assert asyncio.run(bulk.bulk_delete()) is False
    assert sent == []
    assert channel.active() == []


def test_derived_flags() -> None:
    bulk, store, _, _ = _controller([1, 2])
    assert bulk.any_selected is False
    assert bulk.all_selected is False
    store.toggle(1)
    assert bulk.show_bulk_bar is True
    assert bulk.selected_count == 1
    assert bulk.all_selected is False
    store.toggle(2)
    assert bulk.all_selected is True
    bulk.cancel()
    assert bulk.selected_count == 0
    assert bulk.show_bulk_bar is False


def test_all_selected_is_false_for_empty_collection() -> None:
    bulk, store, _, _ = _controller([])
    store.select_all()
    assert bulk.all_selected is False


def test_concurrent_bulk_delete_is_ignored() -> None:
    channel = NotificationChannel().init()
    sent: List[List[int]] = []

    async def scenario() -> None:
        release = asyncio.Event()

        async def _fetch():
            return [RfidRecord(id=i) for i in (1, 2, 3)]

        async def _delete_many(targets: List[int]) -> None:
            sent.append(list(targets))
            await release.wait()

        store = ResourceCollectionStore("rfid", _fetch, channel)
        await store.refresh()
        bulk = BulkActionController(store, _delete_many, channel)
        store.select_all()
        first = asyncio.create_task(bulk.bulk_delete())
        await asyncio.sleep(0)
        assert bulk.deleting is True
        assert await bulk.bulk_delete([2]) is False
        release.set()
        assert await first is True
        assert store.ids == []

    asyncio.run(scenario())
    assert sent == [[1, 2, 3]]


def test_bulk_delete_against_backend(backend, console_for) -> None:
    for i in (1, 3, 5):
        backend.add_rfid(i)
        backend.add_regula(i)

    async def scenario() -> None:
        async with console_for(backend) as console:
            await console.rfid.refresh()
            console.rfid.store.select_all()
            assert await console.rfid.bulk.bulk_delete([3, 1]) is True
            assert console.rfid.store.ids == [5]
            assert console.rfid.store.selection == frozenset({5})
            assert sorted(backend.rfids) == [5]

            await console.regula.refresh()
            console.regula.store.toggle(5)
            assert await console.regula.bulk.bulk_delete() is True
            assert console.regula.store.ids == [3, 1]
            assert sorted(backend.regulas) == [1, 3]
            assert "Selected records deleted successfully" in [n.message for n in console.notifications.active()]

    asyncio.run(scenario())


def test_bulk_delete_backend_failure(backend, console_for) -> None:
    backend.add_rfid(1)
    backend.failures["rfid.delete_many"] = 500

    async def scenario() -> None:
        async with console_for(backend) as console:
            await console.rfid.refresh()
            console.rfid.store.select_all()
            assert await console.rfid.bulk.bulk_delete() is False
            assert console.rfid.store.ids == [1]
            assert console.rfid.store.selection == frozenset({1})

    asyncio.run(scenario())
