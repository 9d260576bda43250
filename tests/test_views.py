from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from device_console.console import TAB_NOT_FOUND, TAB_REGULA, TAB_RFID, resolve_tab
from device_console.schemas.regula import Photo
from device_console.views.tables import (
    format_delay,
    format_table,
    format_timestamp,
    photo_source,
    render_notifications,
    render_photo_grid,
    render_regula,
    render_rfid,
    render_session,
)


def test_resolve_tab() -> None:
    assert resolve_tab("/") == TAB_REGULA
    assert resolve_tab("") == TAB_REGULA
    assert resolve_tab("/devices/regula/") == TAB_REGULA
    assert resolve_tab("/devices/rfid") == TAB_RFID
    assert resolve_tab("/settings") == TAB_NOT_FOUND


def test_photo_source_prefers_url_then_inline_data() -> None:
    fallback = "http://testserver/api/v1/regula/photo/1"
    assert photo_source(Photo(id=1, url="http://cdn/1.jpg", image_data="AAAA"), fallback) == "http://cdn/1.jpg"
    assert photo_source(Photo(id=1, content_type="image/png", image_data="AAAA"), fallback) == "data:image/png;base64,AAAA"
    assert photo_source(Photo(id=1), fallback) == fallback


def test_small_formatters() -> None:
    assert format_delay(None) == "-"
    assert format_delay(0) == "-"
    assert format_delay(15) == "15"
    assert format_timestamp(None) == ""
    stamp = datetime(2024, 3, 1, 12, 30, 5, tzinfo=timezone.utc)
    assert format_timestamp(stamp, timezone.utc) == "2024-03-01 12:30:05"
    assert format_timestamp(datetime(2024, 3, 1, 12, 30, 5), timezone.utc) == "2024-03-01 12:30:05"


def test_format_table_aligns_columns() -> None:
    text = format_table(["ID", "Name"], [[1, "Alpha"], [22, None]])
    lines = text.splitlines()
    assert lines[0] == "ID  Name"
    assert lines[1] == "--  -----"
    assert lines[2] == "1   Alpha"
    assert lines[3] == "22"


def test_render_regula_rows_and_states(backend, console_for) -> None:
    backend.add_regula(
        1,
        last_name="Ivanov",
        first_name="Ivan",
        middle_name=None,
        series="4510",
        number="123456",
        birth_date="1990-05-01T00:00:00",
    )
    backend.add_regula(2, last_name="Petrova", delayed_response=30)

    async def scenario() -> None:
        async with console_for(backend) as console:
            page = console.regula
            view = render_regula(page, console.settings)
            assert view.state == "empty"
            assert view.message == "No records found"

            await page.refresh()
            page.store.toggle(1)
            view = render_regula(page, console.settings)
            assert [r.id for r in view.rows] == [2, 1]
            row = view.rows[1]
            assert row.full_name == "Ivanov Ivan"
            assert row.passport == "4510 123456"
            assert row.birth_date == "1990-05-01"
            assert row.delayed_response == "-"
            assert row.device_url == "http://testserver/regula/1"
            assert row.selected is True
            assert view.rows[0].delayed_response == "30"
            assert view.bulk_bar.visible is True
            assert view.bulk_bar.label == "Selected 1 records"

            page.search_term = "nobody"
            assert render_regula(page, console.settings).message == "No records found"

    asyncio.run(scenario())


def test_render_regula_error_state(backend, console_for) -> None:
    backend.failures["regula.list"] = 500

    async def scenario() -> None:
        async with console_for(backend) as console:
            await console.regula.refresh()
            view = render_regula(console.regula, console.settings)
            assert view.state == "error"
            assert view.message == "Error loading data: Failed to load data"
            assert view.rows == []

    asyncio.run(scenario())


def test_render_rfid_marks_editing_row(backend, console_for) -> None:
    backend.add_rfid(1, clip_card=True)
    backend.add_rfid(2)

    async def scenario() -> None:
        async with console_for(backend) as console:
            page = console.rfid
            assert render_rfid(page).message == "No devices found"
            await page.refresh()
            page.start_editing(2)
            view = render_rfid(page, timezone.utc)
            assert [r.id for r in view.rows] == [2, 1]
            assert view.rows[0].editing is True
            assert view.rows[1].editing is False
            assert view.rows[1].flags["clip_card"] is True
            assert view.rows[0].created_at
            assert view.bulk_bar.visible is False

            page.store.select_all()
            assert render_rfid(page).bulk_bar.label == "Selected 2 devices"
            assert render_rfid(page).bulk_bar.all_selected is True

    asyncio.run(scenario())


def test_render_session_and_photo_grid(backend, console_for) -> None:
    backend.add_photo("a.jpg")

    async def scenario() -> None:
        async with console_for(backend) as console:
            session = console.regula.session
            closed = render_session(session)
            assert closed.open is False
            assert closed.photos is None

            await console.regula.open_create()
            session.photos.select_photo(1)
            view = render_session(session)
            assert view.open is True
            assert view.title == "Add New Record"
            assert view.fields["photo_id"] == 1
            assert view.fields["gender"] == "male"
            grid = render_photo_grid(session.photos)
            assert grid.message == ""
            assert grid.tiles[0].selected is True
            assert grid.tiles[0].src == "http://testserver/api/v1/regula/photo/1"

            console.notifications.success("Saved")
            assert render_notifications(console.notifications) == ["[success] Saved"]

    asyncio.run(scenario())


def test_empty_photo_grid_message(backend, console_for) -> None:
    async def scenario() -> None:
        async with console_for(backend) as console:
            await console.regula.open_create()
            assert render_photo_grid(console.regula.session.photos).message == "No photos available"

    asyncio.run(scenario())
