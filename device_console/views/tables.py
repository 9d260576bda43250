"""
Pure projections from console state to view models.

Nothing here mutates state; callers re-run these functions whenever a
subscribed component emits an event.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Dict, List, Optional, Sequence

from ..core.config import Settings
from ..regula.page import RegulaPage
from ..regula.photos import PhotoManager
from ..regula.session import RegulaEditSession
from ..rfid.page import RfidPage
from ..schemas.regula import Photo, to_date_input
from ..schemas.rfid import RFID_FLAGS
from ..state.bulk import BulkActionController
from ..state.collection import VIEW_EMPTY, VIEW_ERROR, VIEW_LOADING
from ..state.notifications import NotificationChannel


def format_timestamp(value: Optional[datetime], tz: Optional[tzinfo] = None) -> str:
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz).strftime("%Y-%m-%d %H:%M:%S")


def format_delay(value: Optional[int]) -> str:
    return str(value) if value else "-"


def photo_source(photo: Photo, fallback_url: str) -> str:
    if photo.url:
        return photo.url
    if photo.image_data:
        return f"data:{photo.content_type};base64,{photo.image_data}"
    return fallback_url


@dataclass
class BulkBarView:
    visible: bool
    label: str
    all_selected: bool
    delete_disabled: bool


@dataclass
class RegulaRow:
    id: int
    full_name: str
    passport: str
    birth_date: str
    delayed_response: str
    device_url: str
    selected: bool


@dataclass
class TableView:
    state: str
    message: str
    rows: list = field(default_factory=list)
    bulk_bar: Optional[BulkBarView] = None


@dataclass
class RfidRow:
    id: int
    name: str
    rfid: str
    flags: Dict[str, bool]
    created_at: str
    updated_at: str
    selected: bool
    editing: bool


@dataclass
class PhotoTile:
    id: int
    file_name: str
    src: str
    selected: bool
    deleting: bool


@dataclass
class PhotoGridView:
    message: str
    tiles: List[PhotoTile]
    upload_disabled: bool


@dataclass
class SessionView:
    open: bool
    title: str
    fields: Dict[str, object]
    error: Optional[str]
    conflict: bool
    submit_disabled: bool
    photos: Optional[PhotoGridView]


def render_bulk_bar(bulk: BulkActionController, noun: str = "devices") -> BulkBarView:
    return BulkBarView(
        visible=bulk.show_bulk_bar,
        label=f"Selected {bulk.selected_count} {noun}",
        all_selected=bulk.all_selected,
        delete_disabled=bulk.deleting,
    )


def _status_message(state: str, error: Optional[str], empty: str) -> str:
    if state == VIEW_LOADING:
        return "Loading..."
    if state == VIEW_ERROR:
        return f"Error loading data: {error}"
    if state == VIEW_EMPTY:
        return empty
    return ""


def render_regula(page: RegulaPage, settings: Settings) -> TableView:
    store = page.store
    state = store.view_state
    rows = [
        RegulaRow(
            id=r.id,
            full_name=" ".join(p for p in (r.last_name, r.first_name, r.middle_name or "") if p),
            passport=f"{r.series} {r.number}".strip(),
            birth_date=to_date_input(r.birth_date),
            delayed_response=format_delay(r.delayed_response),
            device_url=settings.regula_device_url(r.id),
            selected=r.id in store.selection,
        )
        for r in page.visible()
    ]
    message = _status_message(state, store.error, "No records found")
    if state not in (VIEW_LOADING, VIEW_ERROR) and not rows:
        message = "No records found"
    return TableView(state=state, message=message, rows=rows, bulk_bar=render_bulk_bar(page.bulk, "records"))


def render_rfid(page: RfidPage, tz: Optional[tzinfo] = None) -> TableView:
    store = page.store
    state = store.view_state
    editing_id = page.editor.editing_id if page.editor.is_open else None
    rows = [
        RfidRow(
            id=r.id,
            name=r.name,
            rfid=r.rfid,
            flags={name: bool(getattr(r, name)) for name in RFID_FLAGS},
            created_at=format_timestamp(r.created_at, tz),
            updated_at=format_timestamp(r.updated_at, tz),
            selected=r.id in store.selection,
            editing=r.id == editing_id,
        )
        for r in store.items
    ]
    return TableView(
        state=state,
        message=_status_message(state, store.error, "No devices found"),
        rows=rows,
        bulk_bar=render_bulk_bar(page.bulk),
    )


def render_photo_grid(manager: PhotoManager) -> PhotoGridView:
    selected = manager.session.draft.photo_id
    tiles = [
        PhotoTile(
            id=p.id,
            file_name=p.file_name,
            src=photo_source(p, manager.api.photo_url(p.id)),
            selected=p.id == selected,
            deleting=p.id in manager.deleting,
        )
        for p in manager.photos
    ]
    if manager.loading:
        message = "Loading photos..."
    elif not tiles:
        message = "No photos available"
    else:
        message = ""
    return PhotoGridView(message=message, tiles=tiles, upload_disabled=manager.uploading)


def render_session(session: RegulaEditSession) -> SessionView:
    return SessionView(
        open=session.is_open,
        title=session.title,
        fields=session.draft.model_dump(mode="json"),
        error=session.error,
        conflict=session.conflict,
        submit_disabled=session.submitting,
        photos=render_photo_grid(session.photos) if session.is_open else None,
    )


def render_notifications(channel: NotificationChannel) -> List[str]:
    return [f"[{n.severity.value}] {n.message}" for n in channel.active()]


def format_table(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> str:
    """Fixed-width text table for the command line."""
    cells = [[str(h) for h in headers]] + [["" if c is None else str(c) for c in row] for row in rows]
    widths = [max(len(row[i]) for row in cells) for i in range(len(headers))]
    lines = []
    for index, row in enumerate(cells):
        lines.append("  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip())
        if index == 0:
            lines.append("  ".join("-" * w for w in widths))
    return "\n".join(lines)
