"""
Command line front-end for the device console.

Usage (from project root)::

    python -m device_console.main regula list --search ivanov
    python -m device_console.main regula show 12
    python -m device_console.main regula update 12 --field number=567890
    python -m device_console.main rfid create --random
    python -m device_console.main rfid delete-many 3 4 5

Every command starts the console, runs one action against the backend and
prints the notifications it produced.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .console import DeviceConsole, create_console
from .core.config import Settings, load_settings
from .core.errors import ConsoleError, LocalValidationError
from .logging_config import setup_logging
from .schemas.regula import RegulaDraft
from .state.notifications import Severity
from .views.tables import format_table, render_regula, render_rfid


def _parse_fields(pairs: Optional[Sequence[str]]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise ValueError(f"Expected key=value, got {pair!r}")
        key, value = pair.split("=", 1)
        out[key.strip()] = value
    return out


def _print_notifications(console: DeviceConsole) -> bool:
    ok = True
    for note in console.notifications.drain():
        stream = sys.stderr if note.severity is Severity.ERROR else sys.stdout
        print(f"[{note.severity.value}] {note.message}", file=stream)
        if note.severity is Severity.ERROR:
            ok = False
    return ok


async def _regula_list(console: DeviceConsole, args: argparse.Namespace) -> bool:
    page = console.regula
    page.search_term = args.search or ""
    if not await page.refresh():
        return False
    view = render_regula(page, console.settings)
    if not view.rows:
        print(view.message)
        return True
    print(
        format_table(
            ["ID", "Full Name", "Passport", "Birth Date", "Delay", "URL"],
            [[r.id, r.full_name, r.passport, r.birth_date, r.delayed_response, r.device_url] for r in view.rows],
        )
    )
    return True


async def _regula_show(console: DeviceConsole, args: argparse.Namespace) -> bool:
    page = console.regula
    if not await page.refresh():
        return False
    record = page.store.get(args.id)
    if record is None:
        print(f"Regula record {args.id} not found", file=sys.stderr)
        return False
    fields = RegulaDraft.from_record(record).model_dump(mode="json")
    rows = [["id", record.id], *[[k, v] for k, v in fields.items()]]
    rows.append(["device_url", console.settings.regula_device_url(record.id)])
    print(format_table(["Field", "Value"], rows))
    return True


async def _regula_save(console: DeviceConsole, args: argparse.Namespace) -> bool:
    page = console.regula
    if args.command == "update":
        if not await page.refresh():
            return False
        if not await page.open_edit(args.id):
            print(f"Regula record {args.id} not found", file=sys.stderr)
            return False
    else:
        await page.open_create()
    session = page.session
    for key, value in _parse_fields(args.field).items():
        session.update_field(key, value)
    if args.photo:
        path = Path(args.photo)
        photo = await session.photos.upload_photo(path.name, path.read_bytes())
        if photo is None:
            session.cancel()
            return False
    record = await session.submit()
    if record is None:
        session.cancel()
        return False
    print(f"Saved regula id={record.id}")
    return True


async def _regula_delete(console: DeviceConsole, args: argparse.Namespace) -> bool:
    if not args.yes:
        answer = input(f"Are you sure you want to delete record {args.id}? [y/N] ")
        if answer.strip().lower() not in {"y", "yes"}:
            return True
    return await console.regula.delete_record(args.id)


async def _regula_delete_many(console: DeviceConsole, args: argparse.Namespace) -> bool:
    page = console.regula
    if not await page.refresh():
        return False
    page.store.select_none()
    for regula_id in sorted(set(args.ids)):
        page.store.toggle(regula_id)
    return await page.bulk.bulk_delete()


async def _regula_photos(console: DeviceConsole, args: argparse.Namespace) -> bool:
    session = console.regula.session
    await console.regula.open_create()
    try:
        rows = [[p.id, p.file_name, p.content_type] for p in session.photos.photos]
        print(format_table(["ID", "File", "Type"], rows) if rows else "No photos available")
        return session.photos.loaded
    finally:
        session.cancel()


async def _regula_upload_photo(console: DeviceConsole, args: argparse.Namespace) -> bool:
    session = console.regula.session
    path = Path(args.path)
    await console.regula.open_create()
    try:
        photo = await session.photos.upload_photo(path.name, path.read_bytes(), args.content_type)
    finally:
        session.cancel()
    if photo is None:
        return False
    print(f"Uploaded photo id={photo.id} file_name={photo.file_name}")
    return True


async def _regula_delete_photo(console: DeviceConsole, args: argparse.Namespace) -> bool:
    session = console.regula.session
    await console.regula.open_create()
    try:
        return await session.photos.delete_photo(args.id)
    finally:
        session.cancel()


async def _regula_photo_bytes(console: DeviceConsole, args: argparse.Namespace) -> bool:
    data = await console.regula_api.fetch_photo_bytes(args.id)
    Path(args.out).write_bytes(data)
    print(f"Wrote {len(data)} bytes to {args.out}")
    return True


async def _rfid_list(console: DeviceConsole, args: argparse.Namespace) -> bool:
    page = console.rfid
    if not await page.refresh():
        return False
    view = render_rfid(page)
    if not view.rows:
        print(view.message)
        return True
    print(
        format_table(
            ["ID", "Name", "RFID", "Clip", "Empty", "Full", "PreEmpty", "Created"],
            [
                [
                    r.id,
                    r.name,
                    r.rfid,
                    r.flags["clip_card"],
                    r.flags["empty_card_bin"],
                    r.flags["error_card_bin_full"],
                    r.flags["pre_empty_card_bin"],
                    r.created_at,
                ]
                for r in view.rows
            ],
        )
    )
    print(f"To use the device, use a URL: {console.settings.rfid_device_url()}")
    return True


async def _rfid_create(console: DeviceConsole, args: argparse.Namespace) -> bool:
    form = console.rfid.create_form
    form.open()
    if args.random:
        form.generate_random_data()
    for key, value in _parse_fields(args.field).items():
        form.update_field(key, value)
    record = await form.submit()
    if record is None:
        return False
    print(f"Created rfid id={record.id} rfid={record.rfid}")
    return True


async def _rfid_update(console: DeviceConsole, args: argparse.Namespace) -> bool:
    page = console.rfid
    if not await page.refresh():
        return False
    if not page.start_editing(args.id):
        print(f"RFID device {args.id} not found", file=sys.stderr)
        return False
    for key, value in _parse_fields(args.field).items():
        page.editor.update_field(key, value)
    record = await page.editor.save()
    if record is None:
        page.editor.cancel_editing()
        return False
    print(f"Updated rfid id={record.id}")
    return True


async def _rfid_delete_many(console: DeviceConsole, args: argparse.Namespace) -> bool:
    page = console.rfid
    if not await page.refresh():
        return False
    page.store.select_none()
    for rfid_id in sorted(set(args.ids)):
        page.store.toggle(rfid_id)
    return await page.bulk.bulk_delete()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="device-console", description="Manage simulated Regula and RFID devices")
    parser.add_argument("--config", help="YAML deployment config", default=None)
    parser.add_argument("--backend-url", help="Override CONSOLE_BACKEND_URL", default=None)
    parser.add_argument("--log-level", default=None)
    kinds = parser.add_subparsers(dest="kind", required=True)

    regula = kinds.add_parser("regula", help="Regula passport devices")
    rcmd = regula.add_subparsers(dest="command", required=True)
    p = rcmd.add_parser("list")
    p.add_argument("--search", default="")
    p.set_defaults(handler=_regula_list)
    p = rcmd.add_parser("show")
    p.add_argument("id", type=int)
    p.set_defaults(handler=_regula_show)
    p = rcmd.add_parser("create")
    p.add_argument("--field", action="append", metavar="KEY=VALUE")
    p.add_argument("--photo", help="Image file to upload and attach")
    p.set_defaults(handler=_regula_save)
    p = rcmd.add_parser("update")
    p.add_argument("id", type=int)
    p.add_argument("--field", action="append", metavar="KEY=VALUE")
    p.add_argument("--photo", help="Image file to upload and attach")
    p.set_defaults(handler=_regula_save)
    p = rcmd.add_parser("delete")
    p.add_argument("id", type=int)
    p.add_argument("--yes", action="store_true")
    p.set_defaults(handler=_regula_delete)
    p = rcmd.add_parser("delete-many")
    p.add_argument("ids", type=int, nargs="+")
    p.set_defaults(handler=_regula_delete_many)
    p = rcmd.add_parser("photos")
    p.set_defaults(handler=_regula_photos)
    p = rcmd.add_parser("upload-photo")
    p.add_argument("path")
    p.add_argument("--content-type", default=None)
    p.set_defaults(handler=_regula_upload_photo)
    p = rcmd.add_parser("delete-photo")
    p.add_argument("id", type=int)
    p.set_defaults(handler=_regula_delete_photo)
    p = rcmd.add_parser("photo-bytes")
    p.add_argument("id", type=int)
    p.add_argument("--out", required=True)
    p.set_defaults(handler=_regula_photo_bytes)

    rfid = kinds.add_parser("rfid", help="Fake RFID card devices")
    fcmd = rfid.add_subparsers(dest="command", required=True)
    p = fcmd.add_parser("list")
    p.set_defaults(handler=_rfid_list)
    p = fcmd.add_parser("create")
    p.add_argument("--field", action="append", metavar="KEY=VALUE")
    p.add_argument("--random", action="store_true", help="Fill name and tag with random data")
    p.set_defaults(handler=_rfid_create)
    p = fcmd.add_parser("update")
    p.add_argument("id", type=int)
    p.add_argument("--field", action="append", metavar="KEY=VALUE")
    p.set_defaults(handler=_rfid_update)
    p = fcmd.add_parser("delete-many")
    p.add_argument("ids", type=int, nargs="+")
    p.set_defaults(handler=_rfid_delete_many)
    return parser


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    async with create_console(settings) as console:
        try:
            ok = await args.handler(console, args)
        except LocalValidationError as exc:
            print(f"Invalid input: {exc}", file=sys.stderr)
            ok = False
        except (ConsoleError, KeyError, ValueError, OSError) as exc:
            logging.getLogger("main").error("Command failed: %s", exc)
            ok = False
        finally:
            notes_ok = _print_notifications(console)
    return 0 if ok and notes_ok else 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings(args.config)
    if args.backend_url:
        settings = settings.model_copy(update={"backend_url": args.backend_url})
    setup_logging(args.log_level or settings.log_level, settings.log_file)
    return asyncio.run(_run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
