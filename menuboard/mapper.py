"""Normalize backend menu records into display-ready Menu objects."""

from __future__ import annotations

from datetime import datetime

from .backend.models import RawMenu, RawMenuFile
from .models import Menu, MenuFile, RoleSlot, infer_kind

DEFAULT_MENU_NAME = "Untitled"


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp; None if missing or unparseable."""
    if not value:
        return None
    text = value.strip()
    # fromisoformat() only accepts "Z" from Python 3.11 on
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def slot_file(raw: RawMenu, slot: RoleSlot) -> RawMenuFile | None:
    match slot:
        case RoleSlot.FOOD:
            return raw.food_menu_file
        case RoleSlot.DRINK:
            return raw.drink_menu_file
        case RoleSlot.SPA:
            return raw.spa_menu_file


def map_file(raw_file: RawMenuFile | None, slot: RoleSlot) -> MenuFile | None:
    """Build a MenuFile, or None unless the slot has both a name and a URL."""
    if raw_file is None or not raw_file.name or not raw_file.url:
        return None
    return MenuFile(
        name=raw_file.name,
        kind=infer_kind(raw_file.name),
        url=raw_file.url,
        role_slot=slot,
        size_bytes=max(raw_file.size or 0, 0),
        qr_url=raw_file.qr_url,
    )


def map_menu(raw: RawMenu) -> Menu:
    files = [
        f for f in (map_file(slot_file(raw, slot), slot) for slot in RoleSlot)
        if f is not None
    ]

    qr_target = next((f.qr_url for f in files if f.qr_url), None)
    if qr_target is None and files:
        qr_target = files[0].url

    return Menu(
        id=raw.id,
        name=raw.name.strip() or DEFAULT_MENU_NAME,
        files=tuple(files),
        created_at=parse_timestamp(raw.created_at),
        description=raw.description or "",
        category=raw.category or "",
        qr_target_url=qr_target,
    )


def map_menus(raws: list[RawMenu]) -> list[Menu]:
    return [map_menu(r) for r in raws]
