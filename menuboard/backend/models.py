"""Wire models for the backend menu service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


@dataclass
class RawMenuFile:
    """A per-slot file object as returned by the backend."""

    name: str = ""
    url: str = ""
    size: int | None = None
    qr_url: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawMenuFile:
        size = data.get("size")
        return cls(
            name=_as_str(data.get("name")),
            url=_as_str(data.get("url")),
            size=_as_int(size) if size is not None else None,
            qr_url=_as_str(data.get("qrUrl")),
        )


@dataclass
class RawMenu:
    """A menu record in the backend's wire shape."""

    id: str
    name: str = ""
    created_at: str | None = None
    description: str | None = None
    category: str | None = None
    food_menu_file: RawMenuFile | None = None
    drink_menu_file: RawMenuFile | None = None
    spa_menu_file: RawMenuFile | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawMenu:
        def _file(key: str) -> RawMenuFile | None:
            value = data.get(key)
            return RawMenuFile.from_dict(value) if isinstance(value, dict) else None

        return cls(
            id=str(data.get("id") or ""),
            name=_as_str(data.get("name")),
            created_at=_optional_str(data.get("createdAt")),
            description=_optional_str(data.get("description")),
            category=_optional_str(data.get("category")),
            food_menu_file=_file("foodMenuFile"),
            drink_menu_file=_file("drinkMenuFile"),
            spa_menu_file=_file("spaMenuFile"),
        )


@dataclass
class RawMenuPage:
    """One page of the ``GET /menu/user`` response."""

    data: list[RawMenu]
    total: int = 0
    page: int = 1
    size: int = 0

    @classmethod
    def from_dict(cls, body: dict[str, Any]) -> RawMenuPage:
        """Parse ``{"data": {"data": [...], "total", "page", "size"}}``."""
        inner = body.get("data") if isinstance(body, dict) else None
        if not isinstance(inner, dict):
            inner = {}
        records = inner.get("data")
        if not isinstance(records, list):
            records = []
        return cls(
            data=[RawMenu.from_dict(r) for r in records if isinstance(r, dict)],
            total=_as_int(inner.get("total"), len(records)),
            page=_as_int(inner.get("page"), 1),
            size=_as_int(inner.get("size"), 0),
        )
