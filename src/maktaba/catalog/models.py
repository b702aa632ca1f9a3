"""Canonical content structures shared by every catalog consumer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Attachment:
    """One downloadable or playable file attached to an article, audio or video."""

    url: str | None = None
    extension: str | None = None
    size: str | int | None = None
    title: str | None = None
    kind: str | None = None

    def to_dict(self) -> dict[str, str | int | None]:
        payload: dict[str, str | int | None] = {
            "url": self.url,
            "extension": self.extension,
            "size": self.size,
        }
        if self.title is not None:
            payload["title"] = self.title
        if self.kind is not None:
            payload["type"] = self.kind
        return payload


@dataclass(frozen=True, slots=True)
class ContentItem:
    """Normalized content unit; ``(type, id)`` is the true key."""

    id: Any
    type: str
    add_date: str
    title: str | None = None
    description: str | None = None
    description_short: str | None = None
    prepared_by: Any = None
    attachments: tuple[Attachment, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str]:
        return (self.type, str(self.id))

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = dict(self.extra)
        payload.update(
            {
                "id": self.id,
                "type": self.type,
                "title": self.title,
                "description": self.description,
                "add_date": self.add_date,
                "prepared_by": self.prepared_by,
            }
        )
        if self.description_short is not None:
            payload["description_short"] = self.description_short
        if self.attachments:
            payload["attachments"] = [attachment.to_dict() for attachment in self.attachments]
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ContentItem":
        canonical = {"id", "type", "title", "description", "description_short", "add_date", "prepared_by", "attachments"}
        attachments = tuple(
            Attachment(
                url=entry.get("url"),
                extension=entry.get("extension"),
                size=entry.get("size"),
                title=entry.get("title"),
                kind=entry.get("type"),
            )
            for entry in payload.get("attachments") or ()
            if isinstance(entry, dict)
        )
        return cls(
            id=payload.get("id"),
            type=str(payload.get("type", "")),
            add_date=str(payload.get("add_date", "")),
            title=payload.get("title"),
            description=payload.get("description"),
            description_short=payload.get("description_short"),
            prepared_by=payload.get("prepared_by"),
            attachments=attachments,
            extra={key: value for key, value in payload.items() if key not in canonical},
        )


@dataclass(frozen=True, slots=True)
class Page:
    items: tuple[ContentItem, ...]
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    degraded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "data": [item.to_dict() for item in self.items],
            "pagination": {
                "current_page": self.current_page,
                "total_pages": self.total_pages,
                "total_items": self.total_items,
                "items_per_page": self.items_per_page,
            },
            "degraded": self.degraded,
        }


@dataclass(frozen=True, slots=True)
class CategorySummary:
    name: str
    display_name: str
    item_count: int

    def to_dict(self) -> dict[str, str | int]:
        return {"name": self.name, "display_name": self.display_name, "count": self.item_count}


@dataclass(frozen=True, slots=True)
class CatalogStats:
    total_items: int
    per_category: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {"total_items": self.total_items, "categories": dict(self.per_category)}
