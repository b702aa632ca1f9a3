"""Per-category field projections from raw store rows to canonical fields."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import json
from typing import Any, Callable

from maktaba.catalog.models import Attachment
from maktaba.catalog.text import sanitize_text, sanitize_value


BOOK_FIELDS = (
    "id",
    "name",
    "author",
    "open_file",
    "pages",
    "files",
    "parts",
    "researcher_supervisor",
    "publisher",
    "publication_country",
    "city",
    "main_category",
    "sub_category",
    "topics",
    "download_link",
    "alternative_link",
    "section_books_count",
    "parts_count",
    "size_bytes",
    "format",
)
FATWA_FIELDS = ("id", "title", "question", "answer", "audio")


@dataclass(slots=True)
class Projection:
    """Canonical fields plus verbatim extras produced for one raw row."""

    id: Any
    title: str | None = None
    description: str | None = None
    prepared_by: Any = None
    add_date: str | None = None
    attachments: tuple[Attachment, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)


ProjectionFn = Callable[[Mapping[str, Any], str], Projection]


def _row_keys(raw: Mapping[str, Any]) -> list[str]:
    keys = getattr(raw, "keys", None)
    return list(keys()) if keys is not None else list(raw)


def row_value(raw: Mapping[str, Any], key: str) -> Any:
    if key not in _row_keys(raw):
        return None
    return raw[key]


def _decode_json_payload(value: object, encoding: str) -> object:
    text = sanitize_text(value, encoding=encoding)
    if not text:
        return None
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def parse_attachments(value: object, *, encoding: str = "utf-8") -> tuple[Attachment, ...]:
    """Parse a JSON attachment list; anything unparsable degrades to ``()``."""

    if isinstance(value, list):
        payload: object = value
    else:
        payload = _decode_json_payload(value, encoding)
    if not isinstance(payload, list):
        return ()

    attachments: list[Attachment] = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        size = entry.get("size")
        attachments.append(
            Attachment(
                url=sanitize_text(entry.get("url"), encoding=encoding),
                extension=sanitize_text(entry.get("extension"), encoding=encoding),
                size=size if isinstance(size, int) else sanitize_text(size, encoding=encoding),
                title=sanitize_text(entry.get("title"), encoding=encoding),
                kind=sanitize_text(entry.get("type"), encoding=encoding),
            )
        )
    return tuple(attachments)


def project_book(raw: Mapping[str, Any], encoding: str) -> Projection:
    fields = {name: sanitize_value(row_value(raw, name), encoding=encoding) for name in BOOK_FIELDS}
    return Projection(
        id=fields.pop("id"),
        title=fields["name"] or "",
        description=fields["topics"] or "",
        prepared_by=fields["author"] or "",
        extra=fields,
    )


def project_fatwa(raw: Mapping[str, Any], encoding: str) -> Projection:
    fields = {name: sanitize_value(row_value(raw, name), encoding=encoding) for name in FATWA_FIELDS}
    return Projection(
        id=fields.pop("id"),
        title=fields.pop("title"),
        description=fields["answer"] or "",
        extra=fields,
    )


def project_generic(raw: Mapping[str, Any], encoding: str) -> Projection:
    """Pass every column through, sanitizing text and parsing attachments."""

    fields: dict[str, Any] = {}
    attachments: tuple[Attachment, ...] = ()
    for key in _row_keys(raw):
        value = raw[key]
        if key == "attachments":
            attachments = parse_attachments(value, encoding=encoding)
            continue
        fields[key] = sanitize_value(value, encoding=encoding)

    add_date = fields.pop("add_date", None)
    return Projection(
        id=fields.pop("id", None),
        title=fields.pop("title", None),
        description=fields.pop("description", None),
        prepared_by=fields.pop("prepared_by", None),
        add_date=add_date or None,
        attachments=attachments,
        extra=fields,
    )
