"""Normalizer: raw category rows to canonical ContentItem values."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable

from maktaba.catalog.models import ContentItem
from maktaba.catalog.projections import row_value
from maktaba.catalog.registry import DEFAULT_REGISTRY, CategoryRegistry
from maktaba.catalog.text import sanitize_text, truncate_description


DESCRIPTION_SHORT_CHARS = 150
ADD_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_ADD_DATE_FALLBACK_FIELDS = ("created_at", "pub_date")


class Normalizer:
    """Project raw rows per category, then apply the common post-processing."""

    def __init__(
        self,
        registry: CategoryRegistry = DEFAULT_REGISTRY,
        *,
        encoding: str = "utf-8",
        clock: Callable[[], datetime] = datetime.now,
        description_short_chars: int = DESCRIPTION_SHORT_CHARS,
    ) -> None:
        self._registry = registry
        self._encoding = encoding
        self._clock = clock
        self._description_short_chars = description_short_chars

    def normalize(self, raw: Mapping[str, Any], category: str) -> ContentItem:
        descriptor = self._registry.descriptor_for(category)
        projection = descriptor.projection(raw, self._encoding)

        add_date = projection.add_date or self._fallback_add_date(raw)
        return ContentItem(
            id=projection.id,
            type=descriptor.name,
            add_date=add_date,
            title=projection.title,
            description=projection.description,
            description_short=truncate_description(
                projection.description,
                limit=self._description_short_chars,
            ),
            prepared_by=projection.prepared_by,
            attachments=projection.attachments,
            extra=projection.extra,
        )

    def normalize_many(self, rows: list[Mapping[str, Any]], category: str) -> list[ContentItem]:
        return [self.normalize(row, category) for row in rows]

    def _fallback_add_date(self, raw: Mapping[str, Any]) -> str:
        for key in _ADD_DATE_FALLBACK_FIELDS:
            value = sanitize_text(row_value(raw, key), encoding=self._encoding)
            if value:
                return value
        return self._clock().strftime(ADD_DATE_FORMAT)
