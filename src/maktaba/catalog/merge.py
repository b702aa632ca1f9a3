"""Ordering rules for merging per-category pages into one federated list."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from functools import cmp_to_key

from maktaba.catalog.models import ContentItem
from maktaba.catalog.registry import DEFAULT_REGISTRY, CategoryRegistry


EPOCH = datetime(1970, 1, 1)
_DATE_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d", "%Y/%m/%d %H:%M:%S", "%Y/%m/%d", "%d/%m/%Y")


def parse_timestamp(value: object) -> datetime:
    """Parse a stored date into a naive UTC datetime; anything else is the epoch."""

    if not isinstance(value, str) or not value.strip():
        return EPOCH
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
        for date_format in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, date_format)
                break
            except ValueError:
                continue
        if parsed is None:
            return EPOCH
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def numeric_id(value: object) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0


def compare_items(
    left: ContentItem,
    right: ContentItem,
    *,
    registry: CategoryRegistry = DEFAULT_REGISTRY,
) -> int:
    """Negative when ``left`` sorts first.

    When either side comes from an identifier-ordered category, larger ids
    come first. Otherwise newer ``add_date`` comes first. Zero keeps input order.
    """

    if _identifier_ordered(left, registry) or _identifier_ordered(right, registry):
        return numeric_id(right.id) - numeric_id(left.id)

    left_date = parse_timestamp(left.add_date)
    right_date = parse_timestamp(right.add_date)
    if left_date == right_date:
        return 0
    return -1 if left_date > right_date else 1


def _identifier_ordered(item: ContentItem, registry: CategoryRegistry) -> bool:
    return item.type in registry and registry.descriptor_for(item.type).is_identifier_ordered


def order_merged_items(
    items: Iterable[ContentItem],
    *,
    registry: CategoryRegistry = DEFAULT_REGISTRY,
) -> list[ContentItem]:
    """Stable sort of the concatenated per-category pool."""

    return sorted(items, key=cmp_to_key(lambda left, right: compare_items(left, right, registry=registry)))
