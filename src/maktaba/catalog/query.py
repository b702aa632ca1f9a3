"""Per-category search predicates and the count/fetch executor."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from maktaba.catalog.registry import DEFAULT_REGISTRY, CategoryDescriptor, CategoryRegistry
from maktaba.errors import ValidationError


RawRecord = Mapping[str, Any]

_LIKE_ESCAPE = "\\"


@dataclass(frozen=True, slots=True)
class SearchPredicate:
    """Case-folded substring filter over one category's search fields.

    Both sides go through Unicode case folding; the store registers the SQL
    ``casefold`` function. An empty term matches all rows.
    """

    fields: tuple[str, ...]
    term: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.term

    def to_sql(self) -> tuple[str, tuple[str, ...]]:
        if self.is_empty or not self.fields:
            return "1=1", ()
        pattern = f"%{escape_like(self.term.casefold())}%"
        clauses = " OR ".join(f"casefold({name}) LIKE ? ESCAPE '{_LIKE_ESCAPE}'" for name in self.fields)
        return f"({clauses})", tuple(pattern for _ in self.fields)


def escape_like(term: str) -> str:
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )


def build_predicate(descriptor: CategoryDescriptor, term: str | None) -> SearchPredicate:
    """The one place count and fetch filters come from."""

    return SearchPredicate(fields=descriptor.search_fields, term=(term or "").strip())


class CategoryStore(Protocol):
    def count(self, descriptor: CategoryDescriptor, predicate: SearchPredicate) -> int:
        ...

    def fetch(
        self,
        descriptor: CategoryDescriptor,
        predicate: SearchPredicate,
        *,
        offset: int,
        limit: int,
    ) -> list[RawRecord]:
        ...

    def fetch_by_id(self, descriptor: CategoryDescriptor, item_id: int) -> RawRecord | None:
        ...


def _validate_window(offset: int, limit: int) -> None:
    if offset < 0:
        raise ValidationError("offset cannot be negative")
    if limit <= 0:
        raise ValidationError("limit must be positive")


class PreparedQuery:
    """A category plus its predicate, reused for both count and fetch."""

    def __init__(self, store: CategoryStore, descriptor: CategoryDescriptor, predicate: SearchPredicate) -> None:
        self._store = store
        self.descriptor = descriptor
        self.predicate = predicate

    def count(self) -> int:
        return self._store.count(self.descriptor, self.predicate)

    def fetch(self, offset: int, limit: int) -> list[RawRecord]:
        _validate_window(offset, limit)
        return self._store.fetch(self.descriptor, self.predicate, offset=offset, limit=limit)


class QueryExecutor:
    """Validates requests and runs them against one category store at a time."""

    def __init__(self, store: CategoryStore, registry: CategoryRegistry = DEFAULT_REGISTRY) -> None:
        self._store = store
        self._registry = registry

    @property
    def registry(self) -> CategoryRegistry:
        return self._registry

    def prepare(self, category: str, term: str | None = None) -> PreparedQuery:
        descriptor = self._registry.descriptor_for(category)
        return PreparedQuery(self._store, descriptor, build_predicate(descriptor, term))

    def count(self, category: str, term: str | None = None) -> int:
        return self.prepare(category, term).count()

    def fetch(self, category: str, term: str | None, offset: int, limit: int) -> list[RawRecord]:
        _validate_window(offset, limit)
        return self.prepare(category, term).fetch(offset, limit)

    def count_and_fetch(
        self,
        category: str,
        term: str | None,
        offset: int,
        limit: int,
    ) -> tuple[int, list[RawRecord]]:
        _validate_window(offset, limit)
        query = self.prepare(category, term)
        return query.count(), query.fetch(offset, limit)

    def fetch_one(self, category: str, item_id: int) -> RawRecord | None:
        descriptor = self._registry.descriptor_for(category)
        return self._store.fetch_by_id(descriptor, item_id)
