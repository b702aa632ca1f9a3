"""Client-side persisted sample of the catalog, used when the server is down."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path
import tempfile
import threading
import time
from typing import Any, Callable, Protocol

from maktaba.catalog.models import ContentItem, Page
from maktaba.catalog.pagination import ITEMS_PER_PAGE, clamp_page, page_window, total_pages


REPLICA_FORMAT_VERSION = 1
DEFAULT_MAX_AGE_SECONDS = 30 * 60
DEFAULT_SAMPLE_SIZE = 50


logger = logging.getLogger(__name__)


class CatalogSource(Protocol):
    """Anything that can serve single-category and federated pages."""

    @property
    def category_names(self) -> tuple[str, ...]:
        ...

    def list_category(self, category: str, term: str | None, page: int, page_size: int) -> Page:
        ...

    async def list_all(self, term: str | None, page: int, page_size: int) -> Page:
        ...


@dataclass(frozen=True, slots=True)
class ReplicaSnapshot:
    built_at: float
    items: tuple[ContentItem, ...]

    def age_seconds(self, now: float) -> float:
        return max(0.0, now - self.built_at)


def dedupe_items(items: Iterable[ContentItem]) -> list[ContentItem]:
    """Keep the first occurrence of every ``(type, id)`` key."""

    deduped: list[ContentItem] = []
    seen: set[tuple[str, str]] = set()
    for item in items:
        if item.key in seen:
            continue
        seen.add(item.key)
        deduped.append(item)
    return deduped


def _author_texts(item: ContentItem) -> list[str]:
    texts: list[str] = []
    candidates: list[Any] = [item.prepared_by, item.extra.get("author")]
    for candidate in candidates:
        if isinstance(candidate, str):
            texts.append(candidate)
        elif isinstance(candidate, list):
            for entry in candidate:
                if isinstance(entry, dict) and isinstance(entry.get("title"), str):
                    texts.append(entry["title"])
                elif isinstance(entry, str):
                    texts.append(entry)
    return texts


def matches_term(item: ContentItem, term: str) -> bool:
    """Case-insensitive substring match over title, description and authors."""

    needle = term.casefold()
    if not needle:
        return True
    haystacks = [item.title or "", item.description or "", *_author_texts(item)]
    return any(needle in text.casefold() for text in haystacks)


class ClientSearchReplica:
    """Versioned JSON snapshot with a staleness check and a single-rebuild guard."""

    def __init__(
        self,
        path: str | Path,
        *,
        max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_age_seconds <= 0:
            raise ValueError("max_age_seconds must be positive")
        if sample_size <= 0:
            raise ValueError("sample_size must be positive")
        self._path = Path(path)
        self._max_age_seconds = max_age_seconds
        self._sample_size = sample_size
        self._clock = clock
        self._rebuild_lock = threading.Lock()
        self._snapshot: ReplicaSnapshot | None = None
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def rebuilding(self) -> bool:
        return self._rebuild_lock.locked()

    def snapshot(self) -> ReplicaSnapshot | None:
        if not self._loaded:
            self._snapshot = self._load()
            self._loaded = True
        return self._snapshot

    def is_fresh(self, max_age_seconds: float | None = None) -> bool:
        current = self.snapshot()
        if current is None or not current.items:
            return False
        limit = self._max_age_seconds if max_age_seconds is None else max_age_seconds
        return current.age_seconds(self._clock()) < limit

    def refresh(self, source: CatalogSource, max_age_seconds: float | None = None) -> ReplicaSnapshot | None:
        """Keep a fresh snapshot, otherwise rebuild it from ``source``.

        Only one rebuild runs at a time. A caller arriving mid-rebuild gets the
        stale snapshot, or waits for the rebuild when there is nothing stored.
        """

        if self.is_fresh(max_age_seconds):
            logger.info("Using existing search replica")
            return self.snapshot()

        if not self._rebuild_lock.acquire(blocking=False):
            stale = self.snapshot()
            if stale is not None:
                logger.info("Replica rebuild in progress, serving stale snapshot")
                return stale
            with self._rebuild_lock:
                return self.snapshot()

        try:
            return self._rebuild(source)
        finally:
            self._rebuild_lock.release()

    def _rebuild(self, source: CatalogSource) -> ReplicaSnapshot | None:
        collected: list[ContentItem] = []
        for category in source.category_names:
            try:
                page = source.list_category(category, "", 1, self._sample_size)
            except Exception as exc:
                logger.warning("Failed to sample %s for replica: %s", category, exc)
                continue
            collected.extend(page.items)
            logger.info("Sampled %d items from %s", len(page.items), category)

        unique = dedupe_items(collected)
        if not unique:
            logger.warning("Replica rebuild produced no items, keeping previous snapshot")
            return self.snapshot()

        snapshot = ReplicaSnapshot(built_at=self._clock(), items=tuple(unique))
        self._store(snapshot)
        self._snapshot = snapshot
        self._loaded = True
        logger.info("Replica rebuilt with %d items", len(unique))
        return snapshot

    def local_search(
        self,
        term: str | None,
        page: int = 1,
        page_size: int = ITEMS_PER_PAGE,
        *,
        category: str | None = None,
    ) -> Page:
        """Filter and paginate the stored sample; results are marked degraded."""

        current = self.snapshot()
        items = current.items if current is not None else ()
        needle = (term or "").strip()
        matched = [
            item
            for item in items
            if (not category or item.type == category) and matches_term(item, needle)
        ]

        pages = total_pages(len(matched), page_size)
        current_page = clamp_page(page, pages)
        offset, limit = page_window(current_page, page_size)
        return Page(
            items=tuple(matched[offset : offset + limit]),
            current_page=current_page,
            total_pages=pages,
            total_items=len(matched),
            items_per_page=page_size,
            degraded=True,
        )

    def _load(self) -> ReplicaSnapshot | None:
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable replica %s: %s", self._path, exc)
            return None

        if not isinstance(payload, dict) or payload.get("version") != REPLICA_FORMAT_VERSION:
            logger.warning("Ignoring replica %s with unsupported format", self._path)
            return None
        raw_items = payload.get("items")
        built_at = payload.get("built_at")
        if not isinstance(raw_items, list) or not isinstance(built_at, (int, float)):
            logger.warning("Ignoring malformed replica %s", self._path)
            return None

        items = tuple(ContentItem.from_dict(entry) for entry in raw_items if isinstance(entry, dict))
        return ReplicaSnapshot(built_at=float(built_at), items=items)

    def _store(self, snapshot: ReplicaSnapshot) -> None:
        payload = {
            "version": REPLICA_FORMAT_VERSION,
            "built_at": snapshot.built_at,
            "items": [item.to_dict() for item in snapshot.items],
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=str(self._path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False)
            os.replace(temp_name, self._path)
        except OSError:
            Path(temp_name).unlink(missing_ok=True)
            raise
