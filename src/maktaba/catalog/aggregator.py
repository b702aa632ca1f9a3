"""Single-category and federated browsing over all category stores."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import time

from maktaba.catalog.merge import order_merged_items
from maktaba.catalog.models import CatalogStats, CategorySummary, ContentItem, Page
from maktaba.catalog.normalize import Normalizer
from maktaba.catalog.pagination import ITEMS_PER_PAGE, clamp_page, page_window, require_page_size, total_pages
from maktaba.catalog.query import QueryExecutor, RawRecord
from maktaba.catalog.registry import CategoryDescriptor
from maktaba.errors import NotFoundError, StorageError, TotalSourceFailure, ValidationError


DEFAULT_FEDERATED_POOL_SIZE = 10
DEFAULT_CATEGORY_TIMEOUT_SECONDS = 10.0


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CategoryOutcome:
    """What one category contributed to a federated call."""

    category: str
    total: int = 0
    rows: list[RawRecord] = field(default_factory=list)
    error: str | None = None
    timed_out: bool = False

    @property
    def failed(self) -> bool:
        return self.error is not None


def _parse_item_id(item_id: object) -> int:
    text = str(item_id).strip() if item_id is not None else ""
    if not text:
        raise ValidationError("Category and id are required")
    try:
        value = int(text)
    except ValueError as exc:
        raise ValidationError(f"Invalid id: {item_id!r}") from exc
    if value <= 0:
        raise ValidationError(f"Invalid id: {item_id!r}")
    return value


class Aggregator:
    """Runs count+fetch per category, normalizes rows and paginates results.

    The federated path merges a bounded pool (``pool_size`` most recent rows
    per category) while reporting true per-category totals, so pages past the
    pooled window come back short or empty.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        normalizer: Normalizer,
        *,
        pool_size: int = DEFAULT_FEDERATED_POOL_SIZE,
        category_timeout_seconds: float = DEFAULT_CATEGORY_TIMEOUT_SECONDS,
    ) -> None:
        if pool_size <= 0:
            raise ValueError("pool_size must be positive")
        if category_timeout_seconds <= 0:
            raise ValueError("category_timeout_seconds must be positive")
        self._executor = executor
        self._normalizer = normalizer
        self._registry = executor.registry
        self._pool_size = pool_size
        self._category_timeout_seconds = category_timeout_seconds

    @property
    def category_names(self) -> tuple[str, ...]:
        return self._registry.names()

    def list_category(
        self,
        category: str,
        term: str | None = None,
        page: int = 1,
        page_size: int = ITEMS_PER_PAGE,
    ) -> Page:
        require_page_size(page_size)
        query = self._executor.prepare(category, term)
        total = query.count()
        pages = total_pages(total, page_size)
        current = clamp_page(page, pages)
        offset, limit = page_window(current, page_size)
        rows = query.fetch(offset, limit) if offset < total else []
        items = self._normalizer.normalize_many(rows, query.descriptor.name)
        return Page(
            items=tuple(items),
            current_page=current,
            total_pages=pages,
            total_items=total,
            items_per_page=page_size,
        )

    async def list_all(
        self,
        term: str | None = None,
        page: int = 1,
        page_size: int = ITEMS_PER_PAGE,
    ) -> Page:
        descriptors = self._registry.all_categories()
        if not descriptors:
            return Page(items=(), current_page=1, total_pages=1, total_items=0, items_per_page=page_size)
        require_page_size(page_size)

        started = time.perf_counter()
        outcomes = await asyncio.gather(
            *(self._collect_with_timeout(descriptor, term) for descriptor in descriptors)
        )
        latency_ms = (time.perf_counter() - started) * 1000

        failures = {outcome.category: outcome.error or "" for outcome in outcomes if outcome.failed}
        if len(failures) == len(outcomes):
            logger.error("Federated query failed for every category in %.2fms", latency_ms)
            raise TotalSourceFailure(failures)
        if failures:
            timed_out = sorted(outcome.category for outcome in outcomes if outcome.timed_out)
            errored = sorted(name for name in failures if name not in timed_out)
            logger.warning(
                "Federated query absorbed %d failed categories in %.2fms (timed out: %s; errors: %s)",
                len(failures),
                latency_ms,
                ", ".join(timed_out) or "none",
                ", ".join(errored) or "none",
            )
        else:
            logger.info("Federated query latency: %.2fms", latency_ms)

        total = sum(outcome.total for outcome in outcomes)
        pool: list[ContentItem] = []
        for outcome in outcomes:
            pool.extend(self._normalizer.normalize_many(outcome.rows, outcome.category))
        ordered = order_merged_items(pool, registry=self._registry)

        pages = total_pages(total, page_size)
        current = clamp_page(page, pages)
        offset, limit = page_window(current, page_size)
        return Page(
            items=tuple(ordered[offset : offset + limit]),
            current_page=current,
            total_pages=pages,
            total_items=total,
            items_per_page=page_size,
        )

    async def _collect_with_timeout(self, descriptor: CategoryDescriptor, term: str | None) -> CategoryOutcome:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._collect, descriptor, term),
                timeout=self._category_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("Category %s timed out after %.2fs", descriptor.name, self._category_timeout_seconds)
            return CategoryOutcome(category=descriptor.name, error="timed out", timed_out=True)
        except StorageError as exc:
            logger.warning("Category %s unavailable: %s", descriptor.name, exc)
            return CategoryOutcome(category=descriptor.name, error=str(exc))

    def _collect(self, descriptor: CategoryDescriptor, term: str | None) -> CategoryOutcome:
        total, rows = self._executor.count_and_fetch(descriptor.name, term, 0, self._pool_size)
        return CategoryOutcome(category=descriptor.name, total=total, rows=rows)

    def get_item(self, category: str, item_id: object) -> ContentItem:
        if not (category or "").strip():
            raise ValidationError("Category and id are required")
        descriptor = self._registry.descriptor_for(category)
        parsed_id = _parse_item_id(item_id)
        row = self._executor.fetch_one(descriptor.name, parsed_id)
        if row is None:
            raise NotFoundError(f"Item not found: {descriptor.name}/{parsed_id}")
        return self._normalizer.normalize(row, descriptor.name)

    def list_categories(self) -> list[CategorySummary]:
        summaries: list[CategorySummary] = []
        for descriptor in self._registry.all_categories():
            try:
                count = self._executor.count(descriptor.name)
            except StorageError as exc:
                logger.warning("Skipping category %s in listing: %s", descriptor.name, exc)
                continue
            if count > 0:
                summaries.append(
                    CategorySummary(name=descriptor.name, display_name=descriptor.display_name, item_count=count)
                )
        return summaries

    def stats(self) -> CatalogStats:
        per_category: dict[str, int] = {}
        for descriptor in self._registry.all_categories():
            try:
                per_category[descriptor.name] = self._executor.count(descriptor.name)
            except StorageError as exc:
                logger.warning("Counting category %s as empty in stats: %s", descriptor.name, exc)
                per_category[descriptor.name] = 0
        return CatalogStats(total_items=sum(per_category.values()), per_category=per_category)
