"""Transport-agnostic request handling for the catalog read API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from maktaba.catalog.aggregator import Aggregator
from maktaba.catalog.normalize import Normalizer
from maktaba.catalog.pagination import ITEMS_PER_PAGE
from maktaba.catalog.query import QueryExecutor
from maktaba.catalog.registry import DEFAULT_REGISTRY
from maktaba.catalog.repository import ContentRepository
from maktaba.config import CatalogSettings
from maktaba.errors import NotFoundError, StorageError, TotalSourceFailure, ValidationError
from maktaba.library.scholars import ScholarLibrary


ACTIONS = ("categories", "items", "item", "stats", "search", "scholars", "scholar_info", "scholar_content")


logger = logging.getLogger(__name__)


def _parse_page(raw: object) -> int:
    try:
        return max(1, int(str(raw).strip()))
    except (TypeError, ValueError):
        return 1


def _text_param(params: Mapping[str, Any], key: str) -> str:
    value = params.get(key)
    return str(value).strip() if value is not None else ""


def error_payload(exc: Exception) -> dict[str, Any]:
    if isinstance(exc, ValidationError):
        status = 400
    elif isinstance(exc, NotFoundError):
        status = 404
    elif isinstance(exc, TotalSourceFailure):
        status = 503
    else:
        status = 500
    return {"error": True, "message": str(exc), "status": status}


class CatalogService:
    """Maps named actions onto the aggregator and the scholar library."""

    def __init__(self, aggregator: Aggregator, library: ScholarLibrary | None = None) -> None:
        self._aggregator = aggregator
        self._library = library

    @property
    def aggregator(self) -> Aggregator:
        return self._aggregator

    async def handle(self, action: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        request = params or {}
        logger.info("Catalog action: %s", action or "none")
        try:
            return await self._dispatch((action or "").strip(), request)
        except (ValidationError, NotFoundError, StorageError, TotalSourceFailure) as exc:
            logger.warning("Catalog action %s failed: %s", action or "none", exc)
            return error_payload(exc)

    async def _dispatch(self, action: str, params: Mapping[str, Any]) -> dict[str, Any]:
        page = _parse_page(params.get("page", 1))
        term = _text_param(params, "search")

        if action == "categories":
            summaries = await asyncio.to_thread(self._aggregator.list_categories)
            return {"success": True, "data": [summary.to_dict() for summary in summaries]}

        if action == "items":
            category = _text_param(params, "category")
            if not category:
                raise ValidationError("Category is required")
            result = await asyncio.to_thread(self._aggregator.list_category, category, term, page, ITEMS_PER_PAGE)
            return result.to_dict()

        if action == "item":
            item = await asyncio.to_thread(self._aggregator.get_item, _text_param(params, "category"), params.get("id"))
            return {"success": True, "data": item.to_dict()}

        if action == "stats":
            stats = await asyncio.to_thread(self._aggregator.stats)
            return {"success": True, "data": stats.to_dict()}

        if action == "search":
            result = await self._aggregator.list_all(term, page, ITEMS_PER_PAGE)
            return result.to_dict()

        if action in {"scholars", "scholar_info", "scholar_content"}:
            return {"success": True, "data": self._handle_library(action, params)}

        raise ValidationError(f"Invalid action: {action!r}")

    def _handle_library(self, action: str, params: Mapping[str, Any]) -> Any:
        if self._library is None:
            raise NotFoundError("Scholar library is not configured")
        if action == "scholars":
            return [scholar.to_dict() for scholar in self._library.list_scholars()]
        scholar = _text_param(params, "scholar")
        if action == "scholar_info":
            return self._library.scholar_info(scholar).to_dict()
        return self._library.scholar_content(scholar, _text_param(params, "section")).to_dict()


def build_service(settings: CatalogSettings) -> tuple[CatalogService, ContentRepository]:
    """Wire repository, executor, normalizer and aggregator from settings.

    The caller owns the returned repository and must close it.
    """

    repository = ContentRepository(settings.db_path)
    executor = QueryExecutor(repository, DEFAULT_REGISTRY)
    normalizer = Normalizer(DEFAULT_REGISTRY, encoding=settings.text_encoding)
    aggregator = Aggregator(
        executor,
        normalizer,
        pool_size=settings.federated_pool_size,
        category_timeout_seconds=settings.category_timeout_seconds,
    )
    library = ScholarLibrary(settings.library_root, url_prefix=settings.library_url_prefix)
    return CatalogService(aggregator, library), repository
