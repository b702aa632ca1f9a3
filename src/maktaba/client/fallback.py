"""Consumer-side search: server first, local replica when the server fails."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import time

from maktaba.catalog.models import Page
from maktaba.catalog.pagination import ITEMS_PER_PAGE
from maktaba.client.replica import CatalogSource, ClientSearchReplica


DEFAULT_SEARCH_TIMEOUT_SECONDS = 25.0
FALLBACK_NOTICE = "Server search failed, results come from the local replica"


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchResponse:
    page: Page
    error: str | None = None
    timed_out: bool = False

    @property
    def degraded(self) -> bool:
        return self.page.degraded

    def to_dict(self) -> dict[str, object]:
        payload = self.page.to_dict()
        if self.error is not None:
            payload["notice"] = FALLBACK_NOTICE
            payload["server_error"] = self.error
        return payload


class CatalogClient:
    """Runs federated searches and degrades to the replica on total failure."""

    def __init__(
        self,
        source: CatalogSource,
        replica: ClientSearchReplica,
        *,
        timeout_seconds: float = DEFAULT_SEARCH_TIMEOUT_SECONDS,
        page_size: int = ITEMS_PER_PAGE,
    ) -> None:
        self._source = source
        self._replica = replica
        self._timeout_seconds = timeout_seconds
        self._page_size = page_size

    async def warm_replica(self) -> None:
        """Opportunistic refresh; failures are logged and never raised."""

        try:
            await asyncio.to_thread(self._replica.refresh, self._source)
        except Exception as exc:
            logger.warning("Could not warm search replica: %s", exc)

    async def search(self, term: str | None, page: int = 1, *, category: str | None = None) -> SearchResponse:
        started = time.perf_counter()
        try:
            result = await asyncio.wait_for(
                self._source.list_all(term, page, self._page_size),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError:
            latency_ms = (time.perf_counter() - started) * 1000
            logger.warning("Server search timed out in %.2fms, falling back to replica", latency_ms)
            return await self._fallback(term, page, category=category, error="Search timed out", timed_out=True)
        except Exception as exc:
            latency_ms = (time.perf_counter() - started) * 1000
            logger.warning("Server search failed after %.2fms, falling back to replica: %s", latency_ms, exc)
            return await self._fallback(term, page, category=category, error=str(exc))

        latency_ms = (time.perf_counter() - started) * 1000
        logger.info("Server search latency: %.2fms", latency_ms)
        return SearchResponse(page=result)

    async def _fallback(
        self,
        term: str | None,
        page: int,
        *,
        category: str | None,
        error: str,
        timed_out: bool = False,
    ) -> SearchResponse:
        await self.warm_replica()
        local_page = self._replica.local_search(term, page, self._page_size, category=category)
        logger.info("Local replica search returned %d of %d items", len(local_page.items), local_page.total_items)
        return SearchResponse(page=local_page, error=error, timed_out=timed_out)
