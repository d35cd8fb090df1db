"""
Market Radar - Listing, Item, Seller & Store Fetchers

All fan-out happens with asyncio.gather on a single event loop. Each
concurrent fetch writes only to its own slot in the gathered result list,
so no locking is needed. A batch returns only after every call in it has
settled, including when one of them fails. Failures are captured per scope:

- Listing pages: a failed page contributes zero listings.
- Item detail: a failed stats pair fails that item's stats; a failed
  history call yields an empty (unknown) history.
- Seller detail: one failure fails the whole batch.
- Store detail: a failed store lookup only affects that store.
"""

from __future__ import annotations

import asyncio
import math
from datetime import date, datetime, timedelta, timezone
from typing import Any, Awaitable

import structlog

from src.config import settings
from src.errors import DependencyUnavailable, FetchResult, PartialFetchError
from src.models.item import HistoryPoint, ItemDetail, ItemHistory, ItemStats
from src.models.listing import Listing, ListingBatch, SearchPage
from src.models.seller import SellerReputation, StoreInfo
from src.pipeline.meli import MercadoLibreClient

logger = structlog.get_logger(__name__)


async def _settle(*aws: Awaitable[Any]) -> list[Any]:
    """
    Wait for every awaitable to finish, then re-raise the first failure.

    No sibling call is still running when a failure is raised.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


# ---------------------------------------------------------------------------
# Listing Fetcher
# ---------------------------------------------------------------------------


class ListingFetcher:
    """
    Paged search retrieval tolerant of partial page failures.

    The first page is requested at the maximum page size. When more listings
    are needed and available, the remaining pages are issued concurrently.
    """

    def __init__(
        self,
        client: MercadoLibreClient,
        page_size: int | None = None,
        max_listings: int | None = None,
    ):
        self._client = client
        self._page_size = page_size or settings.SEARCH_PAGE_SIZE
        self._max_listings = max_listings or settings.MAX_LISTINGS

    async def _fetch_page(
        self,
        query: str,
        limit: int,
        offset: int,
        official_stores_only: bool,
        access_token: str | None,
    ) -> FetchResult[SearchPage]:
        try:
            page = await self._client.search(
                query,
                limit=limit,
                offset=offset,
                official_stores_only=official_stores_only,
                access_token=access_token,
            )
            return FetchResult.ok(page)
        except DependencyUnavailable as e:
            return FetchResult.failed(PartialFetchError(f"search page offset={offset}", e))

    async def fetch(
        self,
        query: str,
        official_stores_only: bool = False,
        desired: int | None = None,
        access_token: str | None = None,
    ) -> ListingBatch:
        """
        Collect up to `desired` listings (capped at MAX_LISTINGS).

        Args:
            query: Search keyword.
            official_stores_only: Restrict to official stores.
            desired: Requested listing count, clamped to [1, MAX_LISTINGS];
                defaults to the cap.
            access_token: Optional bearer credential.

        Returns:
            ListingBatch with the listings gathered, the upstream total and the
            number of pages that failed. Listing count may be below `desired`.
        """
        if desired is None:
            wanted = self._max_listings
        else:
            wanted = max(1, min(desired, self._max_listings))

        first = await self._fetch_page(
            query, min(self._page_size, wanted), 0, official_stores_only, access_token
        )
        if not first.is_ok:
            logger.warning(
                "listing_first_page_failed",
                query=query,
                error=str(first.error),
            )
            return ListingBatch(listings=[], total=0, failed_pages=1)

        first_page = first.value
        total = first_page.paging.total
        listings: list[Listing] = list(first_page.results)

        target = min(wanted, total)
        remaining = target - len(listings)
        failed_pages = 0

        if remaining > 0 and total > self._page_size:
            page_count = math.ceil(remaining / self._page_size)
            tasks = []
            for i in range(page_count):
                offset = self._page_size * (i + 1)
                limit = min(self._page_size, remaining - i * self._page_size)
                tasks.append(
                    self._fetch_page(query, limit, offset, official_stores_only, access_token)
                )

            results = await asyncio.gather(*tasks)

            for result in results:
                if result.is_ok:
                    listings.extend(result.value.results)
                else:
                    failed_pages += 1
                    logger.warning(
                        "listing_page_failed",
                        query=query,
                        error=str(result.error),
                    )

        listings = listings[:wanted]

        logger.info(
            "listing_fetch_complete",
            query=query,
            official_stores_only=official_stores_only,
            fetched=len(listings),
            total=total,
            failed_pages=failed_pages,
        )
        return ListingBatch(listings=listings, total=total, failed_pages=failed_pages)


# ---------------------------------------------------------------------------
# Item Detail Fetcher
# ---------------------------------------------------------------------------


class ItemDetailFetcher:
    """Per-item visit/sales counters and the reconstructed 30-day history."""

    def __init__(self, client: MercadoLibreClient, window_days: int | None = None):
        self._client = client
        self._window_days = window_days or settings.HISTORY_WINDOW_DAYS

    async def fetch_stats(
        self, item_id: str, access_token: str | None = None
    ) -> FetchResult[ItemStats]:
        """
        Visits window and item stats are requested concurrently. Either
        failure fails the whole stats object for this item.
        """
        try:
            visits, counters = await _settle(
                self._client.get_item_visits(
                    item_id, self._window_days, access_token=access_token
                ),
                self._client.get_item_stats(item_id, access_token=access_token),
            )
        except DependencyUnavailable as e:
            logger.warning("item_stats_failed", item_id=item_id, error=str(e))
            return FetchResult.failed(PartialFetchError(f"item stats {item_id}", e))

        return FetchResult.ok(
            ItemStats(
                item_id=item_id,
                visits=sum(v.total for v in visits),
                sold_quantity=counters.sold_quantity,
                lifetime_visits=counters.visits,
            )
        )

    async def fetch_history(
        self,
        item_id: str,
        access_token: str | None = None,
        today: date | None = None,
    ) -> FetchResult[ItemHistory]:
        """
        Rebuild a daily history for the trailing window.

        Price and stock are the listing's current values for every day; only
        visit counts come from the visits time window. Days without a visit
        record count as zero visits.
        """
        try:
            listing, visits = await _settle(
                self._client.get_item(item_id, access_token=access_token),
                self._client.get_item_visits(
                    item_id, self._window_days, access_token=access_token
                ),
            )
        except DependencyUnavailable as e:
            logger.warning("item_history_failed", item_id=item_id, error=str(e))
            return FetchResult.failed(PartialFetchError(f"item history {item_id}", e))

        end = today or datetime.now(timezone.utc).date()
        visits_by_day: dict[date, int] = {}
        for v in visits:
            day = v.date.date()
            visits_by_day[day] = visits_by_day.get(day, 0) + v.total

        points = [
            HistoryPoint(
                date=day,
                price=listing.price,
                available_quantity=listing.available_quantity,
                visit_count=visits_by_day.get(day, 0),
            )
            for day in (
                end - timedelta(days=offset)
                for offset in range(self._window_days - 1, -1, -1)
            )
        ]
        return FetchResult.ok(ItemHistory(item_id=item_id, points=points))

    async def fetch_detail(
        self, item_id: str, access_token: str | None = None
    ) -> ItemDetail:
        stats, history = await asyncio.gather(
            self.fetch_stats(item_id, access_token=access_token),
            self.fetch_history(item_id, access_token=access_token),
        )
        return ItemDetail(
            item_id=item_id,
            stats=stats.value_or(None),
            history=history.value_or(ItemHistory(item_id=item_id)),
        )

    async def fetch_many(
        self, item_ids: list[str], access_token: str | None = None
    ) -> list[ItemDetail]:
        """Fetch detail for every item concurrently; order matches `item_ids`."""
        details = await asyncio.gather(
            *(self.fetch_detail(item_id, access_token=access_token) for item_id in item_ids)
        )
        logger.info(
            "item_details_complete",
            requested=len(item_ids),
            with_stats=sum(1 for d in details if d.stats is not None),
            with_history=sum(1 for d in details if d.history.is_known),
        )
        return list(details)


# ---------------------------------------------------------------------------
# Seller Detail Fetcher
# ---------------------------------------------------------------------------


class SellerDetailFetcher:
    """
    Seller reputation lookup. Unlike pages and items, errors are not
    tolerated per seller: one failure fails the whole batch.
    """

    def __init__(self, client: MercadoLibreClient):
        self._client = client

    async def fetch_batch(
        self, seller_ids: list[int], access_token: str | None = None
    ) -> FetchResult[dict[int, SellerReputation]]:
        try:
            sellers = await _settle(
                *(self._client.get_seller(sid, access_token=access_token) for sid in seller_ids)
            )
        except DependencyUnavailable as e:
            logger.warning(
                "seller_batch_failed",
                seller_count=len(seller_ids),
                error=str(e),
            )
            return FetchResult.failed(e)

        return FetchResult.ok(dict(zip(seller_ids, sellers)))


# ---------------------------------------------------------------------------
# Official store lookup
# ---------------------------------------------------------------------------


class StoreDetailFetcher:
    """Official store names, fetched concurrently with per-store isolation."""

    def __init__(self, client: MercadoLibreClient):
        self._client = client

    async def _fetch_one(
        self, store_id: int, access_token: str | None
    ) -> FetchResult[StoreInfo]:
        try:
            return FetchResult.ok(
                await self._client.get_store(store_id, access_token=access_token)
            )
        except DependencyUnavailable as e:
            logger.warning("store_detail_failed", store_id=store_id, error=str(e))
            return FetchResult.failed(e)

    async def fetch_many(
        self, store_ids: list[int], access_token: str | None = None
    ) -> dict[int, FetchResult[StoreInfo]]:
        results = await asyncio.gather(
            *(self._fetch_one(sid, access_token) for sid in store_ids)
        )
        return dict(zip(store_ids, results))
