"""
Market Radar - Aggregation Engine

Price statistics and official-store grouping are computed over the full
listing set. View/sale totals, conversion rate and the top-seller ranking
use only the detailed top-N subset.

Price distribution:
    width = (max - min) / segments
    bucket i covers [min + i·width, min + (i+1)·width); the last bucket
    also includes max. When min == max there is a single bucket [min, max].
"""

from __future__ import annotations

import bisect
from typing import NamedTuple, Sequence

import structlog

from src.config import CompetitionLevel, settings
from src.models.analysis import (
    ConditionDistribution,
    OfficialStoreStats,
    OfficialStoreSummary,
    PriceBucket,
    PriceRange,
    TopSeller,
)
from src.models.item import ItemStats
from src.models.listing import Listing

logger = structlog.get_logger(__name__)


class PriceStats(NamedTuple):
    """Min / max / arithmetic mean over all fetched prices."""
    min: float
    max: float
    mean: float


class _SellerTotals(NamedTuple):
    nickname: str | None
    total_sales: int
    listing_count: int


class EngagementTotals(NamedTuple):
    total_views: int
    total_sales: int
    conversion_rate: float


def calculate_price_stats(listings: Sequence[Listing]) -> PriceStats:
    """Returns zeros for an empty listing set."""
    prices = [float(listing.price) for listing in listings]
    if not prices:
        return PriceStats(0.0, 0.0, 0.0)
    return PriceStats(min(prices), max(prices), sum(prices) / len(prices))


def calculate_price_distribution(
    listings: Sequence[Listing],
    segments: int | None = None,
) -> list[PriceBucket]:
    """
    Partition [min(price), max(price)] into equal-width contiguous buckets.

    Every listing lands in exactly one bucket; percentages sum to 100.

    Args:
        listings: Full listing set.
        segments: Bucket count (default: PRICE_DISTRIBUTION_SEGMENTS).

    Returns:
        Buckets in ascending price order. Empty list for no listings.
    """
    n_segments = segments if segments is not None else settings.PRICE_DISTRIBUTION_SEGMENTS
    if n_segments < 1:
        raise ValueError("segments must be at least 1")

    prices = [float(listing.price) for listing in listings]
    if not prices:
        return []

    low, high = min(prices), max(prices)
    total = len(prices)

    if high == low:
        return [PriceBucket(min=low, max=high, count=total, percentage=100.0)]

    width = (high - low) / n_segments
    # Bucket i is [edges[i], edges[i+1]); the last one also holds max.
    edges = [low + i * width for i in range(n_segments)] + [high]
    counts = [0] * n_segments
    for price in prices:
        index = bisect.bisect_right(edges, price) - 1
        counts[min(index, n_segments - 1)] += 1

    return [
        PriceBucket(
            min=edges[i],
            max=edges[i + 1],
            count=count,
            percentage=count / total * 100,
        )
        for i, count in enumerate(counts)
    ]


def summarize_official_stores(
    listings: Sequence[Listing],
    store_names: dict[int, str] | None = None,
) -> OfficialStoreSummary:
    """
    Group listings that share a non-null official store id.

    percentage = number of store groups / total listings × 100.
    Store order follows first appearance in `listings`.
    """
    groups: dict[int, list[float]] = {}
    for listing in listings:
        if listing.official_store_id is None:
            continue
        groups.setdefault(listing.official_store_id, []).append(float(listing.price))

    names = store_names or {}
    stores = [
        OfficialStoreStats(
            store_id=store_id,
            name=names.get(store_id),
            listing_count=len(prices),
            average_price=sum(prices) / len(prices),
        )
        for store_id, prices in groups.items()
    ]

    return OfficialStoreSummary(
        count=len(groups),
        listing_count=sum(s.listing_count for s in stores),
        percentage=(len(groups) / len(listings) * 100) if listings else 0.0,
        stores=stores,
    )


def count_sellers(listings: Sequence[Listing]) -> int:
    return len({listing.seller_id for listing in listings if listing.seller_id is not None})


def classify_competition(seller_count: int) -> CompetitionLevel:
    if seller_count > settings.COMPETITION_HIGH_SELLERS:
        return CompetitionLevel.HIGH
    if seller_count > settings.COMPETITION_MEDIUM_SELLERS:
        return CompetitionLevel.MEDIUM
    return CompetitionLevel.LOW


def condition_distribution(listings: Sequence[Listing]) -> ConditionDistribution:
    new = sum(1 for listing in listings if listing.condition == "new")
    used = sum(1 for listing in listings if listing.condition == "used")
    return ConditionDistribution(new=new, used=used, other=len(listings) - new - used)


def calculate_engagement(stats: Sequence[ItemStats]) -> EngagementTotals:
    """conversion_rate = total sales / total views × 100 (0 when views is 0)."""
    views = sum(s.visits for s in stats)
    sales = sum(s.sold_quantity for s in stats)
    conversion = (sales / views * 100) if views else 0.0
    return EngagementTotals(views, sales, conversion)


def rank_top_sellers(
    detailed: Sequence[tuple[Listing, ItemStats]],
    limit: int | None = None,
) -> list[TopSeller]:
    """
    Group the detailed subset by seller, sum sales and keep the top `limit`.

    Sorting is stable, so ties keep the order in which sellers were first
    encountered.
    """
    top_n = limit if limit is not None else settings.TOP_SELLERS_LIMIT

    totals: dict[int, _SellerTotals] = {}
    for listing, stats in detailed:
        seller_id = listing.seller_id
        if seller_id is None:
            continue
        entry = totals.get(seller_id, _SellerTotals(listing.seller.nickname, 0, 0))
        totals[seller_id] = entry._replace(
            total_sales=entry.total_sales + stats.sold_quantity,
            listing_count=entry.listing_count + 1,
        )

    ranked = sorted(totals.items(), key=lambda item: item[1].total_sales, reverse=True)

    logger.debug(
        "top_sellers_ranked",
        seller_count=len(totals),
        limit=top_n,
    )
    return [
        TopSeller(
            seller_id=seller_id,
            nickname=entry.nickname,
            total_sales=entry.total_sales,
            listing_count=entry.listing_count,
        )
        for seller_id, entry in ranked[:top_n]
    ]


def count_premium_sellers(listings: Sequence[Listing], average_price: float) -> int:
    """Listings priced above the average that still record sales."""
    return sum(
        1
        for listing in listings
        if float(listing.price) > average_price and listing.sold_quantity > 0
    )
