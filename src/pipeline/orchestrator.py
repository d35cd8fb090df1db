"""
Market Radar - Report Orchestrator

Sequences the engine into one MarketAnalysis per query:

1. Listing Fetcher: first page, then remaining pages concurrently
2. Item Detail + Store Detail: fan-out over the top-N subset and the
   official stores found
3. Aggregation: price stats, distribution, stores, sellers, engagement
4. Seller Detail: reputation for the ranked top sellers
5. Trend, Elasticity, Segmentation, Keywords
6. Recommendations

Every step consumes the same listing set fetched in step 1. Only
NoDataError leaves analyze_market; every other failure arrives here as a
FetchResult and is degraded into a less precise report.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone
from typing import Sequence

import structlog

from src.config import settings
from src.engine.aggregation import (
    calculate_engagement,
    calculate_price_distribution,
    calculate_price_stats,
    classify_competition,
    condition_distribution,
    count_premium_sellers,
    count_sellers,
    rank_top_sellers,
    summarize_official_stores,
)
from src.engine.elasticity import analyze_prices
from src.engine.keywords import analyze_keywords
from src.engine.recommendations import MarketSignals, generate_recommendations
from src.engine.segmentation import segment_market
from src.engine.trend import analyze_trends
from src.errors import NoDataError
from src.models.analysis import (
    MarketAnalysis,
    PriceAnalysis,
    PricePoint,
    PriceRange,
    SalesTrend,
    TopSeller,
)
from src.models.item import ItemHistory
from src.models.listing import Listing
from src.pipeline.fetchers import (
    ItemDetailFetcher,
    ListingFetcher,
    SellerDetailFetcher,
    StoreDetailFetcher,
)
from src.pipeline.meli import MercadoLibreClient

logger = structlog.get_logger(__name__)


def build_price_history(histories: Sequence[ItemHistory]) -> list[PricePoint]:
    """Average history price per date across all known histories."""
    by_day: dict[date, list[float]] = {}
    for history in histories:
        for point in history.points:
            by_day.setdefault(point.date, []).append(float(point.price))
    return [
        PricePoint(date=day, price=sum(prices) / len(prices))
        for day, prices in sorted(by_day.items())
    ]


class MarketAnalyzer:
    """
    Builds market reports. Constructed and owned by the caller; holds no
    state between reports beyond its collaborators.

    Usage:
        async with MercadoLibreClient() as client:
            analyzer = MarketAnalyzer(client)
            report = await analyzer.analyze_market("iphone")
    """

    def __init__(
        self,
        client: MercadoLibreClient,
        listing_fetcher: ListingFetcher | None = None,
        item_fetcher: ItemDetailFetcher | None = None,
        seller_fetcher: SellerDetailFetcher | None = None,
        store_fetcher: StoreDetailFetcher | None = None,
        detail_top_n: int | None = None,
    ):
        self.listing_fetcher = listing_fetcher or ListingFetcher(client)
        self.item_fetcher = item_fetcher or ItemDetailFetcher(client)
        self.seller_fetcher = seller_fetcher or SellerDetailFetcher(client)
        self.store_fetcher = store_fetcher or StoreDetailFetcher(client)
        self.detail_top_n = detail_top_n if detail_top_n is not None else settings.DETAIL_TOP_N

    async def _attach_reputation(
        self, top_sellers: list[TopSeller], access_token: str | None
    ) -> list[TopSeller]:
        if not top_sellers:
            return top_sellers

        result = await self.seller_fetcher.fetch_batch(
            [s.seller_id for s in top_sellers], access_token=access_token
        )
        if not result.is_ok:
            logger.warning(
                "seller_reputation_skipped",
                seller_count=len(top_sellers),
                error=str(result.error),
            )
            return top_sellers

        reputations = result.value
        return [
            seller.model_copy(
                update={
                    "power_seller_status": reputations[seller.seller_id].power_seller_status,
                    "nickname": seller.nickname or reputations[seller.seller_id].nickname,
                }
            )
            for seller in top_sellers
        ]

    async def analyze_market(
        self,
        query: str,
        official_stores_only: bool = False,
        *,
        access_token: str | None = None,
        limit: int | None = None,
    ) -> MarketAnalysis:
        """
        Produce a market report for a keyword.

        Args:
            query: Search keyword.
            official_stores_only: Restrict listings to official stores.
            access_token: Optional bearer credential forwarded on every call.
            limit: Requested listing count (capped at MAX_LISTINGS).

        Returns:
            MarketAnalysis for this query.

        Raises:
            NoDataError: No listings could be fetched for the query.
        """
        logger.info(
            "market_analysis_started",
            query=query,
            official_stores_only=official_stores_only,
        )

        # 1. LISTINGS
        batch = await self.listing_fetcher.fetch(
            query,
            official_stores_only=official_stores_only,
            desired=limit,
            access_token=access_token,
        )
        listings: list[Listing] = batch.listings
        if not listings:
            logger.warning("market_analysis_no_data", query=query, failed_pages=batch.failed_pages)
            raise NoDataError(query)

        # 2. ITEM + STORE DETAIL
        subset = listings[: self.detail_top_n]
        store_ids = list(
            dict.fromkeys(
                x.official_store_id for x in listings if x.official_store_id is not None
            )
        )
        details, stores = await asyncio.gather(
            self.item_fetcher.fetch_many([x.id for x in subset], access_token=access_token),
            self.store_fetcher.fetch_many(store_ids, access_token=access_token),
        )
        store_names = {
            store_id: result.value.name
            for store_id, result in stores.items()
            if result.is_ok
        }

        # 3. AGGREGATION
        price_stats = calculate_price_stats(listings)
        seller_count = count_sellers(listings)
        competition = classify_competition(seller_count)

        detailed = [
            (listing, detail.stats)
            for listing, detail in zip(subset, details)
            if detail.stats is not None
        ]
        engagement = calculate_engagement([stats for _, stats in detailed])

        # 4. SELLER DETAIL
        top_sellers = await self._attach_reputation(
            rank_top_sellers(detailed), access_token
        )

        # 5. TREND / ELASTICITY / SEGMENTS / KEYWORDS
        histories = [d.history for d in details if d.history.is_known]
        trend = analyze_trends(histories)
        prices = analyze_prices(listings)

        # 6. RECOMMENDATIONS
        recommendations = generate_recommendations(
            MarketSignals(
                premium_listing_count=count_premium_sellers(listings, price_stats.mean),
                conversion_rate=engagement.conversion_rate,
                competition_level=competition,
                growth_rate=trend.growth_rate,
            )
        )

        report = MarketAnalysis(
            query=query,
            official_stores_only=official_stores_only,
            generated_at=datetime.now(timezone.utc),
            average_price=price_stats.mean,
            price_range=PriceRange(min=price_stats.min, max=price_stats.max),
            total_sellers=seller_count,
            total_listings=batch.total,
            analyzed_listings=len(listings),
            failed_pages=batch.failed_pages,
            condition_distribution=condition_distribution(listings),
            official_stores=summarize_official_stores(listings, store_names),
            price_history=build_price_history(histories),
            sales_trend=SalesTrend(
                direction=trend.direction,
                growth_rate=trend.growth_rate,
                seasonality=trend.seasonality,
            ),
            competition_level=competition,
            price_distribution=calculate_price_distribution(listings),
            top_sellers=top_sellers,
            total_views=engagement.total_views,
            total_sales=engagement.total_sales,
            conversion_rate=engagement.conversion_rate,
            price_analysis=PriceAnalysis(
                predicted_price=prices.predicted_price,
                confidence=prices.confidence,
                price_range=PriceRange(min=prices.min_price, max=prices.max_price),
                elasticity=prices.elasticity,
            ),
            segments=segment_market(listings),
            keywords=analyze_keywords(listings),
            recommendations=recommendations,
        )

        logger.info(
            "market_analysis_complete",
            query=query,
            analyzed_listings=report.analyzed_listings,
            total_listings=report.total_listings,
            failed_pages=report.failed_pages,
            detailed_items=len(detailed),
            trend=report.sales_trend.direction.value,
            competition=report.competition_level.value,
        )
        return report
