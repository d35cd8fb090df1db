"""
Market Radar - Market Analysis Report Models

The report is produced once per (query, official-store filter) pair, held
only in caller memory and superseded by the next report for the same query.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.config import CompetitionLevel, TrendDirection
from src.models.listing import Listing


class PriceRange(BaseModel):
    min: float = 0.0
    max: float = 0.0


class PriceBucket(BaseModel):
    """One equal-width price range. The last bucket includes its max."""

    min: float
    max: float
    count: int = 0
    percentage: float = 0.0


class ConditionDistribution(BaseModel):
    new: int = 0
    used: int = 0
    other: int = 0


class OfficialStoreStats(BaseModel):
    store_id: int
    name: Optional[str] = None
    listing_count: int
    average_price: float


class OfficialStoreSummary(BaseModel):
    count: int = Field(default=0, description="Distinct official stores")
    listing_count: int = Field(default=0, description="Listings sold by official stores")
    percentage: float = Field(default=0.0, description="Stores / total listings × 100")
    stores: list[OfficialStoreStats] = Field(default_factory=list)


class TopSeller(BaseModel):
    seller_id: int
    nickname: Optional[str] = None
    total_sales: int
    listing_count: int
    power_seller_status: Optional[str] = None


class PricePoint(BaseModel):
    date: date
    price: float


class SalesTrend(BaseModel):
    direction: TrendDirection = TrendDirection.STABLE
    growth_rate: float = 0.0
    seasonality: bool = False


class PriceAnalysis(BaseModel):
    predicted_price: float = 0.0
    confidence: float = 0.0
    price_range: PriceRange = Field(default_factory=PriceRange)
    elasticity: float = 0.0


class MarketSegment(BaseModel):
    id: int
    name: str
    listings: list[Listing] = Field(default_factory=list)
    center_price: float = 0.0
    average_sales: float = 0.0


class KeywordAnalysis(BaseModel):
    relevant_terms: list[str] = Field(default_factory=list)
    frequency: dict[str, int] = Field(default_factory=dict)
    sentiment: float = 0.0


class MarketAnalysis(BaseModel):
    """Complete market report for one query."""

    query: str
    official_stores_only: bool = False
    generated_at: datetime

    average_price: float
    price_range: PriceRange
    total_sellers: int
    total_listings: int = Field(description="Total listings available upstream")
    analyzed_listings: int = Field(description="Listings actually fetched")
    failed_pages: int = 0
    condition_distribution: ConditionDistribution
    official_stores: OfficialStoreSummary

    price_history: list[PricePoint] = Field(default_factory=list)
    sales_trend: SalesTrend = Field(default_factory=SalesTrend)
    competition_level: CompetitionLevel
    price_distribution: list[PriceBucket] = Field(default_factory=list)
    top_sellers: list[TopSeller] = Field(default_factory=list)

    total_views: int = 0
    total_sales: int = 0
    conversion_rate: float = 0.0

    price_analysis: PriceAnalysis = Field(default_factory=PriceAnalysis)
    segments: list[MarketSegment] = Field(default_factory=list)
    keywords: KeywordAnalysis = Field(default_factory=KeywordAnalysis)
    recommendations: list[str] = Field(default_factory=list)
