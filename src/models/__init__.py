"""
Models package: export all pydantic models.
"""

from src.models.analysis import (
    KeywordAnalysis,
    MarketAnalysis,
    MarketSegment,
    PriceAnalysis,
    PriceBucket,
    SalesTrend,
    TopSeller,
)
from src.models.item import HistoryPoint, ItemDetail, ItemHistory, ItemStats
from src.models.listing import Listing, ListingBatch, SearchPage
from src.models.seller import SellerReputation, StoreInfo

__all__ = [
    "HistoryPoint",
    "ItemDetail",
    "ItemHistory",
    "ItemStats",
    "KeywordAnalysis",
    "Listing",
    "ListingBatch",
    "MarketAnalysis",
    "MarketSegment",
    "PriceAnalysis",
    "PriceBucket",
    "SalesTrend",
    "SearchPage",
    "SellerReputation",
    "StoreInfo",
    "TopSeller",
]
