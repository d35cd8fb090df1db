from src.engine.aggregation import (
    calculate_engagement,
    calculate_price_distribution,
    calculate_price_stats,
    classify_competition,
    rank_top_sellers,
    summarize_official_stores,
)
from src.engine.elasticity import analyze_prices
from src.engine.keywords import analyze_keywords
from src.engine.recommendations import MarketSignals, generate_recommendations
from src.engine.segmentation import segment_market
from src.engine.trend import analyze_trends, classify_trend, detect_seasonality

__all__ = [
    "MarketSignals",
    "analyze_keywords",
    "analyze_prices",
    "analyze_trends",
    "calculate_engagement",
    "calculate_price_distribution",
    "calculate_price_stats",
    "classify_competition",
    "classify_trend",
    "detect_seasonality",
    "generate_recommendations",
    "rank_top_sellers",
    "segment_market",
    "summarize_official_stores",
]
