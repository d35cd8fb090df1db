"""
Market Radar - Configuration & Constants

Every threshold, page size and model parameter used by the analysis
engine lives here. No hardcoded values in business logic.

Usage:
    from src.config import settings
"""

from __future__ import annotations

from enum import Enum

from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TrendDirection(str, Enum):
    """Sales trend classification."""
    UP = "up"           # growth rate > TREND_UP_THRESHOLD
    DOWN = "down"       # growth rate < TREND_DOWN_THRESHOLD
    STABLE = "stable"   # dead zone in between


class CompetitionLevel(str, Enum):
    """Competition level derived from the number of distinct sellers."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Central configuration for Market Radar.

    Loads from environment variables with fallback defaults.
    """

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # -----------------------------------------------------------------------
    # MercadoLibre API
    # -----------------------------------------------------------------------
    MELI_API_BASE_URL: str = "https://api.mercadolibre.com"
    MELI_SITE_ID: str = "MLA"
    MELI_ACCESS_TOKEN: str = ""             # Optional default bearer token (CLI only)
    HTTP_TIMEOUT_SECONDS: float = 10.0      # Per-call timeout, no retries

    # -----------------------------------------------------------------------
    # Listing Fetcher
    # -----------------------------------------------------------------------
    SEARCH_PAGE_SIZE: int = 50              # Upstream maximum page size
    MAX_LISTINGS: int = 100                 # Cap on caller-requested count

    # -----------------------------------------------------------------------
    # Item Detail Fetcher
    # -----------------------------------------------------------------------
    DETAIL_TOP_N: int = 10                  # Listings that get per-item detail
    HISTORY_WINDOW_DAYS: int = 30

    # -----------------------------------------------------------------------
    # Aggregation
    # -----------------------------------------------------------------------
    PRICE_DISTRIBUTION_SEGMENTS: int = 5
    TOP_SELLERS_LIMIT: int = 5
    COMPETITION_HIGH_SELLERS: int = 50      # unique sellers > 50 → high
    COMPETITION_MEDIUM_SELLERS: int = 20    # unique sellers > 20 → medium

    # -----------------------------------------------------------------------
    # Trend Analyzer
    # -----------------------------------------------------------------------
    TREND_UP_THRESHOLD: float = 5.0         # growth % above → "up"
    TREND_DOWN_THRESHOLD: float = -5.0      # growth % below → "down"
    SEASONALITY_MIN_POINTS: int = 4
    SEASONALITY_THRESHOLD: float = 0.7      # |autocorrelation| above → seasonal

    # -----------------------------------------------------------------------
    # Elasticity Estimator
    # -----------------------------------------------------------------------
    ELASTICITY_EPOCHS: int = 50
    ELASTICITY_LEARNING_RATE: float = 0.1
    ELASTICITY_BASE_CONFIDENCE: float = 0.95
    ELASTICITY_FALLBACK_CONFIDENCE: float = 0.5

    # -----------------------------------------------------------------------
    # Market Segmenter
    # -----------------------------------------------------------------------
    SEGMENT_COUNT: int = 3
    SEGMENT_NAMES: list[str] = ["Premium", "Mid-Market", "Value"]

    # -----------------------------------------------------------------------
    # Keyword / Sentiment Analyzer
    # -----------------------------------------------------------------------
    KEYWORD_MIN_LENGTH: int = 3             # tokens of length <= 3 are dropped
    KEYWORD_TOP_TERMS: int = 10
    POSITIVE_LEXICON: list[str] = ["nuevo", "original", "garantía", "oferta", "premium"]
    NEGATIVE_LEXICON: list[str] = ["usado", "roto", "defecto", "viejo", "dañado"]

    # -----------------------------------------------------------------------
    # Recommendation Generator
    # -----------------------------------------------------------------------
    LOW_CONVERSION_RATE: float = 2.0        # conversion % below → suggestion
    GROWTH_INVENTORY_THRESHOLD: float = 10.0
    DECLINE_REPRICE_THRESHOLD: float = -10.0


# Singleton instance
settings = Settings()
