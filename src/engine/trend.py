"""
Market Radar - Trend & Seasonality Analyzer

Monthly growth:
    1. Sum the sales proxy (daily visit count) of every history point per
       calendar month, across all listings.
    2. growth_rate = (latest - previous) / previous × 100 over the two most
       recent months with data. Fewer than two months → 0.
    3. growth > +5% → UP, growth < -5% → DOWN, otherwise STABLE.

Seasonality (lag autocorrelation):
    lag = ⌊N/4⌋, N ≥ 4
    r = Σ (xᵢ - mean)(xᵢ₊lag - mean) / ((N - lag) · variance)
    seasonal iff |r| > 0.7. Zero variance is never seasonal.
"""

from __future__ import annotations

from datetime import date
from statistics import fmean, pvariance
from typing import NamedTuple, Sequence

import structlog

from src.config import TrendDirection, settings
from src.models.item import ItemHistory

logger = structlog.get_logger(__name__)


class TrendResult(NamedTuple):
    """Result of trend analysis over a set of item histories."""
    direction: TrendDirection
    growth_rate: float
    seasonality: bool


def classify_trend(
    growth_rate: float,
    up_threshold: float | None = None,
    down_threshold: float | None = None,
) -> TrendDirection:
    """
    Classify a growth rate (percent) into up / down / stable.

    Both thresholds are exclusive: exactly +5 or -5 is STABLE.
    """
    up = up_threshold if up_threshold is not None else settings.TREND_UP_THRESHOLD
    down = down_threshold if down_threshold is not None else settings.TREND_DOWN_THRESHOLD

    if growth_rate > up:
        return TrendDirection.UP
    if growth_rate < down:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def monthly_sales(histories: Sequence[ItemHistory]) -> dict[tuple[int, int], int]:
    """Sum visit counts per (year, month), ordered oldest month first."""
    totals: dict[tuple[int, int], int] = {}
    for history in histories:
        for point in history.points:
            key = (point.date.year, point.date.month)
            totals[key] = totals.get(key, 0) + point.visit_count
    return dict(sorted(totals.items()))


def calculate_growth_rate(monthly: dict[tuple[int, int], int]) -> float:
    """
    Percent change between the two most recent months.

    Returns 0.0 with fewer than two months, or when the earlier month is 0.
    """
    if len(monthly) < 2:
        return 0.0
    *_, previous, latest = monthly.values()
    if previous == 0:
        return 0.0
    return (latest - previous) / previous * 100


def daily_series(histories: Sequence[ItemHistory]) -> list[int]:
    """Per-date visit totals across all histories, oldest first."""
    totals: dict[date, int] = {}
    for history in histories:
        for point in history.points:
            totals[point.date] = totals.get(point.date, 0) + point.visit_count
    return [totals[day] for day in sorted(totals)]


def detect_seasonality(series: Sequence[float], threshold: float | None = None) -> bool:
    """
    Lag-⌊N/4⌋ autocorrelation test.

    Args:
        series: Ordered observations.
        threshold: |autocorrelation| cutoff (default: SEASONALITY_THRESHOLD).

    Returns:
        True when |r| exceeds the threshold. False for fewer than 4 points
        or a constant series.
    """
    cutoff = threshold if threshold is not None else settings.SEASONALITY_THRESHOLD
    n = len(series)
    if n < settings.SEASONALITY_MIN_POINTS:
        return False

    mean = fmean(series)
    variance = pvariance(series, mu=mean)
    if variance == 0:
        return False

    lag = n // 4
    autocorr = sum(
        (series[i] - mean) * (series[i + lag] - mean) for i in range(n - lag)
    ) / ((n - lag) * variance)

    return abs(autocorr) > cutoff


def analyze_trends(histories: Sequence[ItemHistory]) -> TrendResult:
    """
    Classify the sales trend and detect seasonality from item histories.

    Empty histories are unknown data and contribute nothing.
    """
    known = [h for h in histories if h.is_known]
    monthly = monthly_sales(known)
    growth_rate = calculate_growth_rate(monthly)
    direction = classify_trend(growth_rate)
    seasonality = detect_seasonality(daily_series(known))

    logger.debug(
        "trend_classified",
        histories=len(known),
        months=len(monthly),
        growth_rate=round(growth_rate, 4),
        direction=direction.value,
        seasonality=seasonality,
    )
    return TrendResult(direction, growth_rate, seasonality)
