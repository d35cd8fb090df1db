"""
Market Radar - Recommendation Generator

Pure rule engine over aggregated metrics. Rules fire in a fixed order:

    1. Premium pricing: listings above the average price that still sell
    2. Conversion: conversion rate < 2% (a market with no views has rate 0)
    3. Competition: high → differentiate, low → establish presence
    4. Trend: growth > 10% → stock up, growth < -10% → reprice

Same inputs always produce the same recommendations in the same order.
"""

from __future__ import annotations

from typing import NamedTuple

from src.config import CompetitionLevel, settings


class MarketSignals(NamedTuple):
    """Aggregated metrics the rules read."""
    premium_listing_count: int
    conversion_rate: float
    competition_level: CompetitionLevel
    growth_rate: float


def generate_recommendations(signals: MarketSignals) -> list[str]:
    recommendations: list[str] = []

    if signals.premium_listing_count > 0:
        recommendations.append(
            f"{signals.premium_listing_count} listings sell above the average price; "
            "buyers accept premium pricing when the offer is differentiated."
        )

    if signals.conversion_rate < settings.LOW_CONVERSION_RATE:
        recommendations.append(
            f"Conversion rate is {signals.conversion_rate:.2f}%; improve titles, photos "
            "and shipping terms to turn visits into sales."
        )

    if signals.competition_level == CompetitionLevel.HIGH:
        recommendations.append(
            "High competition detected; focus on differentiation and customer service."
        )
    elif signals.competition_level == CompetitionLevel.LOW:
        recommendations.append(
            "Low competition; an opportunity to establish a dominant market presence."
        )

    if signals.growth_rate > settings.GROWTH_INVENTORY_THRESHOLD:
        recommendations.append(
            "The market is growing; a good moment to increase inventory."
        )
    elif signals.growth_rate < settings.DECLINE_REPRICE_THRESHOLD:
        recommendations.append(
            "Sales are declining; consider lowering prices or diversifying the catalog."
        )

    return recommendations
