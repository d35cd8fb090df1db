"""
Market Radar - Market Segmenter

One-shot nearest-seed clustering over normalized (price, sales, stock):

    1. Divide each feature by its maximum (1 when the maximum is 0).
    2. Seed min(k, n) centroids from evenly spaced listings:
       seed i = listing ⌊i·n / min(k, n)⌋.
    3. Assign each listing to its nearest seed by Euclidean distance
       (ties go to the lower index).

Centroids are never recomputed after seeding. Exactly k segments are
always returned; segments without a seed stay empty.
"""

from __future__ import annotations

import math
from statistics import fmean
from typing import NamedTuple, Sequence

import structlog

from src.config import settings
from src.models.analysis import MarketSegment
from src.models.listing import Listing

logger = structlog.get_logger(__name__)


class FeatureVector(NamedTuple):
    price: float
    sales: float
    stock: float


def segment_name(index: int, names: Sequence[str] | None = None) -> str:
    """Fixed names by cluster index, then a generic numbered label."""
    labels = names if names is not None else settings.SEGMENT_NAMES
    return labels[index] if index < len(labels) else f"Segment {index + 1}"


def normalize_features(listings: Sequence[Listing]) -> list[FeatureVector]:
    raw = [
        FeatureVector(
            float(listing.price), float(listing.sold_quantity), float(listing.available_quantity)
        )
        for listing in listings
    ]
    max_price = max((f.price for f in raw), default=0.0) or 1.0
    max_sales = max((f.sales for f in raw), default=0.0) or 1.0
    max_stock = max((f.stock for f in raw), default=0.0) or 1.0
    return [
        FeatureVector(f.price / max_price, f.sales / max_sales, f.stock / max_stock)
        for f in raw
    ]


def _distance(a: FeatureVector, b: FeatureVector) -> float:
    return math.sqrt(
        (a.price - b.price) ** 2 + (a.sales - b.sales) ** 2 + (a.stock - b.stock) ** 2
    )


def segment_market(listings: Sequence[Listing], k: int | None = None) -> list[MarketSegment]:
    """
    Cluster listings into k named market segments.

    Args:
        listings: Full listing set.
        k: Segment count (default: SEGMENT_COUNT).

    Returns:
        Exactly k segments, in index order. Every listing belongs to exactly
        one segment. Center price and average sales are 0 for empty segments.
    """
    n_segments = k if k is not None else settings.SEGMENT_COUNT
    if n_segments < 1:
        raise ValueError("k must be at least 1")

    members: list[list[Listing]] = [[] for _ in range(n_segments)]

    if listings:
        features = normalize_features(listings)
        n = len(features)
        seed_count = min(n_segments, n)
        centroids = [features[i * n // seed_count] for i in range(seed_count)]

        for listing, feature in zip(listings, features):
            distances = [_distance(feature, c) for c in centroids]
            nearest = distances.index(min(distances))
            members[nearest].append(listing)

    segments = [
        MarketSegment(
            id=i,
            name=segment_name(i),
            listings=group,
            center_price=fmean(float(x.price) for x in group) if group else 0.0,
            average_sales=fmean(x.sold_quantity for x in group) if group else 0.0,
        )
        for i, group in enumerate(members)
    ]

    logger.debug(
        "market_segmented",
        listings=len(listings),
        k=n_segments,
        sizes=[len(group) for group in members],
    )
    return segments
