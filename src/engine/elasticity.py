"""
Market Radar - Price Elasticity Estimator

Two independent outputs over the listing set's (sales, price) pairs:

1. Predicted price: a single-variable linear model price = w·sales + b,
   trained by full-batch gradient descent on max-scaled inputs and
   evaluated at mean sales.
       confidence = 0.95 - stddev(price) / mean(price)
   Confidence is NOT clamped; very dispersed prices give negative values.
   Any numerical failure falls back to (mean price, 0.5, elasticity 0).

2. Elasticity: mean over consecutive listing pairs of
       (Δsales / sales) / (Δprice / price)
   Pairs with Δprice == 0 or a non-finite ratio are excluded; no valid
   pairs → 0.
"""

from __future__ import annotations

import math
from statistics import fmean, pstdev
from typing import NamedTuple, Sequence

import structlog

from src.config import settings
from src.models.listing import Listing

logger = structlog.get_logger(__name__)


class PriceAnalysisResult(NamedTuple):
    predicted_price: float
    confidence: float
    min_price: float
    max_price: float
    elasticity: float


class LinearModel(NamedTuple):
    weight: float
    bias: float
    x_scale: float
    y_scale: float

    def predict(self, x: float) -> float:
        return (self.weight * (x / self.x_scale) + self.bias) * self.y_scale


def train_linear_model(
    xs: Sequence[float],
    ys: Sequence[float],
    epochs: int | None = None,
    learning_rate: float | None = None,
) -> LinearModel:
    """
    Fit y = w·x + b by gradient descent on mean squared error.

    Inputs are divided by their maximum absolute value (1 if that is 0)
    so a fixed learning rate stays stable across price magnitudes.

    Raises:
        ValueError: empty or mismatched inputs.
        FloatingPointError: a non-finite weight or bias during training.
    """
    if not xs or len(xs) != len(ys):
        raise ValueError("xs and ys must be non-empty and the same length")

    n_epochs = epochs if epochs is not None else settings.ELASTICITY_EPOCHS
    lr = learning_rate if learning_rate is not None else settings.ELASTICITY_LEARNING_RATE

    x_scale = max(abs(x) for x in xs) or 1.0
    y_scale = max(abs(y) for y in ys) or 1.0
    sx = [x / x_scale for x in xs]
    sy = [y / y_scale for y in ys]
    n = len(sx)

    weight = 0.0
    bias = 0.0
    for _ in range(n_epochs):
        errors = [weight * x + bias - y for x, y in zip(sx, sy)]
        grad_w = 2.0 * sum(e * x for e, x in zip(errors, sx)) / n
        grad_b = 2.0 * sum(errors) / n
        weight -= lr * grad_w
        bias -= lr * grad_b
        if not (math.isfinite(weight) and math.isfinite(bias)):
            raise FloatingPointError("linear model diverged")

    return LinearModel(weight, bias, x_scale, y_scale)


def calculate_price_elasticity(prices: Sequence[float], sales: Sequence[float]) -> float:
    """Mean consecutive-pair elasticity, 0.0 when no pair is usable."""
    if len(prices) < 2 or len(sales) < 2:
        return 0.0

    ratios: list[float] = []
    for i in range(1, min(len(prices), len(sales))):
        prev_price, prev_sales = prices[i - 1], sales[i - 1]
        if prev_price == 0 or prev_sales == 0:
            continue
        price_change = (prices[i] - prev_price) / prev_price
        if price_change == 0:
            continue
        ratio = ((sales[i] - prev_sales) / prev_sales) / price_change
        if math.isfinite(ratio):
            ratios.append(ratio)

    return fmean(ratios) if ratios else 0.0


def analyze_prices(listings: Sequence[Listing]) -> PriceAnalysisResult:
    """
    Predict a price for the market's mean sales volume and estimate elasticity.

    Args:
        listings: Full listing set in upstream order.

    Returns:
        PriceAnalysisResult. All zeros when no listing has a positive price.
    """
    pairs = [
        (float(listing.sold_quantity), float(listing.price))
        for listing in listings
        if listing.price > 0 and listing.sold_quantity >= 0
    ]
    if not pairs:
        return PriceAnalysisResult(0.0, 0.0, 0.0, 0.0, 0.0)

    sales = [s for s, _ in pairs]
    prices = [p for _, p in pairs]
    mean_price = fmean(prices)
    min_price, max_price = min(prices), max(prices)

    try:
        model = train_linear_model(sales, prices)
        predicted = model.predict(fmean(sales))
        if not math.isfinite(predicted):
            raise FloatingPointError("non-finite prediction")
        elasticity = calculate_price_elasticity(prices, sales)
    except (ArithmeticError, ValueError) as e:
        logger.warning(
            "price_model_fallback",
            error=str(e),
            error_type=type(e).__name__,
            sample_size=len(pairs),
        )
        return PriceAnalysisResult(
            mean_price,
            settings.ELASTICITY_FALLBACK_CONFIDENCE,
            min_price,
            max_price,
            0.0,
        )

    confidence = settings.ELASTICITY_BASE_CONFIDENCE - pstdev(prices) / mean_price

    logger.debug(
        "price_model_trained",
        sample_size=len(pairs),
        predicted_price=round(predicted, 4),
        confidence=round(confidence, 4),
        elasticity=round(elasticity, 4),
    )
    return PriceAnalysisResult(predicted, confidence, min_price, max_price, elasticity)
