"""
Market Radar - Seller & Store Models

Read-only reputation data, fetched on demand and never cached across
report runs.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Transactions(BaseModel):
    canceled: int = 0
    completed: int = 0
    total: int = 0


class RateMetric(BaseModel):
    rate: float = 0.0
    value: int = 0


class ReputationMetrics(BaseModel):
    claims: RateMetric = Field(default_factory=RateMetric)
    delayed_handling_time: RateMetric = Field(default_factory=RateMetric)
    cancellations: RateMetric = Field(default_factory=RateMetric)


class Reputation(BaseModel):
    level_id: str | None = None
    power_seller_status: str | None = None
    transactions: Transactions = Field(default_factory=Transactions)
    metrics: ReputationMetrics = Field(default_factory=ReputationMetrics)


class SellerReputation(BaseModel):
    """Seller profile as returned by the users endpoint."""

    id: int
    nickname: str | None = None
    seller_reputation: Reputation = Field(default_factory=Reputation)

    @property
    def power_seller_status(self) -> str | None:
        return self.seller_reputation.power_seller_status

    @property
    def claims_rate(self) -> float:
        return self.seller_reputation.metrics.claims.rate

    @property
    def cancellation_rate(self) -> float:
        return self.seller_reputation.metrics.cancellations.rate


class StoreInfo(BaseModel):
    """Official store detail."""

    id: int
    name: str = ""
    metrics: dict[str, Any] = Field(default_factory=dict)
