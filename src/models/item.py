"""
Market Radar - Item Detail Models

Per-item counters and the reconstructed 30-day history. History price and
stock are back-filled with the listing's current values for every day; only
visit counts vary per day.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class VisitPoint(BaseModel):
    """One day from the visits time window."""

    date: datetime
    total: int = 0


class ItemCounters(BaseModel):
    """Raw counters returned by the item-stats endpoint."""

    sold_quantity: int = 0
    visits: int = 0


class ItemStats(BaseModel):
    """Current view/sale counters for one listing."""

    item_id: str
    visits: int = Field(default=0, description="Visits over the history window")
    sold_quantity: int = 0
    lifetime_visits: int = 0


class HistoryPoint(BaseModel):
    date: date
    price: Decimal
    available_quantity: int
    visit_count: int


class ItemHistory(BaseModel):
    """Daily points for one listing, oldest first. Empty means unknown."""

    item_id: str
    points: list[HistoryPoint] = Field(default_factory=list)

    @property
    def is_known(self) -> bool:
        return bool(self.points)


class ItemDetail(BaseModel):
    """Stats and history for one listing of the detailed subset."""

    item_id: str
    stats: ItemStats | None = None
    history: ItemHistory
