"""
Market Radar - Listing Models

Immutable snapshots of marketplace search results. Listings are never
mutated locally once parsed.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SellerRef(BaseModel):
    """Seller reference embedded in a listing."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Marketplace seller identifier")
    nickname: str | None = Field(default=None, description="Public seller nickname")


class Shipping(BaseModel):
    model_config = ConfigDict(frozen=True)

    free_shipping: bool = False


class Listing(BaseModel):
    """A single marketplace item offer."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Listing identifier, e.g. MLA123456789")
    title: str = Field(default="")
    price: Decimal = Field(default=Decimal("0"), description="Listing price")
    currency_id: str = Field(default="ARS")
    available_quantity: int = Field(default=0)
    sold_quantity: int = Field(default=0)
    condition: str = Field(default="new", description="new | used | not_specified")
    seller: SellerRef | None = None
    official_store_id: int | None = Field(
        default=None, description="Set when the listing belongs to an official store"
    )
    shipping: Shipping = Field(default_factory=Shipping)
    permalink: str = Field(default="")
    thumbnail: str = Field(default="")

    @field_validator("price", mode="before")
    @classmethod
    def parse_decimal(cls, v: Any) -> Decimal:
        """Convert price values to Decimal. Missing, malformed or non-finite prices become 0."""
        if v is None or v == "":
            return Decimal("0")
        try:
            d = Decimal(str(v))
        except (InvalidOperation, ValueError):
            return Decimal("0")
        return d if d.is_finite() else Decimal("0")

    @field_validator("available_quantity", "sold_quantity", mode="before")
    @classmethod
    def parse_quantity(cls, v: Any) -> int:
        return 0 if v is None else v

    @property
    def seller_id(self) -> int | None:
        return self.seller.id if self.seller else None


class Paging(BaseModel):
    total: int = 0
    offset: int = 0
    limit: int = 0


class SearchPage(BaseModel):
    """One page of search results plus the upstream total."""

    results: list[Listing] = Field(default_factory=list)
    paging: Paging = Field(default_factory=Paging)


class ListingBatch(BaseModel):
    """All listings collected for one query across pages."""

    listings: list[Listing] = Field(default_factory=list)
    total: int = Field(default=0, description="Total available upstream")
    failed_pages: int = Field(default=0, description="Pages that contributed nothing")
