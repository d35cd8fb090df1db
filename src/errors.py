"""
Market Radar - Error Taxonomy & Fetch Outcomes

Only NoDataError ever leaves the report orchestrator. Every other failure
is captured in a FetchResult at the smallest possible scope (one page, one
item, one seller batch) and degraded by the orchestrator.
"""

from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")


class MarketRadarError(Exception):
    """Base class for all engine errors."""


class NoDataError(MarketRadarError):
    """Zero listings were found for the query. Fatal to the report."""

    def __init__(self, query: str) -> None:
        super().__init__(f"No listings available to analyze for query {query!r}")
        self.query = query


class DependencyUnavailable(MarketRadarError):
    """A marketplace endpoint could not serve a specific record."""

    def __init__(self, endpoint: str, detail: str) -> None:
        super().__init__(f"{endpoint}: {detail}")
        self.endpoint = endpoint
        self.detail = detail


class PartialFetchError(MarketRadarError):
    """A page or item-detail call failed and contributed nothing."""

    def __init__(self, scope: str, cause: Exception) -> None:
        super().__init__(f"{scope} failed: {cause}")
        self.scope = scope
        self.cause = cause


class FetchResult(Generic[T]):
    """
    Outcome of a single fetch step: either a value or the error that
    prevented it. Callers decide how to degrade a failure.

    Usage:
        result = FetchResult.ok(page)
        if result.is_ok:
            use(result.value)
    """

    __slots__ = ("_value", "error")

    def __init__(self, value: T | None = None, error: MarketRadarError | None = None) -> None:
        self._value = value
        self.error = error

    @classmethod
    def ok(cls, value: T) -> FetchResult[T]:
        return cls(value=value)

    @classmethod
    def failed(cls, error: MarketRadarError) -> FetchResult[T]:
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    @property
    def value(self) -> T:
        if self.error is not None:
            raise self.error
        return self._value  # type: ignore[return-value]

    def value_or(self, default: T) -> T:
        return default if self.error is not None else self._value  # type: ignore[return-value]

    def __repr__(self) -> str:
        if self.error is not None:
            return f"FetchResult(error={self.error!r})"
        return f"FetchResult(value={self._value!r})"
