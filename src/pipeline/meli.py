"""
Market Radar - MercadoLibre API Client

Boundary operations consumed by the analysis engine: search, item detail,
item visits, item stats, seller and official store lookups.

Every call accepts an optional bearer token and carries an explicit
timeout. Calls are retry-less: a transport error, non-2xx status or an
undecodable payload raises DependencyUnavailable for that call only.
The client holds no credential state of its own.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from src.config import settings
from src.errors import DependencyUnavailable
from src.models.item import ItemCounters, VisitPoint
from src.models.listing import Listing, SearchPage
from src.models.seller import SellerReputation, StoreInfo

logger = structlog.get_logger(__name__)


class MercadoLibreClient:
    """
    Async client for the MercadoLibre REST API (or the proxy in front of it).

    Usage:
        async with MercadoLibreClient() as client:
            page = await client.search("iphone", limit=50)
            item = await client.get_item("MLA123", access_token=token)
    """

    def __init__(
        self,
        base_url: str | None = None,
        site_id: str | None = None,
        timeout: float | None = None,
    ):
        self._base_url = base_url or settings.MELI_API_BASE_URL
        self._site_id = site_id or settings.MELI_SITE_ID
        self._timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> MercadoLibreClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Accept": "application/json"},
            timeout=self._timeout,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get(
        self,
        endpoint: str,
        path: str,
        params: dict[str, Any] | None = None,
        access_token: str | None = None,
    ) -> Any:
        """Single GET with no retry. Raises DependencyUnavailable on any failure."""
        assert self._client is not None, "Client not initialized. Use 'async with'."

        headers = {"Authorization": f"Bearer {access_token}"} if access_token else None

        try:
            response = await self._client.get(path, params=params, headers=headers)
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            logger.warning(
                "meli_http_error",
                endpoint=endpoint,
                path=path,
                status_code=e.response.status_code,
            )
            raise DependencyUnavailable(
                endpoint, f"HTTP {e.response.status_code}"
            ) from e

        except httpx.RequestError as e:
            logger.warning(
                "meli_request_error",
                endpoint=endpoint,
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DependencyUnavailable(endpoint, str(e) or type(e).__name__) from e

        except ValueError as e:
            logger.warning("meli_invalid_json", endpoint=endpoint, path=path)
            raise DependencyUnavailable(endpoint, "invalid JSON payload") from e

    @staticmethod
    def _parse(endpoint: str, model: Any, data: Any) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning(
                "meli_unexpected_payload",
                endpoint=endpoint,
                errors=e.error_count(),
            )
            raise DependencyUnavailable(endpoint, "unexpected payload shape") from e

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    async def search(
        self,
        query: str,
        limit: int = 50,
        offset: int = 0,
        official_stores_only: bool = False,
        access_token: str | None = None,
    ) -> SearchPage:
        """
        Search listings for a keyword.

        GET /sites/{site}/search?q={query}&limit={limit}&offset={offset}
            [&official_store=all]

        Args:
            query: Search keyword.
            limit: Page size, clamped to the upstream maximum (50).
            offset: Result offset.
            official_stores_only: Restrict results to official stores.
            access_token: Optional bearer credential.

        Returns:
            SearchPage with listings and the upstream total.
        """
        params: dict[str, Any] = {
            "q": query,
            "limit": max(1, min(limit, settings.SEARCH_PAGE_SIZE)),
            "offset": max(0, offset),
        }
        if official_stores_only:
            params["official_store"] = "all"

        data = await self._get(
            "search",
            f"/sites/{self._site_id}/search",
            params=params,
            access_token=access_token,
        )
        page: SearchPage = self._parse("search", SearchPage, data)

        logger.debug(
            "meli_search_page",
            query=query,
            offset=offset,
            results_count=len(page.results),
            total=page.paging.total,
        )
        return page

    async def get_item(self, item_id: str, access_token: str | None = None) -> Listing:
        """GET /items/{id}: current listing state."""
        data = await self._get("item", f"/items/{item_id}", access_token=access_token)
        return self._parse("item", Listing, data)

    async def get_item_visits(
        self,
        item_id: str,
        window_days: int,
        access_token: str | None = None,
    ) -> list[VisitPoint]:
        """
        GET /items/{id}/visits/time_window?last={window_days}&unit=day

        Returns one VisitPoint per day reported upstream.
        """
        data = await self._get(
            "item_visits",
            f"/items/{item_id}/visits/time_window",
            params={"last": window_days, "unit": "day"},
            access_token=access_token,
        )
        if not isinstance(data, dict):
            raise DependencyUnavailable("item_visits", "unexpected payload shape")
        return [
            self._parse("item_visits", VisitPoint, row)
            for row in data.get("results") or []
        ]

    async def get_item_stats(
        self, item_id: str, access_token: str | None = None
    ) -> ItemCounters:
        """GET /items/{id}/stats: lifetime sold quantity and visits."""
        data = await self._get(
            "item_stats", f"/items/{item_id}/stats", access_token=access_token
        )
        return self._parse("item_stats", ItemCounters, data)

    async def get_seller(
        self, seller_id: int, access_token: str | None = None
    ) -> SellerReputation:
        """GET /users/{id}: seller profile with reputation metrics."""
        data = await self._get("seller", f"/users/{seller_id}", access_token=access_token)
        return self._parse("seller", SellerReputation, data)

    async def get_store(self, store_id: int, access_token: str | None = None) -> StoreInfo:
        """GET /official_stores/{id}: official store name and metrics."""
        data = await self._get(
            "store", f"/official_stores/{store_id}", access_token=access_token
        )
        return self._parse("store", StoreInfo, data)
