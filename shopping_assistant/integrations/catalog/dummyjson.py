"""
DummyJSON catalog provider.
Uses the public DummyJSON products API (https://dummyjson.com/docs/products).
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from shopping_assistant.config import settings
from shopping_assistant.core.errors import UpstreamUnavailable
from shopping_assistant.core.models import ProductCandidate
from shopping_assistant.integrations.catalog.base import BaseCatalog

logger = logging.getLogger(__name__)


class DummyJSONCatalog(BaseCatalog):
    """Catalog backed by the DummyJSON REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url or settings.catalog_base_url).rstrip("/")
        self.timeout = timeout or settings.catalog_timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def _get(self, path: str, params: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise LookupError(f"Not found: {path}") from e
            logger.error(f"Catalog request failed: {url} -> {e.response.status_code}")
            raise UpstreamUnavailable(self.name, f"HTTP {e.response.status_code} for {path}") from e
        except httpx.HTTPError as e:
            logger.error(f"Catalog request error: {url}: {e}")
            raise UpstreamUnavailable(self.name, f"{type(e).__name__} for {path}") from e
        except ValueError as e:
            raise UpstreamUnavailable(self.name, f"Invalid JSON from {path}") from e

    async def search(
        self,
        text: Optional[str] = None,
        category: Optional[str] = None,
        price_min: Optional[float] = None,
        price_max: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> list[ProductCandidate]:
        """Search products; price bounds and text within a category are applied locally."""
        filter_locally = (
            price_min is not None
            or price_max is not None
            or bool(category and text)
        )
        params: dict[str, Any] = {}
        if limit and not filter_locally:
            params["limit"] = limit
        elif filter_locally:
            params["limit"] = 0  # all matches, trimmed after filtering

        if category:
            path = f"/products/category/{quote(category)}"
        elif text:
            path = "/products/search"
            params["q"] = text
        else:
            path = "/products"

        data = await self._get(path, params)
        products = [ProductCandidate.from_dict(p) for p in data.get("products", [])]

        if category and text:
            needle = text.lower()
            products = [
                p for p in products
                if needle in p.title.lower()
                or needle in (p.description or "").lower()
                or any(needle in tag.lower() for tag in p.tags)
            ]
        if price_min is not None:
            products = [p for p in products if p.price >= price_min]
        if price_max is not None:
            products = [p for p in products if p.price <= price_max]

        return products[:limit] if limit else products

    async def get_by_id(self, product_id: int) -> ProductCandidate:
        data = await self._get(f"/products/{int(product_id)}")
        return ProductCandidate.from_dict(data)

    async def list_categories(self) -> list[str]:
        data = await self._get("/products/categories")
        # Newer API versions return objects, older ones plain slugs
        return [item["slug"] if isinstance(item, dict) else str(item) for item in data]

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def name(self) -> str:
        return "dummyjson"
