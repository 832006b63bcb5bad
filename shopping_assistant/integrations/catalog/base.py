"""
Base interface for product catalogs.
Allows switching between DummyJSON, a local database, test fakes, etc.
"""

from abc import ABC, abstractmethod
from typing import Optional

from shopping_assistant.core.models import ProductCandidate


class BaseCatalog(ABC):
    """Abstract base class for catalog providers."""

    @abstractmethod
    async def search(
        self,
        text: Optional[str] = None,
        category: Optional[str] = None,
        price_min: Optional[float] = None,
        price_max: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> list[ProductCandidate]:
        """
        Search products.

        Args:
            text: Free-text query
            category: Category slug
            price_min: Lowest accepted price
            price_max: Highest accepted price
            limit: Maximum number of products

        Returns:
            Matching products; a listing of the catalog when no text
            or category is given
        """
        pass

    @abstractmethod
    async def get_by_id(self, product_id: int) -> ProductCandidate:
        """Get a single product."""
        pass

    @abstractmethod
    async def list_categories(self) -> list[str]:
        """Category slugs known to the catalog."""
        pass

    async def get_related(self, product_id: int, limit: int = 4) -> list[ProductCandidate]:
        """Products from the same category, excluding the product itself."""
        product = await self.get_by_id(product_id)
        results = await self.search(category=product.category, limit=limit + 1)
        return [p for p in results if p.id != product_id][:limit]

    async def close(self) -> None:
        """Release network resources."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass
