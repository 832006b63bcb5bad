"""
Shared fixtures: an in-memory catalog and an in-memory database.
"""

from typing import Optional

import pytest

from shopping_assistant.core.errors import UpstreamUnavailable
from shopping_assistant.core.models import ProductCandidate
from shopping_assistant.db.sqlite import Database
from shopping_assistant.integrations.catalog.base import BaseCatalog


PRODUCT_DATA = [
    {"id": 1, "title": "iPhone 13 Pro", "price": 1099, "rating": 4.7, "stock": 20,
     "category": "smartphones", "brand": "Apple", "discountPercentage": 5,
     "description": "Pro camera system and A15 chip"},
    {"id": 2, "title": "Samsung Galaxy S10", "price": 699, "rating": 4.5, "stock": 10,
     "category": "smartphones", "brand": "Samsung", "discountPercentage": 12,
     "description": "Infinity display smartphone"},
    {"id": 3, "title": "Oppo A57", "price": 249, "rating": 4.2, "stock": 30,
     "category": "smartphones", "brand": "Oppo", "description": "Long battery life phone"},
    {"id": 4, "title": "Vivo X21", "price": 449, "rating": 4.4, "stock": 15,
     "category": "smartphones", "brand": "Vivo",
     "description": "Dual camera smartphone built for photography"},
    {"id": 5, "title": "MacBook Pro 14", "price": 1999, "rating": 4.8, "stock": 5,
     "category": "laptops", "brand": "Apple", "description": "M1 Pro laptop"},
    {"id": 6, "title": "Lenovo Yoga 920", "price": 1099, "rating": 4.3, "stock": 0,
     "category": "laptops", "brand": "Lenovo", "description": "Convertible laptop"},
    {"id": 7, "title": "Asus Zenbook Pro", "price": 1299, "rating": 4.1, "stock": 12,
     "category": "laptops", "brand": "Asus", "description": "Dual screen laptop"},
    {"id": 8, "title": "Chanel Coco Noir Eau De Parfum", "price": 129.99, "rating": 4.3,
     "stock": 40, "category": "fragrances", "brand": "Chanel", "discountPercentage": 15,
     "tags": ["perfume", "fragrances"], "description": "Elegant perfume"},
    {"id": 9, "title": "Essence Mascara Lash Princess", "price": 9.99, "rating": 4.9,
     "stock": 99, "category": "beauty", "brand": "Essence", "discountPercentage": 10,
     "tags": ["beauty", "mascara"], "description": "Volumizing mascara"},
    {"id": 10, "title": "Olay Regenerist Cream", "price": 39.99, "rating": 4.6, "stock": 25,
     "category": "skin-care", "brand": "Olay", "tags": ["skin care"],
     "description": "Moisturizing face cream"},
    {"id": 11, "title": "Red Summer Dress", "price": 89.99, "rating": 4.0, "stock": 8,
     "category": "womens-dresses", "description": "Light cotton dress"},
    {"id": 12, "title": "Silicone Phone Case", "price": 19.99, "rating": 4.0, "stock": 50,
     "category": "mobile-accessories", "description": "Protective case for your phone"},
]


class FakeCatalog(BaseCatalog):
    """Catalog over a fixed product list; records every search call."""

    def __init__(self, products: list[ProductCandidate]):
        self.products = products
        self.calls: list[dict] = []
        self.closed = False

    async def search(
        self,
        text: Optional[str] = None,
        category: Optional[str] = None,
        price_min: Optional[float] = None,
        price_max: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> list[ProductCandidate]:
        self.calls.append({"text": text, "category": category, "limit": limit})
        results = list(self.products)
        if category:
            results = [p for p in results if p.category == category]
        if text:
            needle = text.lower()
            results = [
                p for p in results
                if needle in p.title.lower()
                or needle in (p.description or "").lower()
                or needle in p.category
                or any(needle in tag for tag in p.tags)
            ]
        if price_min is not None:
            results = [p for p in results if p.price >= price_min]
        if price_max is not None:
            results = [p for p in results if p.price <= price_max]
        return results[:limit] if limit else results

    async def get_by_id(self, product_id: int) -> ProductCandidate:
        for product in self.products:
            if product.id == product_id:
                return product
        raise LookupError(f"Not found: {product_id}")

    async def list_categories(self) -> list[str]:
        return sorted({p.category for p in self.products})

    async def close(self) -> None:
        self.closed = True

    @property
    def name(self) -> str:
        return "fake"


class FailingCatalog(FakeCatalog):
    """Catalog whose every search fails."""

    def __init__(self):
        super().__init__([])

    async def search(self, **kwargs) -> list[ProductCandidate]:
        self.calls.append(kwargs)
        raise UpstreamUnavailable(self.name, "connection refused")


@pytest.fixture
def products() -> list[ProductCandidate]:
    return [ProductCandidate.from_dict(p) for p in PRODUCT_DATA]


@pytest.fixture
def catalog(products) -> FakeCatalog:
    return FakeCatalog(products)


@pytest.fixture
def failing_catalog() -> FailingCatalog:
    return FailingCatalog()


@pytest.fixture
async def database():
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.init()
    yield database
    await database.close()
