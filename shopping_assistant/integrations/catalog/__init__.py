"""
Catalog provider factory and initialization.
"""

from functools import lru_cache

from shopping_assistant.config import settings
from shopping_assistant.integrations.catalog.base import BaseCatalog
from shopping_assistant.integrations.catalog.dummyjson import DummyJSONCatalog


def get_catalog_provider(provider: str | None = None) -> BaseCatalog:
    """
    Get catalog provider instance.

    Args:
        provider: Provider name ('dummyjson')
                  If None, uses settings.catalog_provider

    Returns:
        Catalog provider instance
    """
    provider = provider or settings.catalog_provider

    if provider == "dummyjson":
        return DummyJSONCatalog()
    else:
        raise ValueError(f"Unknown catalog provider: {provider}")


@lru_cache(maxsize=1)
def get_default_catalog() -> BaseCatalog:
    """Get cached default catalog provider."""
    return get_catalog_provider()


__all__ = [
    "BaseCatalog",
    "DummyJSONCatalog",
    "get_catalog_provider",
    "get_default_catalog",
]
