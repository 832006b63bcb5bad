import httpx
import pytest

from shopping_assistant.core.errors import UpstreamUnavailable
from shopping_assistant.integrations.catalog import get_catalog_provider
from shopping_assistant.integrations.catalog.dummyjson import DummyJSONCatalog

from conftest import PRODUCT_DATA

BASE_URL = "https://dummyjson.test"


def by_category(category):
    return [p for p in PRODUCT_DATA if p["category"] == category]


def handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/products/search":
        q = request.url.params["q"].lower()
        found = [p for p in PRODUCT_DATA if q in p["title"].lower()]
        return httpx.Response(200, json={"products": found, "total": len(found)})
    if path.startswith("/products/category/"):
        found = by_category(path.rsplit("/", 1)[-1])
        return httpx.Response(200, json={"products": found, "total": len(found)})
    if path == "/products/categories":
        return httpx.Response(200, json=[
            {"slug": "smartphones", "name": "Smartphones"},
            "laptops",
        ])
    if path == "/products":
        limit = int(request.url.params.get("limit", 30))
        return httpx.Response(200, json={"products": PRODUCT_DATA[:limit]})
    if path.startswith("/products/"):
        product_id = int(path.rsplit("/", 1)[-1])
        for p in PRODUCT_DATA:
            if p["id"] == product_id:
                return httpx.Response(200, json=p)
        return httpx.Response(404, json={"message": "not found"})
    return httpx.Response(404)


def make_catalog(handler=handler):
    requests = []

    def recording(request):
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    return DummyJSONCatalog(base_url=BASE_URL, client=client), requests


async def test_search_by_text():
    catalog, requests = make_catalog()

    products = await catalog.search(text="iphone", limit=5)

    assert [p.title for p in products] == ["iPhone 13 Pro"]
    assert requests[0].url.path == "/products/search"
    assert requests[0].url.params["limit"] == "5"


async def test_search_by_category():
    catalog, requests = make_catalog()

    products = await catalog.search(category="laptops")

    assert {p.category for p in products} == {"laptops"}
    assert requests[0].url.path == "/products/category/laptops"


async def test_search_with_price_bounds_filters_locally():
    catalog, requests = make_catalog()

    products = await catalog.search(category="smartphones", price_min=300, price_max=800, limit=1)

    assert len(products) == 1
    assert 300 <= products[0].price <= 800
    assert requests[0].url.params["limit"] == "0"


async def test_search_text_within_category():
    catalog, _ = make_catalog()

    products = await catalog.search(text="camera", category="smartphones")

    assert {p.id for p in products} == {1, 4}


async def test_listing_without_filters():
    catalog, requests = make_catalog()

    products = await catalog.search(limit=3)

    assert [p.id for p in products] == [1, 2, 3]
    assert requests[0].url.path == "/products"


async def test_product_fields_are_parsed():
    catalog, _ = make_catalog()

    product = await catalog.get_by_id(2)

    assert product.brand == "Samsung"
    assert product.discount_percentage == 12
    assert product.in_stock


async def test_missing_product_raises_lookup_error():
    catalog, _ = make_catalog()

    with pytest.raises(LookupError):
        await catalog.get_by_id(999)


async def test_server_error_is_upstream_unavailable():
    catalog, _ = make_catalog(lambda request: httpx.Response(503))

    with pytest.raises(UpstreamUnavailable) as exc_info:
        await catalog.search(text="phone")
    assert exc_info.value.service == "dummyjson"


async def test_transport_error_is_upstream_unavailable():
    def broken(request):
        raise httpx.ConnectError("connection refused", request=request)

    catalog, _ = make_catalog(broken)

    with pytest.raises(UpstreamUnavailable):
        await catalog.list_categories()


async def test_invalid_json_is_upstream_unavailable():
    catalog, _ = make_catalog(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(UpstreamUnavailable):
        await catalog.search(limit=1)


async def test_list_categories_accepts_both_formats():
    catalog, _ = make_catalog()
    assert await catalog.list_categories() == ["smartphones", "laptops"]


async def test_get_related_excludes_the_product():
    catalog, _ = make_catalog()

    related = await catalog.get_related(5, limit=4)

    assert [p.id for p in related] == [6, 7]


async def test_close_releases_client():
    catalog, _ = make_catalog()
    await catalog.close()
    assert catalog._client is None


def test_provider_factory():
    assert isinstance(get_catalog_provider("dummyjson"), DummyJSONCatalog)
    with pytest.raises(ValueError):
        get_catalog_provider("amazon")
