# tests/unit/services/woocommerce/test_woo_client.py
from unittest.mock import AsyncMock

import httpx
import pytest

from woo_ebay_sync.core.exceptions import ConfigurationError, WooCommerceAPIError
from woo_ebay_sync.services.woocommerce.client import WooCommerceClient


def catalog_handler(total, requests):
    """Serve `total` fake products, honouring page/per_page"""
    def handler(request):
        requests.append(request)
        page = int(request.url.params["page"])
        per_page = int(request.url.params["per_page"])
        start = (page - 1) * per_page
        items = [{"id": i, "sku": f"SKU-{i}"} for i in range(start, min(start + per_page, total))]
        return httpx.Response(200, json=items)
    return handler


def make_client(settings, handler) -> WooCommerceClient:
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url="https://shop.example.com/wp-json/wc/v3",
    )
    return WooCommerceClient(settings, http_client=http)


def test_requires_store_url(settings):
    with pytest.raises(ConfigurationError):
        WooCommerceClient(settings.model_copy(update={"WOO_URL": ""}))


@pytest.mark.asyncio
async def test_fetches_every_page(settings):
    requests = []
    client = make_client(settings, catalog_handler(250, requests))

    products = await client.fetch_all_products(per_page=100)

    assert len(products) == 250
    assert [int(r.url.params["page"]) for r in requests] == [1, 2, 3]
    assert requests[0].url.path == "/wp-json/wc/v3/products"


@pytest.mark.asyncio
async def test_stops_on_empty_page(settings):
    requests = []
    client = make_client(settings, catalog_handler(200, requests))

    products = await client.fetch_all_products(per_page=100)

    assert len(products) == 200
    assert len(requests) == 3


@pytest.mark.asyncio
async def test_limit_shrinks_page_size(settings):
    requests = []
    client = make_client(settings, catalog_handler(250, requests))

    products = await client.fetch_all_products(per_page=100, limit=5)

    assert [p["sku"] for p in products] == ["SKU-0", "SKU-1", "SKU-2", "SKU-3", "SKU-4"]
    assert len(requests) == 1
    assert requests[0].url.params["per_page"] == "5"


@pytest.mark.asyncio
async def test_limit_across_pages(settings):
    requests = []
    client = make_client(settings, catalog_handler(250, requests))

    products = await client.fetch_all_products(per_page=20, limit=45)

    assert len(products) == 45
    assert len(requests) == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("per_page", [0, 101])
async def test_page_size_bounds(settings, per_page):
    client = make_client(settings, catalog_handler(0, []))

    with pytest.raises(ValueError):
        await client.fetch_all_products(per_page=per_page)


@pytest.mark.asyncio
async def test_client_errors_are_raised(settings):
    calls = 0

    def handler(request):
        nonlocal calls
        calls += 1
        return httpx.Response(401, json={"code": "woocommerce_rest_cannot_view"})

    client = make_client(settings, handler)
    with pytest.raises(WooCommerceAPIError) as exc_info:
        await client.fetch_all_products()

    assert exc_info.value.status_code == 401
    assert calls == 1


@pytest.mark.asyncio
async def test_server_errors_are_retried(settings, mocker):
    sleep = mocker.patch("woo_ebay_sync.services.retry.asyncio.sleep", new_callable=AsyncMock)
    responses = iter([httpx.Response(503), httpx.Response(200, json=[{"id": 1}])])
    client = make_client(settings, lambda request: next(responses))

    assert await client.fetch_page(1, 100) == [{"id": 1}]
    sleep.assert_awaited_once()
