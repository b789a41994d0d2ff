# tests/unit/services/ebay/test_location_service.py
from unittest.mock import AsyncMock

import pytest

from woo_ebay_sync.core.exceptions import ConfigurationError
from woo_ebay_sync.services.ebay.location import LocationService


@pytest.fixture
def ebay_client():
    client = AsyncMock()
    client.get_inventory_location.return_value = None
    return client


def test_build_location_body(settings, ebay_client):
    body = LocationService(ebay_client, settings).build_location_body()

    assert body["name"] == "Test Store"
    assert body["locationTypes"] == ["STORE", "WAREHOUSE"]
    assert body["phone"] == "0400000000"
    assert body["location"]["address"] == {
        "addressLine1": "1 George St",
        "city": "Sydney",
        "stateOrProvince": "NSW",
        "postalCode": "2000",
        "country": "AU",
    }


@pytest.mark.asyncio
async def test_existing_location_is_reused(settings, ebay_client):
    ebay_client.get_inventory_location.return_value = {"merchantLocationKey": "MAIN", "name": "Test Store"}

    key = await LocationService(ebay_client, settings).ensure_location()

    assert key == "MAIN"
    ebay_client.get_inventory_location.assert_awaited_once_with("MAIN")
    ebay_client.create_inventory_location.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_location_is_created(settings, ebay_client):
    service = LocationService(ebay_client, settings)

    key = await service.ensure_location()

    assert key == "MAIN"
    ebay_client.create_inventory_location.assert_awaited_once_with("MAIN", service.build_location_body())


@pytest.mark.asyncio
async def test_dry_run_does_not_create(settings, ebay_client):
    key = await LocationService(ebay_client, settings, dry_run=True).ensure_location()

    assert key == "MAIN"
    ebay_client.create_inventory_location.assert_not_awaited()


@pytest.mark.asyncio
async def test_location_key_is_required(settings, ebay_client):
    service = LocationService(ebay_client, settings.model_copy(update={"EBAY_LOCATION_KEY": ""}))

    with pytest.raises(ConfigurationError):
        await service.ensure_location()
    ebay_client.get_inventory_location.assert_not_awaited()
