# tests/conftest.py
import pytest

from woo_ebay_sync.core.config import Settings
from woo_ebay_sync.core.exceptions import EbayAPIError
from woo_ebay_sync.schemas.product import WooProduct


@pytest.fixture
def settings():
    """Provide test settings (never read from .env)"""
    return Settings(
        _env_file=None,
        EBAY_ENV="sandbox",
        EBAY_CLIENT_ID="test-client-id",
        EBAY_CLIENT_SECRET="test-client-secret",
        EBAY_REFRESH_TOKEN="test-refresh-token",
        EBAY_RU_NAME="test-ru-name",
        EBAY_MARKETPLACE_ID="EBAY_AU",
        EBAY_CURRENCY="AUD",
        EBAY_CONTENT_LANGUAGE="en-AU",
        EBAY_DEFAULT_CATEGORY_ID=None,
        EBAY_FALLBACK_CATEGORY_ID=None,
        EBAY_PAYMENT_POLICY_ID="payment-1",
        EBAY_RETURN_POLICY_ID="return-1",
        EBAY_FULFILLMENT_POLICY_ID="fulfillment-1",
        EBAY_CONDITION="NEW",
        EBAY_PRICE_MARKUP_PERCENT=15.0,
        EBAY_LOCATION_KEY="MAIN",
        EBAY_SHIP_NAME="Test Store",
        EBAY_SHIP_PHONE="0400000000",
        EBAY_SHIP_ADDRESS_LINE1="1 George St",
        EBAY_SHIP_CITY="Sydney",
        EBAY_SHIP_STATE="NSW",
        EBAY_SHIP_POSTCODE="2000",
        EBAY_SHIP_COUNTRY="AU",
        EBAY_VERIFICATION_TOKEN="verification-token-1234567890",
        EBAY_DELETION_ENDPOINT_URL="https://sync.example.com/ebay-deletion-callback",
        WOO_URL="https://shop.example.com",
        WOO_CONSUMER_KEY="ck_test",
        WOO_CONSUMER_SECRET="cs_test",
        SYNC_CONCURRENCY=4,
        LOG_LEVEL="INFO",
    )


@pytest.fixture
def ebay_error():
    """Factory for EbayAPIError instances shaped like eBay error responses"""
    def _make(status_code, error_id=None, message="", parameters=None):
        errors = []
        if error_id is not None:
            error = {"errorId": error_id, "message": message}
            if parameters:
                error["parameters"] = parameters
            errors.append(error)
        elif message:
            errors.append({"message": message})
        return EbayAPIError(f"HTTP {status_code} {message}", status_code=status_code, errors=errors)
    return _make


@pytest.fixture
def product_data():
    """Factory for WooCommerce product payloads"""
    def _make(**overrides):
        data = {
            "id": 101,
            "sku": "SKU-1",
            "name": "Blue Widget",
            "description": "<p>A long description</p>",
            "short_description": "A blue widget",
            "price": "10",
            "regular_price": "10",
            "stock_quantity": 5,
            "images": [{"src": "https://cdn.example.com/a.jpg"}],
            "type": "simple",
            "variations": [],
        }
        data.update(overrides)
        return data
    return _make


@pytest.fixture
def make_product(product_data):
    def _make(**overrides):
        return WooProduct.model_validate(product_data(**overrides))
    return _make
