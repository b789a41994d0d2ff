# woo_ebay_sync/core/config.py

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from woo_ebay_sync.core.enums import EbayEnvironment


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # eBay environment
    EBAY_ENV: EbayEnvironment = EbayEnvironment.PRODUCTION

    # eBay OAuth
    EBAY_CLIENT_ID: str = ""
    EBAY_CLIENT_SECRET: str = ""
    EBAY_REFRESH_TOKEN: str = ""
    EBAY_RU_NAME: str = ""

    # Marketplace
    EBAY_MARKETPLACE_ID: str = "EBAY_AU"
    EBAY_CURRENCY: str = "AUD"
    EBAY_CONTENT_LANGUAGE: str = "en-AU"

    # Categories
    EBAY_DEFAULT_CATEGORY_ID: Optional[str] = None
    EBAY_FALLBACK_CATEGORY_ID: Optional[str] = None

    # Business policies
    EBAY_PAYMENT_POLICY_ID: str = ""
    EBAY_RETURN_POLICY_ID: str = ""
    EBAY_FULFILLMENT_POLICY_ID: str = ""

    # Listing defaults
    EBAY_CONDITION: Optional[str] = None
    EBAY_PRICE_MARKUP_PERCENT: float = 15.0     # eBay: +15% over Woo price

    # Fulfillment location
    EBAY_LOCATION_KEY: str = ""
    EBAY_SHIP_NAME: str = ""
    EBAY_SHIP_PHONE: str = ""
    EBAY_SHIP_ADDRESS_LINE1: str = ""
    EBAY_SHIP_CITY: str = ""
    EBAY_SHIP_STATE: str = ""
    EBAY_SHIP_POSTCODE: str = ""
    EBAY_SHIP_COUNTRY: str = "AU"

    # Marketplace account deletion notifications
    EBAY_VERIFICATION_TOKEN: str = ""
    EBAY_DELETION_ENDPOINT_URL: str = ""

    # WooCommerce
    WOO_URL: str = ""
    WOO_CONSUMER_KEY: str = ""
    WOO_CONSUMER_SECRET: str = ""

    # Runtime
    HTTP_TIMEOUT: float = 15.0
    IMAGE_PROBE_TIMEOUT: float = 7.0
    SYNC_CONCURRENCY: int = Field(4, ge=1)
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_sandbox(self) -> bool:
        return self.EBAY_ENV == EbayEnvironment.SANDBOX

    @property
    def ebay_base_url(self) -> str:
        if self.is_sandbox:
            return "https://api.sandbox.ebay.com"
        return "https://api.ebay.com"

    @property
    def ebay_auth_url(self) -> str:
        if self.is_sandbox:
            return "https://auth.sandbox.ebay.com/oauth2/authorize"
        return "https://auth.ebay.com/oauth2/authorize"

    @property
    def listing_policies(self) -> dict:
        return {
            "fulfillmentPolicyId": self.EBAY_FULFILLMENT_POLICY_ID,
            "paymentPolicyId": self.EBAY_PAYMENT_POLICY_ID,
            "returnPolicyId": self.EBAY_RETURN_POLICY_ID,
        }


@lru_cache()
def get_settings():
    """Cached settings to avoid re-reading the .env file"""
    return Settings()


def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()
