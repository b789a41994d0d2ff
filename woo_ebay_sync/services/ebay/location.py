import logging
from typing import Dict

from woo_ebay_sync.core.config import Settings
from woo_ebay_sync.core.exceptions import ConfigurationError
from woo_ebay_sync.services.ebay.client import EbayClient

logger = logging.getLogger(__name__)


class LocationService:
    """Makes sure the merchant location offers point at exists on eBay"""

    def __init__(self, client: EbayClient, settings: Settings, dry_run: bool = False):
        self.client = client
        self.settings = settings
        self.dry_run = dry_run

    @property
    def location_key(self) -> str:
        if not self.settings.EBAY_LOCATION_KEY:
            raise ConfigurationError("EBAY_LOCATION_KEY is required to create offers")
        return self.settings.EBAY_LOCATION_KEY

    def build_location_body(self) -> Dict:
        s = self.settings
        return {
            "name": s.EBAY_SHIP_NAME,
            "locationTypes": ["STORE", "WAREHOUSE"],
            "phone": s.EBAY_SHIP_PHONE,
            "location": {
                "address": {
                    "addressLine1": s.EBAY_SHIP_ADDRESS_LINE1,
                    "city": s.EBAY_SHIP_CITY,
                    "stateOrProvince": s.EBAY_SHIP_STATE,
                    "postalCode": s.EBAY_SHIP_POSTCODE,
                    "country": s.EBAY_SHIP_COUNTRY,
                }
            },
            "operatingHours": [],
        }

    async def ensure_location(self) -> str:
        """
        Return the configured location key, creating the location if eBay lacks it.

        In dry run a missing location is reported but not created.
        """
        location_key = self.location_key

        existing = await self.client.get_inventory_location(location_key)
        if existing:
            key = existing.get("merchantLocationKey") or location_key
            logger.info(f"Using existing eBay location: {key}")
            return key

        if self.dry_run:
            logger.info(f"[dry-run] Would create eBay location {location_key}: {self.build_location_body()}")
            return location_key

        logger.info(f"Creating eBay location {location_key}...")
        await self.client.create_inventory_location(location_key, self.build_location_body())
        logger.info(f"Created eBay location: {location_key}")
        return location_key
