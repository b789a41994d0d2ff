# woo_ebay_sync/services/sync_service.py
"""
Bulk WooCommerce -> eBay sync.

For every simple product: upsert the eBay inventory item, then (optionally)
ensure its offer and (optionally) publish it. Products run through a bounded
worker pool; one product failing never stops the run.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from woo_ebay_sync.core.config import Settings
from woo_ebay_sync.core.enums import TokenKind
from woo_ebay_sync.core.exceptions import BaseServiceError, EbayAPIError
from woo_ebay_sync.schemas.ebay import OfferAttributes
from woo_ebay_sync.schemas.product import WooProduct
from woo_ebay_sync.services.ebay.auth import EbayAuthContext
from woo_ebay_sync.services.ebay.client import EbayClient
from woo_ebay_sync.services.ebay.inventory import InventoryService
from woo_ebay_sync.services.ebay.location import LocationService
from woo_ebay_sync.services.ebay.offers import OfferWorkflow
from woo_ebay_sync.services.ebay.taxonomy import CategoryResolver
from woo_ebay_sync.services.woocommerce.client import WooCommerceClient

logger = logging.getLogger(__name__)


@dataclass
class SyncOptions:
    """Per-invocation switches (from the command line, not the environment)"""
    create_offers: bool = False
    publish: bool = False
    dry_run: bool = False
    page_size: int = 100
    limit: int = 0

    def __post_init__(self):
        # Publishing needs an offer to publish
        if self.publish:
            self.create_offers = True


@dataclass
class SyncStats:
    """Counters for one run; observational only"""
    total: int = 0
    non_simple: int = 0
    invalid: int = 0
    upserted: int = 0
    skipped: int = 0
    offers: int = 0
    published: int = 0
    failed: int = 0

    def summary_lines(self) -> List[str]:
        return [
            f"Products fetched: {self.total}",
            f"Non-simple (ignored): {self.non_simple}",
            f"Inventory upserted: {self.upserted}",
            f"Skipped (no sku/images): {self.skipped}",
            f"Offers processed: {self.offers}",
            f"Published: {self.published}",
            f"Failed: {self.failed + self.invalid}",
        ]


class BulkSyncService:
    """Runs the full sync pipeline over the WooCommerce catalog"""

    def __init__(
        self,
        settings: Settings,
        options: SyncOptions,
        woo: WooCommerceClient,
        auth: EbayAuthContext,
        ebay: EbayClient,
        probe_client: httpx.AsyncClient,
    ):
        self.settings = settings
        self.options = options
        self.woo = woo
        self.auth = auth
        self.ebay = ebay
        self.stats = SyncStats()

        self.resolver = CategoryResolver(ebay, settings)
        self.inventory = InventoryService(ebay, settings, probe_client, dry_run=options.dry_run)
        self.offers = OfferWorkflow(
            ebay, self.resolver, settings, dry_run=options.dry_run, publish=options.publish
        )
        self.location = LocationService(ebay, settings, dry_run=options.dry_run)

    async def authenticate(self) -> None:
        """Fetch both tokens up front so bad credentials fail the run immediately"""
        logger.info("Authenticating eBay user...")
        await self.auth.get_token(TokenKind.USER)
        logger.info("Authenticating eBay app...")
        await self.auth.get_token(TokenKind.APPLICATION)
        logger.info("eBay auth complete")

    def parse_products(self, items: List[Dict]) -> List[WooProduct]:
        products = []
        for item in items:
            try:
                products.append(WooProduct.model_validate(item))
            except PydanticValidationError as e:
                self.stats.invalid += 1
                logger.error(f"Skipping malformed product {item.get('id')} (sku={item.get('sku')}): {e}")
        return products

    async def process_product(self, product: WooProduct, location_key: Optional[str]) -> None:
        """Inventory item, then offer. Raises on failure; the caller isolates it."""
        inventory_result = await self.inventory.upsert_inventory_item(product)
        if inventory_result.status.is_skipped:
            self.stats.skipped += 1
            return
        self.stats.upserted += 1

        if not self.options.create_offers:
            return

        attributes = OfferAttributes.from_product(product, self.settings.EBAY_PRICE_MARKUP_PERCENT)
        offer_result = await self.offers.ensure_offer(inventory_result.sku, attributes, location_key)
        self.stats.offers += 1
        if offer_result.is_published:
            self.stats.published += 1
        logger.info(f"SKU {offer_result.sku}: offer {offer_result.offer_id or '-'} {offer_result.status}")

    async def _process_isolated(
        self, product: WooProduct, location_key: Optional[str], semaphore: asyncio.Semaphore
    ) -> None:
        async with semaphore:
            try:
                await self.process_product(product, location_key)
            except EbayAPIError as e:
                self.stats.failed += 1
                logger.error(f"Failed for SKU {product.label}: {e.error_message}")
            except BaseServiceError as e:
                self.stats.failed += 1
                logger.error(f"Failed for SKU {product.label}: {str(e)}")
            except Exception:
                self.stats.failed += 1
                logger.exception(f"Unexpected error for SKU {product.label}")

    async def run(self) -> SyncStats:
        """
        Run the sync.

        Raises:
            BaseServiceError: For run-level failures (authentication, location,
                catalog fetch); per-product failures are only counted
        """
        opts = self.options
        logger.info(
            f"Woo -> eBay bulk sync. Env: {self.settings.EBAY_ENV.value}, "
            f"Marketplace: {self.settings.EBAY_MARKETPLACE_ID}, Currency: {self.settings.EBAY_CURRENCY}, "
            f"Mode: {'DRY RUN' if opts.dry_run else 'LIVE'}, "
            f"Offers: {'ON' if opts.create_offers else 'OFF'}, Publish: {'ON' if opts.publish else 'OFF'}"
        )

        await self.authenticate()

        location_key = None
        if opts.create_offers:
            location_key = await self.location.ensure_location()
        logger.info(f"Using location key: {location_key or 'none (offers disabled)'}")

        items = await self.woo.fetch_all_products(opts.page_size, opts.limit)
        if opts.limit:
            logger.warning(f"Limiting run to first {opts.limit} products")
        self.stats.total = len(items)
        logger.info(f"Total Woo products: {len(items)}")

        products = self.parse_products(items)
        simples = [product for product in products if product.is_simple]
        self.stats.non_simple = len(products) - len(simples)
        if self.stats.non_simple:
            logger.warning(
                f"{self.stats.non_simple} non-simple products detected (variable/grouped); only simple products are synced"
            )

        semaphore = asyncio.Semaphore(self.settings.SYNC_CONCURRENCY)
        await asyncio.gather(
            *[self._process_isolated(product, location_key, semaphore) for product in simples]
        )

        logger.info("Sync finished: " + "; ".join(self.stats.summary_lines()))
        return self.stats


async def run_bulk_sync(settings: Settings, options: SyncOptions) -> SyncStats:
    """Open every client the sync needs, run it, and close them again"""
    async with EbayAuthContext(settings) as auth, \
            EbayClient(settings, auth) as ebay, \
            WooCommerceClient(settings) as woo, \
            httpx.AsyncClient(timeout=settings.IMAGE_PROBE_TIMEOUT, follow_redirects=True) as probe_client:
        service = BulkSyncService(settings, options, woo, auth, ebay, probe_client)
        return await service.run()
