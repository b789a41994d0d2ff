# woo_ebay_sync/services/ebay/inventory.py
import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from woo_ebay_sync.core.config import Settings
from woo_ebay_sync.core.enums import InventoryStatus
from woo_ebay_sync.schemas.ebay import InventoryResult
from woo_ebay_sync.schemas.product import WooProduct
from woo_ebay_sync.services.ebay.client import EbayClient

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 80
_HTTP_URL = re.compile(r"^https?://", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def extract_image_urls(images: Any) -> List[str]:
    """
    Flatten Woo image data into a list of URLs.

    Accepts a list of strings or of objects carrying ``src``/``srcUrl``, or a
    comma-separated string. Empty entries are dropped.
    """
    urls: List[str] = []
    if isinstance(images, list):
        for image in images:
            if isinstance(image, str):
                url = image.strip()
            elif isinstance(image, dict):
                url = (image.get("src") or image.get("srcUrl") or "").strip()
            else:
                url = ""
            if url:
                urls.append(url)
    elif isinstance(images, str):
        urls = [part.strip() for part in images.split(",") if part.strip()]
    return urls


def sanitize_image_urls(urls: List[str]) -> List[str]:
    """Percent-encode whitespace and keep only http(s) URLs"""
    sanitized = []
    for url in urls:
        if not url:
            continue
        url = _WHITESPACE.sub("%20", url.strip())
        if _HTTP_URL.match(url):
            sanitized.append(url)
    return sanitized


def build_inventory_body(product: WooProduct, image_urls: List[str], condition: Optional[str] = None) -> Dict:
    body = {
        "availability": {
            "shipToLocationAvailability": {"quantity": product.stock_quantity}
        },
        "product": {
            "title": product.name[:MAX_TITLE_LENGTH],
            "description": product.listing_description,
            "imageUrls": image_urls,
            "aspects": {},
        },
    }
    if condition:
        body["condition"] = condition
    return body


class InventoryService:
    """Pushes WooCommerce products to eBay as inventory items"""

    def __init__(
        self,
        client: EbayClient,
        settings: Settings,
        probe_client: httpx.AsyncClient,
        dry_run: bool = False,
    ):
        self.client = client
        self.settings = settings
        self.probe_client = probe_client
        self.dry_run = dry_run

    async def _content_type(self, url: str) -> Optional[str]:
        """
        Content type a URL reports, or None if it is unreachable.

        HEAD first; servers that refuse HEAD get a streamed GET whose body is
        never read.
        """
        try:
            response = await self.probe_client.head(url)
            if response.status_code < 400:
                return response.headers.get("content-type", "")
        except httpx.HTTPError as e:
            logger.debug(f"HEAD {url} failed ({e}); falling back to GET")

        async with self.probe_client.stream("GET", url) as response:
            if response.status_code >= 400:
                return None
            return response.headers.get("content-type", "")

    async def filter_reachable_images(self, urls: List[str], sku: str) -> List[str]:
        """Keep URLs that respond with an image content type. Probed one at a time."""
        valid = []
        for url in urls:
            try:
                content_type = await self._content_type(url)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                logger.warning(f"Skipping image for SKU {sku}: unreachable ({url}) - {e}")
                continue

            if content_type is None:
                logger.warning(f"Skipping image for SKU {sku}: unreachable ({url})")
            elif content_type.lower().startswith("image/"):
                valid.append(url)
            else:
                logger.warning(
                    f"Skipping image for SKU {sku}: not an image ({url}) content-type={content_type}"
                )
        return valid

    async def upsert_inventory_item(self, product: WooProduct) -> InventoryResult:
        """
        Create or replace the eBay inventory item for a product.

        Products without a SKU or without a single usable image are skipped
        and no inventory call is made.
        """
        sku = product.sku
        if not sku:
            logger.warning(f"Skipping product \"{product.name}\" (no SKU)")
            return InventoryResult(None, InventoryStatus.SKIPPED_NO_SKU)

        image_urls = sanitize_image_urls(extract_image_urls(product.images))
        if not self.dry_run:
            image_urls = await self.filter_reachable_images(image_urls, sku)

        if not image_urls:
            logger.warning(f"Skipping SKU {sku} (no valid images after sanitisation)")
            return InventoryResult(sku, InventoryStatus.SKIPPED_NO_IMAGES)

        if self.dry_run:
            logger.info(f"[dry-run] Would PUT inventory item for SKU {sku} with {len(image_urls)} images")
            return InventoryResult(sku, InventoryStatus.DRY_RUN, image_urls)

        body = build_inventory_body(product, image_urls, self.settings.EBAY_CONDITION)
        await self.client.put_inventory_item(sku, body)
        logger.info(f"Upserted inventory item {sku} with {len(image_urls)} images")
        return InventoryResult(sku, InventoryStatus.UPSERTED, image_urls)
