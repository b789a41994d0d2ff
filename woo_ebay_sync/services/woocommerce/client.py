import logging
from typing import Dict, List, Optional

import httpx

from woo_ebay_sync.core.config import Settings
from woo_ebay_sync.core.exceptions import ConfigurationError, WooCommerceAPIError
from woo_ebay_sync.services.retry import with_retries

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class WooCommerceClient:
    """
    Read-only client for the WooCommerce wc/v3 REST API.

    Authenticates with the store's consumer key/secret over HTTPS basic auth.
    """

    API_PATH = "/wp-json/wc/v3"

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        if http_client is None and not settings.WOO_URL:
            raise ConfigurationError("WOO_URL is required. Please check your .env file.")
        self.settings = settings
        self._http = http_client or httpx.AsyncClient(
            base_url=settings.WOO_URL.rstrip("/") + self.API_PATH,
            auth=(settings.WOO_CONSUMER_KEY, settings.WOO_CONSUMER_SECRET),
            timeout=settings.HTTP_TIMEOUT,
        )
        self._owns_http = http_client is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    async def aclose(self):
        if self._owns_http:
            await self._http.aclose()

    async def _get(self, endpoint: str, params: Dict) -> List[Dict]:
        try:
            response = await self._http.get(endpoint, params=params)
        except httpx.RequestError as e:
            logger.error(f"Network error fetching {endpoint}: {str(e)}")
            raise WooCommerceAPIError(f"Network error fetching {endpoint}: {str(e)}")

        if response.status_code != 200:
            logger.error(f"WooCommerce API error: {response.text[:500]}")
            raise WooCommerceAPIError(
                f"Failed to fetch {endpoint}: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.json() or []

    async def fetch_page(self, page: int, per_page: int) -> List[Dict]:
        """
        Fetch one page of products

        Args:
            page: 1-based page number
            per_page: Products per page (1-100)
        """
        return await with_retries(
            lambda: self._get("products", {"per_page": per_page, "page": page}),
            label=f"fetch woo products page {page}",
        )

    async def fetch_all_products(self, per_page: int = MAX_PAGE_SIZE, limit: int = 0) -> List[Dict]:
        """
        Fetch products page by page.

        Stops on a short page, or once ``limit`` products have been collected
        (0 means no limit).

        Raises:
            ValueError: If per_page is outside 1-100
            WooCommerceAPIError: If a page cannot be fetched
        """
        if per_page < 1 or per_page > MAX_PAGE_SIZE:
            raise ValueError(f"per_page must be between 1 and {MAX_PAGE_SIZE}")
        if limit and per_page > limit:
            per_page = limit

        products: List[Dict] = []
        page = 1
        while True:
            if limit and len(products) >= limit:
                break
            items = await self.fetch_page(page, per_page)
            products.extend(items)
            logger.info(f"Fetched {len(items)} products (page {page})")
            if len(items) < per_page:
                break
            page += 1

        if limit:
            products = products[:limit]
        return products
