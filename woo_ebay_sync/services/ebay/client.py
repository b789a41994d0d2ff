import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from woo_ebay_sync.core.config import Settings
from woo_ebay_sync.core.enums import TokenKind
from woo_ebay_sync.core.exceptions import EbayAPIError
from woo_ebay_sync.services.ebay.auth import EbayAuthContext
from woo_ebay_sync.services.retry import with_retries

logger = logging.getLogger(__name__)

PUBLISH_TIMEOUT_SECONDS = 15.0


class EbayClient:
    """
    Client for the eBay Sell Inventory and Commerce Taxonomy REST APIs.

    Every call carries a bearer token from the injected auth context. A 401
    triggers exactly one forced token refresh and a single resend. Server
    errors and rate limiting are retried by the retry executor.
    """

    INVENTORY_API = "/sell/inventory/v1"
    TAXONOMY_API = "/commerce/taxonomy/v1"

    def __init__(
        self,
        settings: Settings,
        auth: EbayAuthContext,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings
        self.auth = auth
        self.marketplace_id = settings.EBAY_MARKETPLACE_ID
        self._http = http_client or httpx.AsyncClient(
            base_url=settings.ebay_base_url,
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

    async def _get_headers(self, kind: TokenKind, force_refresh: bool = False) -> Dict[str, str]:
        """Get headers with auth token for API requests"""
        token = await self.auth.get_token(kind, force_refresh=force_refresh)
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "Content-Language": self.settings.EBAY_CONTENT_LANGUAGE,
        }

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        kind: TokenKind = TokenKind.USER,
        json: Optional[Dict] = None,
        params: Optional[Dict] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Make one authenticated request.

        Returns:
            Dict: Response JSON, or {} for empty bodies

        Raises:
            EbayAPIError: If the API request fails
        """
        request_kwargs: Dict[str, Any] = {"params": params}
        if json is not None:
            request_kwargs["json"] = json
        if timeout is not None:
            request_kwargs["timeout"] = timeout

        logger.debug(f"{method} {path} ({kind.value} token)")

        try:
            headers = await self._get_headers(kind)
            response = await self._http.request(method, path, headers=headers, **request_kwargs)

            if response.status_code == 401:
                logger.info(f"401 from eBay on {action}; refreshing {kind.value} token and retrying once")
                headers = await self._get_headers(kind, force_refresh=True)
                response = await self._http.request(method, path, headers=headers, **request_kwargs)

        except httpx.RequestError as e:
            logger.error(f"Network error during {action}: {str(e)}")
            raise EbayAPIError(f"Network error during {action}: {str(e)}")

        if response.status_code >= 400:
            logger.debug(f"eBay API error on {action}: {response.text[:500]}")
            raise EbayAPIError.from_response(response, action)

        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            logger.error(f"Non-JSON response on {action}: {response.text[:500]}")
            raise EbayAPIError(
                f"Failed to {action}: invalid JSON in HTTP {response.status_code} response",
                status_code=response.status_code,
            )

    async def _call(self, method: str, path: str, action: str, **kwargs) -> Dict[str, Any]:
        return await with_retries(
            lambda: self._request(method, path, action, **kwargs),
            label=action,
        )

    # Inventory items

    async def put_inventory_item(self, sku: str, item_data: Dict) -> None:
        """
        Create or replace an inventory item (idempotent by SKU)

        Raises:
            EbayAPIError: If the API request fails
        """
        await self._call(
            "PUT",
            f"{self.INVENTORY_API}/inventory_item/{quote(sku, safe='')}",
            f"put inventory item {sku}",
            json=item_data,
        )

    # Offers

    async def get_offers(self, sku: str) -> List[Dict]:
        """
        Get offers for a SKU

        Returns:
            List[Dict]: Offers in eBay's order (may be empty)
        """
        data = await self._call(
            "GET",
            f"{self.INVENTORY_API}/offer",
            f"fetch offers {sku}",
            params={"sku": sku},
        )
        return data.get("offers") or []

    async def create_offer(self, offer_data: Dict) -> str:
        """
        Create an offer for an inventory item

        Returns:
            str: The new offer ID
        """
        sku = offer_data.get("sku")
        data = await self._call(
            "POST",
            f"{self.INVENTORY_API}/offer",
            f"create offer {sku}",
            json=offer_data,
        )
        offer_id = data.get("offerId")
        logger.info(f"Created offer {offer_id} for SKU {sku}")
        return offer_id

    async def update_offer(self, offer_id: str, offer_data: Dict) -> str:
        """Replace an existing offer"""
        sku = offer_data.get("sku")
        await self._call(
            "PUT",
            f"{self.INVENTORY_API}/offer/{quote(offer_id, safe='')}",
            f"update offer {sku}",
            json=offer_data,
        )
        logger.info(f"Updated offer {offer_id} for SKU {sku}")
        return offer_id

    async def publish_offer(self, offer_id: str, sku: Optional[str] = None) -> Dict:
        """
        Publish an offer to make it active on eBay

        Returns:
            Dict: Response with listing ID
        """
        data = await self._call(
            "POST",
            f"{self.INVENTORY_API}/offer/{quote(offer_id, safe='')}/publish",
            f"publish offer {sku or offer_id}",
            timeout=PUBLISH_TIMEOUT_SECONDS,
        )
        logger.info(f"Published offer {offer_id} for SKU {sku} (listing {data.get('listingId')})")
        return data

    # Taxonomy (application token)

    async def get_default_category_tree_id(self, marketplace_id: str) -> str:
        data = await self._call(
            "GET",
            f"{self.TAXONOMY_API}/get_default_category_tree_id",
            "get default category tree id",
            kind=TokenKind.APPLICATION,
            params={"marketplace_id": marketplace_id},
        )
        tree_id = data.get("categoryTreeId")
        if not tree_id:
            raise EbayAPIError(f"No categoryTreeId returned for marketplace {marketplace_id}")
        return tree_id

    async def get_category_subtree(self, category_tree_id: str, category_id: str) -> Dict:
        return await self._call(
            "GET",
            f"{self.TAXONOMY_API}/category_tree/{quote(category_tree_id, safe='')}/get_category_subtree",
            f"validate category {category_id}",
            kind=TokenKind.APPLICATION,
            params={"category_id": category_id},
        )

    async def get_category_suggestions(self, category_tree_id: str, query: str) -> Dict:
        return await self._call(
            "GET",
            f"{self.TAXONOMY_API}/category_tree/{quote(category_tree_id, safe='')}/get_category_suggestions",
            "get category suggestions",
            kind=TokenKind.APPLICATION,
            params={"q": query},
        )

    # Inventory locations

    async def get_inventory_location(self, location_key: str) -> Optional[Dict]:
        """
        Get an inventory location

        Returns:
            Dict, or None if eBay has no location with this key
        """
        try:
            return await self._call(
                "GET",
                f"{self.INVENTORY_API}/location/{quote(location_key, safe='')}",
                f"get location {location_key}",
            )
        except EbayAPIError as e:
            if e.status_code == 404:
                return None
            raise

    async def create_inventory_location(self, location_key: str, location_data: Dict) -> None:
        await self._call(
            "POST",
            f"{self.INVENTORY_API}/location/{quote(location_key, safe='')}",
            f"create location {location_key}",
            json=location_data,
        )
