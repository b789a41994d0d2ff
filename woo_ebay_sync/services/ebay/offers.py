"""
Offer upsert and publish workflow.

eBay's create/update/publish calls are not transactional and report
"exists"/"does not exist" inconsistently. OfferWorkflow.ensure_offer turns
them into one call that always ends with an identifiable offer for the SKU:

    discover -> build payload -> (dry run) -> update existing
                                   \\-> not updatable -> create
                                                         \\-> already exists -> recover

Publish failures after a successful create/update are logged and reported
through the result outcome, never raised. A created offer is not rolled back
when publishing it fails.
"""

import logging
from typing import Dict, List, Optional

from woo_ebay_sync.core.config import Settings
from woo_ebay_sync.core.enums import ErrorKind, OfferOutcome
from woo_ebay_sync.core.exceptions import EbayAPIError, OfferConflictError
from woo_ebay_sync.schemas.ebay import CategoryResolution, OfferAttributes, OfferResult
from woo_ebay_sync.services.ebay.client import EbayClient
from woo_ebay_sync.services.ebay.taxonomy import CategoryResolver

logger = logging.getLogger(__name__)

NO_OFFER_KINDS = {ErrorKind.OFFER_NOT_AVAILABLE, ErrorKind.SKU_NOT_FOUND}


class OfferWorkflow:
    """Ensures each SKU has one correct (and optionally published) offer"""

    def __init__(
        self,
        client: EbayClient,
        resolver: CategoryResolver,
        settings: Settings,
        dry_run: bool = False,
        publish: bool = False,
    ):
        self.client = client
        self.resolver = resolver
        self.settings = settings
        self.dry_run = dry_run
        self.publish = publish

    async def find_offers(self, sku: str) -> List[Dict]:
        """Offers for a SKU; eBay's "not available" answers count as none"""
        try:
            return await self.client.get_offers(sku)
        except EbayAPIError as e:
            if e.kind in NO_OFFER_KINDS:
                logger.debug(f"No offers for SKU {sku} ({e.kind.value})")
                return []
            raise

    def select_offer(self, sku: str, offers: List[Dict]) -> Optional[Dict]:
        """First offer wins; duplicates are reported but not resolved"""
        if not offers:
            return None
        if len(offers) > 1:
            offer_ids = [offer.get("offerId") for offer in offers]
            logger.warning(
                f"SKU {sku} has {len(offers)} offers {offer_ids}; using the first ({offer_ids[0]})"
            )
        return offers[0]

    def build_payload(
        self,
        sku: str,
        attributes: OfferAttributes,
        location_key: Optional[str],
        category: CategoryResolution,
    ) -> Dict:
        payload = {
            "sku": sku,
            "marketplaceId": self.settings.EBAY_MARKETPLACE_ID,
            "format": "FIXED_PRICE",
            "availableQuantity": attributes.quantity,
            "listingDescription": attributes.description,
            "listingPolicies": self.settings.listing_policies,
            "pricingSummary": {
                "price": {
                    "value": f"{attributes.price:.2f}",
                    "currency": self.settings.EBAY_CURRENCY,
                }
            },
        }
        if location_key:
            payload["merchantLocationKey"] = location_key
        if category.category_id:
            payload["categoryId"] = category.category_id
        return payload

    async def ensure_offer(
        self,
        sku: str,
        attributes: OfferAttributes,
        location_key: Optional[str],
    ) -> OfferResult:
        """
        Create or update the SKU's offer, publishing it when configured.

        Returns:
            OfferResult with the offer id and how it got there

        Raises:
            EbayAPIError: For failures no recovery branch handles
            OfferConflictError: If eBay says an offer exists but none can be found
        """
        existing = self.select_offer(sku, await self.find_offers(sku))

        category = await self.resolver.resolve(attributes.title, attributes.category_id)
        payload = self.build_payload(sku, attributes, location_key, category)
        publish = self.publish and category.publishable
        if self.publish and not category.publishable:
            logger.warning(f"Publishing skipped for SKU {sku}: no category")

        if self.dry_run:
            if existing:
                logger.info(f"[dry-run] Would update offer {existing.get('offerId')} for SKU {sku}")
                return OfferResult(sku, existing.get("offerId"), OfferOutcome.WOULD_UPDATE,
                                   remote_status=existing.get("status"))
            logger.info(f"[dry-run] Would create offer for SKU {sku}")
            return OfferResult(sku, None, OfferOutcome.WOULD_CREATE)

        if existing:
            offer_id = existing.get("offerId")
            try:
                await self.client.update_offer(offer_id, payload)
            except EbayAPIError as e:
                if e.kind != ErrorKind.OFFER_NOT_AVAILABLE:
                    raise
                logger.warning(f"Offer {offer_id} for SKU {sku} is not updatable; creating a new one")
            else:
                return await self._publish_after_write(
                    sku, offer_id, payload, attributes, publish, OfferOutcome.UPDATED
                )

        return await self._create(sku, payload, attributes, publish)

    async def _create(self, sku: str, payload: Dict, attributes: OfferAttributes, publish: bool) -> OfferResult:
        try:
            offer_id = await self.client.create_offer(payload)
        except EbayAPIError as e:
            if e.kind != ErrorKind.OFFER_ALREADY_EXISTS:
                raise
            logger.warning(f"Offer already exists for SKU {sku}; recovering existing offer")
            return await self._recover(sku, payload, attributes, publish)

        return await self._publish_after_write(
            sku, offer_id, payload, attributes, publish, OfferOutcome.CREATED
        )

    async def _publish_after_write(
        self,
        sku: str,
        offer_id: str,
        payload: Dict,
        attributes: OfferAttributes,
        publish: bool,
        written: OfferOutcome,
    ) -> OfferResult:
        if not publish:
            return OfferResult(sku, offer_id, written)
        try:
            response = await self.publish_with_category_fallback(sku, offer_id, payload, attributes.title)
        except EbayAPIError as e:
            logger.warning(f"Failed to publish offer {offer_id} for SKU {sku}: {e.error_message}")
            return OfferResult(sku, offer_id, written, error=e.error_message)
        return OfferResult(sku, offer_id, OfferOutcome.PUBLISHED, listing_id=response.get("listingId"))

    async def _recover(self, sku: str, payload: Dict, attributes: OfferAttributes, publish: bool) -> OfferResult:
        offer = self.select_offer(sku, await self.find_offers(sku))
        if offer is None:
            raise OfferConflictError(
                f"eBay reported an existing offer for SKU {sku} but none could be found"
            )

        offer_id = offer.get("offerId")
        remote_status = offer.get("status")
        logger.info(f"Recovered offer {offer_id} ({remote_status}) for SKU {sku}")

        try:
            if publish:
                response = await self.publish_with_category_fallback(sku, offer_id, payload, attributes.title)
                return OfferResult(sku, offer_id, OfferOutcome.PUBLISHED,
                                   remote_status=remote_status, listing_id=response.get("listingId"))
            await self.client.update_offer(offer_id, payload)
            return OfferResult(sku, offer_id, OfferOutcome.UPDATED, remote_status=remote_status)
        except EbayAPIError as e:
            logger.warning(f"Recovered offer {offer_id} for SKU {sku} did not converge: {e.error_message}")
            return OfferResult(sku, offer_id, OfferOutcome.RECOVERED,
                               remote_status=remote_status, error=e.error_message)

    async def publish_with_category_fallback(
        self, sku: str, offer_id: str, payload: Dict, title: str
    ) -> Dict:
        """
        Publish an offer; on a category rejection swap the category and retry once.

        Raises:
            EbayAPIError: For non-category failures, when no replacement category
                exists, or when the single retry also fails
        """
        try:
            return await self.client.publish_offer(offer_id, sku)
        except EbayAPIError as e:
            if e.kind != ErrorKind.CATEGORY:
                raise
            logger.warning(f"Publish of {offer_id} rejected for category: {e.error_message}")
            replacement = await self.resolver.replacement_category(title)
            if not replacement:
                raise

        logger.info(f"Retrying publish of {offer_id} with category {replacement}")
        await self.client.update_offer(offer_id, {**payload, "categoryId": replacement})
        return await self.client.publish_offer(offer_id, sku)
