"""
Category resolution for eBay offers.

Categories are validated against, and suggested from, the marketplace's
default category tree. Validation is three-way: a 403 / errorId 1100 means
the application may not inspect the tree, which is not the same as the
category being wrong.
"""

import logging
from typing import Dict, Optional

from woo_ebay_sync.core.config import Settings
from woo_ebay_sync.core.enums import CategorySource, CategoryValidity, ErrorKind
from woo_ebay_sync.core.exceptions import EbayAPIError
from woo_ebay_sync.schemas.ebay import CategoryResolution
from woo_ebay_sync.services.ebay.client import EbayClient

logger = logging.getLogger(__name__)

MAX_SUGGESTION_QUERY_LENGTH = 250


def extract_best_suggestion(data: Dict) -> Optional[Dict[str, str]]:
    """Pick the top-ranked suggestion from a get_category_suggestions response"""
    suggestions = (data or {}).get("categorySuggestions") or []
    if not suggestions:
        return None
    best = suggestions[0]
    category = best.get("category") or {}
    category_id = category.get("categoryId") or best.get("categoryId")
    if not category_id:
        return None
    return {
        "category_id": str(category_id),
        "name": category.get("categoryName") or str(category_id),
    }


class CategoryResolver:
    """Validates and suggests eBay categories for a marketplace"""

    def __init__(self, client: EbayClient, settings: Settings):
        self.client = client
        self.settings = settings
        self._tree_ids: Dict[str, str] = {}

    async def default_category_tree_id(self, marketplace_id: Optional[str] = None) -> str:
        """Default category tree for a marketplace, cached for the process lifetime"""
        marketplace_id = marketplace_id or self.settings.EBAY_MARKETPLACE_ID
        if marketplace_id not in self._tree_ids:
            self._tree_ids[marketplace_id] = await self.client.get_default_category_tree_id(marketplace_id)
        return self._tree_ids[marketplace_id]

    async def validate_category(
        self, category_id: Optional[str], marketplace_id: Optional[str] = None
    ) -> CategoryValidity:
        """
        Check a category id against the marketplace tree.

        Returns:
            VALID when the subtree lookup returns a node, INVALID on 400/404 or
            an empty response, UNKNOWN when eBay refuses the check for
            insufficient permissions

        Raises:
            EbayAPIError: For any other failure
        """
        if not category_id:
            return CategoryValidity.INVALID

        try:
            tree_id = await self.default_category_tree_id(marketplace_id)
            data = await self.client.get_category_subtree(tree_id, category_id)
        except EbayAPIError as e:
            if e.kind == ErrorKind.PERMISSION_DENIED:
                logger.warning(
                    f"Taxonomy validation for {category_id} returned 403/1100 (insufficient permissions)"
                )
                return CategoryValidity.UNKNOWN
            if e.status_code in (400, 404):
                return CategoryValidity.INVALID
            raise

        if data.get("categorySubtreeNode") or data.get("category"):
            return CategoryValidity.VALID
        return CategoryValidity.INVALID

    async def suggest_category(self, title: str, marketplace_id: Optional[str] = None) -> Optional[str]:
        """
        Suggest a category from a product title.

        Lookup failures are logged and reported as no suggestion.
        """
        if not title:
            return None
        query = title[:MAX_SUGGESTION_QUERY_LENGTH]
        try:
            tree_id = await self.default_category_tree_id(marketplace_id)
            data = await self.client.get_category_suggestions(tree_id, query)
        except EbayAPIError as e:
            logger.warning(f"Category suggestion failed for \"{title}\": {e.error_message}")
            return None
        except (KeyError, ValueError) as e:
            logger.warning(f"Category suggestion failed for \"{title}\": unexpected response ({str(e)})")
            return None

        best = extract_best_suggestion(data)
        if best is None:
            logger.warning(f"No category suggestions for \"{title}\"")
            return None

        logger.info(f"Taxonomy suggestion: {best['category_id']} ({best['name']}) for \"{title}\"")
        return best["category_id"]

    async def resolve(self, title: str, explicit_category_id: Optional[str] = None) -> CategoryResolution:
        """
        Decide the category for an offer payload.

        Explicit id first, then the configured default. An invalid candidate is
        replaced by a title suggestion; an unverifiable one is kept. With no
        usable candidate and no suggestion the offer goes out without a
        category and must not be published.
        """
        if explicit_category_id:
            candidate, source = explicit_category_id, CategorySource.EXPLICIT
        elif self.settings.EBAY_DEFAULT_CATEGORY_ID:
            candidate, source = self.settings.EBAY_DEFAULT_CATEGORY_ID, CategorySource.DEFAULT
        else:
            candidate, source = None, CategorySource.NONE

        if candidate:
            validity = await self.validate_category(candidate)
            if validity == CategoryValidity.VALID:
                return CategoryResolution(candidate, source, validity)
            if validity == CategoryValidity.UNKNOWN:
                logger.warning(f"Category {candidate} could not be verified; keeping it, publish may fail")
                return CategoryResolution(candidate, source, validity)
            logger.warning(f"Category {candidate} is not valid for {self.settings.EBAY_MARKETPLACE_ID}")

        suggested = await self.suggest_category(title)
        if suggested:
            return CategoryResolution(suggested, CategorySource.SUGGESTED)

        logger.warning(f"No category resolved for \"{title}\"; offer will not be published")
        return CategoryResolution(None, CategorySource.NONE)

    async def replacement_category(self, title: str) -> Optional[str]:
        """Category to retry a rejected publish with: configured fallback, else a suggestion"""
        if self.settings.EBAY_FALLBACK_CATEGORY_ID:
            return self.settings.EBAY_FALLBACK_CATEGORY_ID
        return await self.suggest_category(title)
