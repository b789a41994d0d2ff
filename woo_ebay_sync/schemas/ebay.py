"""
Result and payload structures passed between the eBay sync services.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from woo_ebay_sync.core.enums import (
    CategorySource,
    CategoryValidity,
    InventoryStatus,
    OfferOutcome,
)
from woo_ebay_sync.core.exceptions import ValidationError
from woo_ebay_sync.schemas.product import WooProduct

TWO_PLACES = Decimal("0.01")


@dataclass
class InventoryResult:
    """Outcome of pushing one product's inventory item"""
    sku: Optional[str]
    status: InventoryStatus
    image_urls: List[str] = field(default_factory=list)


@dataclass
class CategoryResolution:
    """Category chosen for an offer payload"""
    category_id: Optional[str]
    source: CategorySource
    validity: Optional[CategoryValidity] = None

    @property
    def publishable(self) -> bool:
        return self.category_id is not None

    @property
    def publish_may_fail(self) -> bool:
        return self.validity == CategoryValidity.UNKNOWN


@dataclass
class OfferAttributes:
    """Desired offer state derived from a catalog product"""
    title: str
    description: str
    price: Decimal
    quantity: int
    category_id: Optional[str] = None

    @classmethod
    def from_product(cls, product: WooProduct, markup_percent: float) -> "OfferAttributes":
        """
        Build offer attributes, applying the eBay price markup.

        Raises:
            ValidationError: If the product has neither price nor regular price
        """
        base_price = product.effective_price
        if base_price is None:
            raise ValidationError(f"Product {product.label} has no price")
        return cls(
            title=product.name,
            description=product.listing_description,
            price=apply_markup(base_price, markup_percent),
            quantity=product.stock_quantity,
        )


@dataclass
class OfferResult:
    """Where an SKU's offer ended up after ensure_offer"""
    sku: str
    offer_id: Optional[str]
    outcome: OfferOutcome
    remote_status: Optional[str] = None
    listing_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def status(self) -> str:
        if self.outcome == OfferOutcome.RECOVERED:
            return f"recovered-{self.remote_status or 'unknown'}"
        return self.outcome.value

    @property
    def is_published(self) -> bool:
        return self.outcome == OfferOutcome.PUBLISHED


def apply_markup(price: Decimal, markup_percent: float) -> Decimal:
    """Multiply by (1 + markup%) and round half-up to cents"""
    multiplier = Decimal(1) + Decimal(str(markup_percent)) / Decimal(100)
    return (Decimal(price) * multiplier).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
