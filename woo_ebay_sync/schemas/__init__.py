from .product import WooProduct
from .ebay import (
    CategoryResolution,
    InventoryResult,
    OfferAttributes,
    OfferResult,
    apply_markup,
)
