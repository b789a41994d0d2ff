"""
Core module exports.
"""
from .enums import (
    CategorySource,
    CategoryValidity,
    EbayEnvironment,
    ErrorKind,
    InventoryStatus,
    OfferOutcome,
    TokenKind,
)

from .exceptions import (
    BaseServiceError,
    ConfigurationError,
    ValidationError,
    PlatformServiceError,
    EbayServiceError,
    EbayAPIError,
    OfferConflictError,
    WooCommerceServiceError,
    WooCommerceAPIError,
    classify_ebay_error,
)
