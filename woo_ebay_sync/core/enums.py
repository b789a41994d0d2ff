"""
Shared enums and constants used across the application.
"""

from enum import Enum


class EbayEnvironment(str, Enum):
    SANDBOX = "sandbox"
    PRODUCTION = "production"


class TokenKind(str, Enum):
    """Which OAuth token a call is made with"""
    APPLICATION = "application"   # client-credentials grant
    USER = "user"                 # refresh-token grant


class ErrorKind(str, Enum):
    """Internal classification of eBay API failures"""
    OFFER_NOT_AVAILABLE = "OFFER_NOT_AVAILABLE"
    SKU_NOT_FOUND = "SKU_NOT_FOUND"
    OFFER_ALREADY_EXISTS = "OFFER_ALREADY_EXISTS"
    CATEGORY = "CATEGORY"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    AUTH = "AUTH"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER = "SERVER"
    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    OTHER = "OTHER"


class CategoryValidity(str, Enum):
    """Outcome of a taxonomy subtree check"""
    VALID = "VALID"
    INVALID = "INVALID"
    UNKNOWN = "UNKNOWN"   # validation denied; assume valid, publish may still fail


class CategorySource(str, Enum):
    EXPLICIT = "EXPLICIT"
    DEFAULT = "DEFAULT"
    SUGGESTED = "SUGGESTED"
    NONE = "NONE"


class InventoryStatus(str, Enum):
    SKIPPED_NO_SKU = "skipped-no-sku"
    SKIPPED_NO_IMAGES = "skipped-no-images"
    DRY_RUN = "dry-run"
    UPSERTED = "upserted"

    @property
    def is_skipped(self) -> bool:
        return self.value.startswith("skipped")


class OfferOutcome(str, Enum):
    WOULD_CREATE = "would-create"
    WOULD_UPDATE = "would-update"
    CREATED = "created"
    UPDATED = "updated"
    PUBLISHED = "published"
    RECOVERED = "recovered"
