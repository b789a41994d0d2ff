from typing import Any, Dict, List, Optional

import httpx

from woo_ebay_sync.core.enums import ErrorKind


# eBay errorId -> internal kind
OFFER_NOT_AVAILABLE_ERROR_IDS = {25713}
SKU_NOT_FOUND_ERROR_IDS = {25702}
OFFER_EXISTS_ERROR_IDS = {25002}
CATEGORY_ERROR_IDS = {25005, 25021, 25022}
PERMISSION_ERROR_IDS = {1100}


class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass


class ConfigurationError(BaseServiceError):
    """Raised when required settings are missing."""
    pass


class ValidationError(BaseServiceError):
    """Raised when data validation fails."""
    pass


class PlatformServiceError(BaseServiceError):
    """Base exception for platform service errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EbayServiceError(PlatformServiceError):
    """Base exception for eBay-specific errors."""
    pass


class EbayAPIError(EbayServiceError):
    """Raised when eBay API calls fail."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message, status_code=status_code)
        self.errors = errors or []

    @classmethod
    def from_response(cls, response: httpx.Response, action: str) -> "EbayAPIError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        errors = body.get("errors", []) if isinstance(body, dict) else []
        return cls(
            f"Failed to {action}: HTTP {response.status_code} {response.text[:500]}",
            status_code=response.status_code,
            errors=errors,
        )

    @property
    def error_ids(self) -> List[int]:
        ids = []
        for error in self.errors:
            try:
                ids.append(int(error.get("errorId")))
            except (TypeError, ValueError):
                continue
        return ids

    @property
    def error_message(self) -> str:
        if self.errors:
            first = self.errors[0]
            return first.get("longMessage") or first.get("message") or str(self)
        return str(self)

    @property
    def kind(self) -> ErrorKind:
        return classify_ebay_error(self.status_code, self.errors)


class OfferConflictError(EbayServiceError):
    """Raised when eBay reports an existing offer that cannot be found."""
    pass


class WooCommerceServiceError(PlatformServiceError):
    """Base exception for WooCommerce-specific errors."""
    pass


class WooCommerceAPIError(WooCommerceServiceError):
    """Raised when WooCommerce API calls fail."""
    pass


def _has_offer_id_parameter(error: Dict[str, Any]) -> bool:
    for parameter in error.get("parameters") or []:
        if parameter.get("name") == "offerId" and parameter.get("value"):
            return True
    return False


def classify_ebay_error(status_code: Optional[int], errors: Optional[List[Dict[str, Any]]]) -> ErrorKind:
    """
    Map an eBay error response onto an ErrorKind.

    Error ids decide first. Message matching is a fallback only and is
    brittle: eBay rewords messages without changing ids.
    """
    errors = errors or []

    for error in errors:
        try:
            error_id = int(error.get("errorId"))
        except (TypeError, ValueError):
            continue
        message = (error.get("message") or "").lower()

        if error_id in OFFER_NOT_AVAILABLE_ERROR_IDS:
            return ErrorKind.OFFER_NOT_AVAILABLE
        if error_id in SKU_NOT_FOUND_ERROR_IDS:
            return ErrorKind.SKU_NOT_FOUND
        if error_id in OFFER_EXISTS_ERROR_IDS and (
            _has_offer_id_parameter(error) or "already exists" in message
        ):
            return ErrorKind.OFFER_ALREADY_EXISTS
        if error_id in CATEGORY_ERROR_IDS:
            return ErrorKind.CATEGORY
        if error_id in PERMISSION_ERROR_IDS:
            return ErrorKind.PERMISSION_DENIED

    if status_code == 401:
        return ErrorKind.AUTH
    if status_code == 403:
        return ErrorKind.PERMISSION_DENIED
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code is not None and status_code >= 500:
        return ErrorKind.SERVER

    # Fallback: message content
    for error in errors:
        message = " ".join(
            str(error.get(key) or "") for key in ("message", "longMessage")
        ).lower()
        if "category" in message:
            return ErrorKind.CATEGORY
        if "already exists" in message:
            return ErrorKind.OFFER_ALREADY_EXISTS

    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 400:
        return ErrorKind.BAD_REQUEST
    return ErrorKind.OTHER
