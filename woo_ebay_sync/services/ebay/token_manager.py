"""
In-memory token storage for eBay OAuth access tokens.
Access tokens are never persisted to disk; refresh tokens always come from settings.
"""

import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)

# Tokens are treated as expired this many seconds before eBay says so
EXPIRY_SAFETY_MARGIN_SECONDS = 60


class TokenCache:
    """
    Holds one access token and its expiry.

    Expiry is computed as issued lifetime minus a 60 second safety margin,
    never less than one second.
    """

    def __init__(self, name: str):
        self.name = name
        self.access_token: Optional[str] = None
        self.expires_at: float = 0.0

    def get(self) -> Optional[str]:
        """Return the cached token if it is still valid"""
        if self.access_token and time.monotonic() < self.expires_at:
            return self.access_token
        if self.access_token:
            logger.debug(f"{self.name} access token expired")
        return None

    def store(self, access_token: str, expires_in: int) -> None:
        lifetime = max(int(expires_in) - EXPIRY_SAFETY_MARGIN_SECONDS, 1)
        self.access_token = access_token
        self.expires_at = time.monotonic() + lifetime
        logger.info(f"Cached {self.name} access token (valid for {lifetime}s)")

    def clear(self) -> None:
        self.access_token = None
        self.expires_at = 0.0
