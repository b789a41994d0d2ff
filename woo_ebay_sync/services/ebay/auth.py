"""
eBay authentication context.

Owns the application (client-credentials) and user (refresh-token) access
tokens for one process. Concurrent callers that find a token expired share a
single in-flight refresh instead of each hitting the token endpoint.
"""

import asyncio
import logging
from typing import Dict, Optional
from urllib.parse import urlencode

import httpx

from woo_ebay_sync.core.config import Settings
from woo_ebay_sync.core.enums import TokenKind
from woo_ebay_sync.core.exceptions import ConfigurationError, EbayAPIError
from woo_ebay_sync.services.ebay.token_manager import TokenCache
from woo_ebay_sync.services.retry import with_retries

logger = logging.getLogger(__name__)

TOKEN_PATH = "/identity/v1/oauth2/token"

APP_SCOPES = ["https://api.ebay.com/oauth/api_scope"]

USER_SCOPES = [
    "https://api.ebay.com/oauth/api_scope",
    "https://api.ebay.com/oauth/api_scope/sell.inventory",
    "https://api.ebay.com/oauth/api_scope/sell.account",
    "https://api.ebay.com/oauth/api_scope/sell.fulfillment",
    "https://api.ebay.com/oauth/api_scope/sell.marketing",
]


class EbayAuthContext:
    """
    Manages eBay OAuth tokens in memory.

    Usage:
        async with EbayAuthContext(settings) as auth:
            token = await auth.get_token(TokenKind.USER)
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http = http_client or httpx.AsyncClient(
            base_url=settings.ebay_base_url,
            timeout=settings.HTTP_TIMEOUT,
        )
        self._owns_http = http_client is None
        self._caches: Dict[TokenKind, TokenCache] = {
            TokenKind.APPLICATION: TokenCache("application"),
            TokenKind.USER: TokenCache("user"),
        }
        self._pending: Dict[TokenKind, asyncio.Future] = {}

        logger.debug(f"EbayAuthContext initialized. Environment: {settings.EBAY_ENV.value}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    async def aclose(self):
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self, kind: TokenKind = TokenKind.USER, force_refresh: bool = False) -> str:
        """
        Get a valid access token, refreshing if necessary.

        Args:
            kind: Application or user token
            force_refresh: Ignore the cached token (used after a 401)
        """
        if not force_refresh:
            cached = self._caches[kind].get()
            if cached:
                return cached
        return await self.refresh(kind)

    async def refresh(self, kind: TokenKind) -> str:
        """Refresh a token, joining any refresh already in flight for the same kind"""
        pending = self._pending.get(kind)
        if pending is None:
            pending = asyncio.ensure_future(self._request_token(kind))
            self._pending[kind] = pending

            def _clear(done: asyncio.Future, kind: TokenKind = kind):
                if self._pending.get(kind) is done:
                    del self._pending[kind]

            pending.add_done_callback(_clear)
        else:
            logger.debug(f"Joining in-flight {kind.value} token refresh")
        return await pending

    def clear_tokens(self):
        """Clear all tokens from memory"""
        for cache in self._caches.values():
            cache.clear()

    def _require_client_credentials(self):
        if not self.settings.EBAY_CLIENT_ID or not self.settings.EBAY_CLIENT_SECRET:
            raise ConfigurationError(
                "Missing EBAY_CLIENT_ID / EBAY_CLIENT_SECRET. Please check your .env file."
            )

    def _token_form(self, kind: TokenKind) -> Dict[str, str]:
        if kind == TokenKind.APPLICATION:
            return {
                "grant_type": "client_credentials",
                "scope": " ".join(APP_SCOPES),
            }
        if not self.settings.EBAY_REFRESH_TOKEN:
            raise ConfigurationError("Missing EBAY_REFRESH_TOKEN. Please check your .env file.")
        return {
            "grant_type": "refresh_token",
            "refresh_token": self.settings.EBAY_REFRESH_TOKEN,
            "scope": " ".join(USER_SCOPES),
        }

    async def _post_token_form(self, form: Dict[str, str], action: str) -> Dict:
        auth = httpx.BasicAuth(self.settings.EBAY_CLIENT_ID, self.settings.EBAY_CLIENT_SECRET)

        async def _post() -> Dict:
            try:
                response = await self._http.post(
                    TOKEN_PATH,
                    data=form,
                    auth=auth,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
            except httpx.RequestError as e:
                logger.error(f"Network error during {action}: {str(e)}")
                raise EbayAPIError(f"Network error during {action}: {str(e)}")

            if response.status_code != 200:
                if "invalid_grant" in response.text:
                    logger.error("eBay rejected the grant; the refresh token or code is invalid")
                raise EbayAPIError.from_response(response, action)
            return response.json()

        return await with_retries(_post, label=action)

    async def _request_token(self, kind: TokenKind) -> str:
        self._require_client_credentials()
        form = self._token_form(kind)

        logger.info(f"Refreshing eBay {kind.value} access token")
        token_data = await self._post_token_form(form, f"{kind.value} token refresh")

        access_token = token_data["access_token"]
        self._caches[kind].store(access_token, token_data.get("expires_in", 7200))
        return access_token

    def authorization_url(self) -> str:
        """Generate the URL a seller visits to grant user consent"""
        if not self.settings.EBAY_RU_NAME:
            raise ConfigurationError("EBAY_RU_NAME is required for authorization URL generation")

        params = {
            "client_id": self.settings.EBAY_CLIENT_ID,
            "response_type": "code",
            "redirect_uri": self.settings.EBAY_RU_NAME,
            "scope": " ".join(USER_SCOPES),
        }
        return f"{self.settings.ebay_auth_url}?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> Dict:
        """
        Exchange an authorization code for a refresh token.
        The refresh token should be stored in the environment as EBAY_REFRESH_TOKEN.

        Returns:
            Dict with refresh_token and its lifetime in days
        """
        self._require_client_credentials()
        token_response = await self._post_token_form(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.settings.EBAY_RU_NAME,
            },
            "authorization code exchange",
        )

        access_token = token_response.get("access_token")
        if access_token:
            self._caches[TokenKind.USER].store(access_token, token_response.get("expires_in", 7200))

        refresh_expires_in = token_response.get("refresh_token_expires_in")
        days_until_expiry = int(refresh_expires_in / 86400) if refresh_expires_in else None

        logger.info("Successfully exchanged authorization code for a refresh token")
        return {
            "refresh_token": token_response.get("refresh_token"),
            "refresh_token_expires_in_days": days_until_expiry,
            "message": "IMPORTANT: Save the refresh_token to your .env file as EBAY_REFRESH_TOKEN",
        }
