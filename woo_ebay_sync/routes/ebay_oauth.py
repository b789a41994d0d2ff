# woo_ebay_sync/routes/ebay_oauth.py
import logging
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse

from woo_ebay_sync.core.config import Settings, get_settings
from woo_ebay_sync.core.exceptions import ConfigurationError, EbayAPIError
from woo_ebay_sync.services.ebay.auth import EbayAuthContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ebay/oauth", tags=["ebay"])


async def get_auth_context(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[EbayAuthContext, None]:
    """Dependency for a request-scoped eBay auth context."""
    async with EbayAuthContext(settings) as auth:
        yield auth


@router.get("/authorize")
async def authorize(auth: EbayAuthContext = Depends(get_auth_context)):
    """Send the seller to eBay's consent page"""
    try:
        return RedirectResponse(auth.authorization_url())
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/callback")
async def oauth_callback(
    code: Optional[str] = None,
    auth: EbayAuthContext = Depends(get_auth_context),
):
    """eBay redirects here after consent; swap the code for a refresh token"""
    if not code:
        raise HTTPException(status_code=400, detail="Missing authorization code")

    try:
        return await auth.exchange_authorization_code(code)
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except EbayAPIError as e:
        logger.error(f"Authorization code exchange failed: {e.error_message}")
        raise HTTPException(status_code=502, detail=f"eBay rejected the authorization code: {e.error_message}")
