# woo_ebay_sync/routes/ebay_notifications.py
"""
eBay Marketplace Account Deletion notifications.

eBay validates the endpoint with a GET challenge before it starts sending
POST notifications. The sync keeps no buyer data, so notifications are only
acknowledged.
"""

import base64
import hashlib
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from woo_ebay_sync.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ebay"])


def challenge_response(challenge_code: str, verification_token: str, endpoint_url: str) -> str:
    """base64(sha256(challengeCode + verificationToken + endpoint))"""
    digest = hashlib.sha256(
        (challenge_code + verification_token + endpoint_url).encode("utf-8")
    ).digest()
    return base64.b64encode(digest).decode("ascii")


@router.get("/ebay-deletion-callback")
async def deletion_challenge(
    challenge_code: Optional[str] = None,
    settings: Settings = Depends(get_settings),
):
    if not challenge_code:
        raise HTTPException(status_code=400, detail="Missing challenge_code")

    logger.info("Answering eBay deletion endpoint challenge")
    return {
        "challengeResponse": challenge_response(
            challenge_code,
            settings.EBAY_VERIFICATION_TOKEN,
            settings.EBAY_DELETION_ENDPOINT_URL,
        )
    }


@router.post("/ebay-deletion-callback", status_code=204)
async def deletion_notification(request: Request):
    body = await request.body()
    logger.info(f"Received eBay account deletion notification ({len(body)} bytes)")
    return Response(status_code=204)
