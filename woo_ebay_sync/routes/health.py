from fastapi import APIRouter, Depends

from woo_ebay_sync.core.config import Settings, get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Basic health check"""
    return {
        "status": "healthy",
        "service": "woo-ebay-sync",
        "ebay_env": settings.EBAY_ENV.value,
    }
