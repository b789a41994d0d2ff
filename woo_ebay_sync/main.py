# woo_ebay_sync/main.py

from fastapi import FastAPI

from woo_ebay_sync.core.config import get_settings
from woo_ebay_sync.core.logging_config import configure_logging
from woo_ebay_sync.routes import ebay_notifications, ebay_oauth, health


def create_app() -> FastAPI:
    configure_logging(get_settings().LOG_LEVEL)

    app = FastAPI(title="Woo -> eBay Sync")
    app.include_router(health.router)
    app.include_router(ebay_notifications.router)
    app.include_router(ebay_oauth.router)
    return app


app = create_app()
