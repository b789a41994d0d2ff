#!/usr/bin/env python
"""Start the notification/OAuth service with the port from the environment."""
import os

import uvicorn

if __name__ == "__main__":
    # Get port from environment, default to 8000
    port = int(os.environ.get("PORT", 8000))

    print(f"Starting woo-ebay-sync service on port {port}")

    uvicorn.run(
        "woo_ebay_sync.main:app",
        host="0.0.0.0",
        port=port,
        log_level="info"
    )
