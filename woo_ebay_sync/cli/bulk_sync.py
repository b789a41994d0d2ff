# woo_ebay_sync/cli/bulk_sync.py
import asyncio
import logging
import sys
from datetime import datetime

import click

from woo_ebay_sync.core.config import get_settings
from woo_ebay_sync.core.enums import TokenKind
from woo_ebay_sync.core.exceptions import BaseServiceError, EbayAPIError
from woo_ebay_sync.core.logging_config import configure_logging
from woo_ebay_sync.services.ebay.auth import EbayAuthContext
from woo_ebay_sync.services.sync_service import SyncOptions, run_bulk_sync

logger = logging.getLogger(__name__)


def mask_token(token: str, visible: int = 12) -> str:
    if not token:
        return "(empty)"
    return f"{token[:visible]}..."


@click.group()
def cli():
    """WooCommerce -> eBay inventory sync"""
    pass


@cli.command()
@click.option('--offers', 'create_offers', is_flag=True, help='Create or update an offer per SKU')
@click.option('--publish', is_flag=True, help='Publish offers (implies --offers)')
@click.option('--dry-run', is_flag=True, help='Log intended eBay writes without making them')
@click.option('--page-size', default=100, type=click.IntRange(1, 100), show_default=True,
              help='WooCommerce products per page')
@click.option('--limit', default=0, type=click.IntRange(min=0), show_default=True,
              help='Stop after this many products (0 = all)')
@click.option('--verbose', is_flag=True, help='Debug logging')
def sync(create_offers, publish, dry_run, page_size, limit, verbose):
    """Push WooCommerce products to eBay as inventory items and offers"""
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.LOG_LEVEL)

    options = SyncOptions(
        create_offers=create_offers,
        publish=publish,
        dry_run=dry_run,
        page_size=page_size,
        limit=limit,
    )

    click.echo("=== Woo -> eBay Bulk Sync ===")
    click.echo(f"Env: {settings.EBAY_ENV.value}  Marketplace: {settings.EBAY_MARKETPLACE_ID}  "
               f"Currency: {settings.EBAY_CURRENCY}")
    click.echo(f"Mode: {'DRY RUN' if options.dry_run else 'LIVE'}  "
               f"Offers: {'ON' if options.create_offers else 'OFF'}  "
               f"Publish: {'ON' if options.publish else 'OFF'}")

    start_time = datetime.now()
    try:
        stats = asyncio.run(run_bulk_sync(settings, options))
    except BaseServiceError as e:
        logger.error(f"Sync aborted: {str(e)}")
        click.echo(f"Sync failed: {str(e)}", err=True)
        sys.exit(1)
    except Exception as e:
        logger.exception("Error during sync")
        click.echo(f"Sync failed: {str(e)}", err=True)
        sys.exit(1)

    click.echo(f"\nSync completed in {datetime.now() - start_time}")
    for line in stats.summary_lines():
        click.echo(line)


async def fetch_tokens(settings):
    async with EbayAuthContext(settings) as auth:
        app_token = await auth.get_token(TokenKind.APPLICATION)
        user_token = await auth.get_token(TokenKind.USER)
    return app_token, user_token


@cli.command('check-auth')
def check_auth():
    """Verify eBay credentials by fetching application and user tokens"""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    click.echo(f"Environment: {settings.EBAY_ENV.value} ({settings.ebay_base_url})")
    click.echo(f"Client ID: {'set' if settings.EBAY_CLIENT_ID else 'MISSING'}")
    click.echo(f"Client secret: {'set' if settings.EBAY_CLIENT_SECRET else 'MISSING'}")
    click.echo(f"Refresh token: {'set' if settings.EBAY_REFRESH_TOKEN else 'MISSING'}")

    try:
        app_token, user_token = asyncio.run(fetch_tokens(settings))
    except EbayAPIError as e:
        click.echo(f"eBay rejected the credentials: {e.error_message}", err=True)
        if settings.is_sandbox:
            click.echo("Sandbox credentials only work against the sandbox; check EBAY_ENV.", err=True)
        sys.exit(1)
    except BaseServiceError as e:
        click.echo(f"Auth check failed: {str(e)}", err=True)
        sys.exit(1)

    click.echo(f"Application token: {mask_token(app_token)}")
    click.echo(f"User token: {mask_token(user_token)}")
    click.echo("eBay auth OK")


if __name__ == '__main__':
    cli()
