# tests/unit/cli/test_bulk_sync_cli.py
from unittest.mock import AsyncMock

import pytest
from click.testing import CliRunner

from woo_ebay_sync.cli.bulk_sync import cli, mask_token
from woo_ebay_sync.core.exceptions import ConfigurationError, EbayAPIError
from woo_ebay_sync.services.sync_service import SyncStats


@pytest.fixture(autouse=True)
def cli_settings(mocker, settings):
    mocker.patch("woo_ebay_sync.cli.bulk_sync.get_settings", return_value=settings)
    mocker.patch("woo_ebay_sync.cli.bulk_sync.configure_logging")
    return settings


@pytest.fixture
def run_sync(mocker):
    return mocker.patch(
        "woo_ebay_sync.cli.bulk_sync.run_bulk_sync",
        new_callable=AsyncMock,
        return_value=SyncStats(total=3, upserted=2, skipped=1, offers=2, published=2),
    )


def test_mask_token():
    assert mask_token("v^1.1#i^1#abcdefghijklmnop") == "v^1.1#i^1#ab..."
    assert mask_token("") == "(empty)"


def test_sync_prints_banner_and_summary(run_sync):
    result = CliRunner().invoke(cli, ["sync"])

    assert result.exit_code == 0
    assert "Woo -> eBay Bulk Sync" in result.output
    assert "Mode: LIVE" in result.output
    assert "Inventory upserted: 2" in result.output
    assert "Published: 2" in result.output


def test_sync_options(run_sync):
    result = CliRunner().invoke(cli, ["sync", "--publish", "--dry-run", "--page-size", "25", "--limit", "3"])

    assert result.exit_code == 0
    options = run_sync.await_args.args[1]
    assert options.publish is True
    assert options.create_offers is True
    assert options.dry_run is True
    assert options.page_size == 25
    assert options.limit == 3
    assert "Mode: DRY RUN" in result.output


def test_sync_page_size_out_of_range(run_sync):
    result = CliRunner().invoke(cli, ["sync", "--page-size", "500"])

    assert result.exit_code == 2
    run_sync.assert_not_called()


@pytest.mark.parametrize("error", [
    ConfigurationError("WOO_URL is required"),
    EbayAPIError("invalid_grant", status_code=400),
    RuntimeError("unexpected"),
])
def test_sync_fatal_error_exits_1(run_sync, error):
    run_sync.side_effect = error

    result = CliRunner().invoke(cli, ["sync", "--offers"])

    assert result.exit_code == 1


def test_check_auth_success(mocker):
    mocker.patch(
        "woo_ebay_sync.cli.bulk_sync.fetch_tokens",
        new_callable=AsyncMock,
        return_value=("app-token-1234567890", "user-token-1234567890"),
    )

    result = CliRunner().invoke(cli, ["check-auth"])

    assert result.exit_code == 0
    assert "Application token: app-token-12..." in result.output
    assert "User token: user-token-1..." in result.output
    assert "user-token-1234567890" not in result.output
    assert "eBay auth OK" in result.output


def test_check_auth_failure(mocker):
    mocker.patch(
        "woo_ebay_sync.cli.bulk_sync.fetch_tokens",
        new_callable=AsyncMock,
        side_effect=ConfigurationError("Missing EBAY_REFRESH_TOKEN"),
    )

    result = CliRunner().invoke(cli, ["check-auth"])

    assert result.exit_code == 1
