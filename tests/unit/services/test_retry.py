# tests/unit/services/test_retry.py
from unittest.mock import AsyncMock

import pytest

from woo_ebay_sync.core.exceptions import EbayAPIError, WooCommerceAPIError
from woo_ebay_sync.services.retry import is_retriable_error, with_retries


@pytest.fixture
def sleep(mocker):
    return mocker.patch("woo_ebay_sync.services.retry.asyncio.sleep", new_callable=AsyncMock)


def test_is_retriable_error():
    assert is_retriable_error(EbayAPIError("x", status_code=500)) is True
    assert is_retriable_error(EbayAPIError("x", status_code=503)) is True
    assert is_retriable_error(WooCommerceAPIError("x", status_code=429)) is True
    assert is_retriable_error(EbayAPIError("x", status_code=400)) is False
    assert is_retriable_error(EbayAPIError("x", status_code=401)) is False
    assert is_retriable_error(EbayAPIError("network down")) is False
    assert is_retriable_error(ValueError("x")) is False


@pytest.mark.asyncio
async def test_returns_first_success(sleep):
    operation = AsyncMock(return_value="ok")

    assert await with_retries(operation) == "ok"
    operation.assert_awaited_once()
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_retries_server_errors_then_succeeds(sleep):
    operation = AsyncMock(side_effect=[
        EbayAPIError("boom", status_code=500),
        EbayAPIError("slow down", status_code=429),
        "ok",
    ])

    result = await with_retries(operation, label="test call")

    assert result == "ok"
    assert operation.await_count == 3
    assert [call.args[0] for call in sleep.await_args_list] == pytest.approx([0.8, 1.6])


@pytest.mark.asyncio
async def test_backoff_is_capped(sleep):
    error = EbayAPIError("boom", status_code=503)
    operation = AsyncMock(side_effect=error)

    with pytest.raises(EbayAPIError) as exc_info:
        await with_retries(operation, tries=7)

    assert exc_info.value is error
    assert operation.await_count == 7
    assert [call.args[0] for call in sleep.await_args_list] == pytest.approx([0.8, 1.6, 3.2, 6.4, 8.0, 8.0])


@pytest.mark.asyncio
async def test_gives_up_after_default_tries(sleep):
    operation = AsyncMock(side_effect=EbayAPIError("boom", status_code=500))

    with pytest.raises(EbayAPIError):
        await with_retries(operation)

    assert operation.await_count == 5
    assert sleep.await_count == 4


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    EbayAPIError("bad request", status_code=400),
    EbayAPIError("network error"),
    ValueError("not an api error"),
])
async def test_terminal_errors_are_not_retried(sleep, error):
    operation = AsyncMock(side_effect=error)

    with pytest.raises(type(error)):
        await with_retries(operation)

    operation.assert_awaited_once()
    sleep.assert_not_awaited()
