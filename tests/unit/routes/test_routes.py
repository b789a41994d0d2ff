# tests/unit/routes/test_routes.py
import base64
import hashlib
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from woo_ebay_sync.core.config import get_settings
from woo_ebay_sync.core.exceptions import EbayAPIError
from woo_ebay_sync.main import create_app
from woo_ebay_sync.routes.ebay_oauth import get_auth_context


@pytest.fixture
def auth():
    auth = MagicMock()
    auth.exchange_authorization_code = AsyncMock(return_value={
        "refresh_token": "v^1.1#refresh",
        "refresh_token_expires_in_days": 547,
        "message": "IMPORTANT: Save the refresh_token to your .env file as EBAY_REFRESH_TOKEN",
    })
    auth.authorization_url.return_value = "https://auth.sandbox.ebay.com/oauth2/authorize?client_id=x"
    return auth


@pytest.fixture
def client(settings, auth):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_auth_context] = lambda: auth
    return TestClient(app)


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["ebay_env"] == "sandbox"

"""
1. Account deletion notifications
"""

def test_deletion_challenge(client, settings):
    response = client.get("/ebay-deletion-callback", params={"challenge_code": "abc123"})

    expected = base64.b64encode(hashlib.sha256(
        ("abc123" + settings.EBAY_VERIFICATION_TOKEN + settings.EBAY_DELETION_ENDPOINT_URL).encode()
    ).digest()).decode()
    assert response.status_code == 200
    assert response.json() == {"challengeResponse": expected}


def test_deletion_challenge_requires_code(client):
    assert client.get("/ebay-deletion-callback").status_code == 400


def test_deletion_notification_acknowledged(client):
    response = client.post("/ebay-deletion-callback", json={
        "metadata": {"topic": "MARKETPLACE_ACCOUNT_DELETION"},
        "notification": {"data": {"username": "buyer1", "userId": "u1"}},
    })

    assert response.status_code == 204

"""
2. OAuth consent
"""

def test_oauth_callback_exchanges_code(client, auth):
    response = client.get("/ebay/oauth/callback", params={"code": "auth-code-1"})

    assert response.status_code == 200
    assert response.json()["refresh_token"] == "v^1.1#refresh"
    auth.exchange_authorization_code.assert_awaited_once_with("auth-code-1")


def test_oauth_callback_requires_code(client, auth):
    assert client.get("/ebay/oauth/callback").status_code == 400
    auth.exchange_authorization_code.assert_not_awaited()


def test_oauth_callback_rejected_by_ebay(client, auth):
    auth.exchange_authorization_code.side_effect = EbayAPIError(
        "Failed to authorization code exchange: HTTP 400",
        status_code=400,
        errors=[{"message": "invalid_grant"}],
    )

    response = client.get("/ebay/oauth/callback", params={"code": "expired"})

    assert response.status_code == 502


def test_oauth_authorize_redirects(client):
    response = client.get("/ebay/oauth/authorize", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"].startswith("https://auth.sandbox.ebay.com/oauth2/authorize")
