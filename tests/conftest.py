"""Shared pytest fixtures."""
import sys
sys.dont_write_bytecode = True

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from socialdesk.api.factory import create_app  # noqa: E402
from socialdesk.infra.interactions import InMemoryInteractionStore  # noqa: E402

from helpers import TEST_JWT_SECRET  # noqa: E402

_ENV_VARS = (
    "WEBHOOK_VERIFY_TOKEN",
    "META_APP_SECRET",
    "WHATSAPP_PHONE_NUMBER_ID",
    "WHATSAPP_ACCESS_TOKEN",
    "META_GRAPH_API_VERSION",
    "JWT_SECRET",
    "WEBHOOK_ASYNC_DISPATCH",
    "INTERACTION_STORE",
    "FACEBOOK_PAGE_ID",
    "FACEBOOK_ACCESS_TOKEN",
    "INSTAGRAM_BUSINESS_ACCOUNT_ID",
    "INSTAGRAM_ACCESS_TOKEN",
    "META_PIXEL_ID",
    "META_PIXEL_ACCESS_TOKEN",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Start every test from an unconfigured environment."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store():
    return InMemoryInteractionStore()


@pytest.fixture
def sender():
    """Mock send primitive returning a provider message id."""
    mock_sender = MagicMock(return_value="wamid.OUT000001")
    return mock_sender


@pytest.fixture
def jwt_secret(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    return TEST_JWT_SECRET


@pytest.fixture
def client(store, sender):
    """Test client with in-memory store and mock sender."""
    app = create_app(store=store, sender=sender)
    return TestClient(app)
