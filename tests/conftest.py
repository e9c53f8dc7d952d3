"""Shared fixtures: settings, an in-memory processor and HTTP clients."""

import pytest
from starlette.testclient import TestClient

from intentpay.services.payment_intent.main import create_app
from tests.helpers.fakes import LIVE_SECRET_KEY, FakeProcessor, make_settings


@pytest.fixture
def processor():
    return FakeProcessor()


@pytest.fixture
def test_settings():
    return make_settings()


@pytest.fixture
def live_settings():
    return make_settings(stripe_secret_key=LIVE_SECRET_KEY)


@pytest.fixture
def client(test_settings, processor):
    """HTTP client for a test-mode app backed by the fake processor."""

    app = create_app(test_settings, processor)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def live_client(live_settings, processor):
    """Same as `client` but configured with a live secret key."""

    app = create_app(live_settings, processor)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
