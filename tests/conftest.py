"""Shared test fixtures for all test groups."""

import os

# Set before any storefront import: get_settings() is cached on first use.
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("SANITY_PROJECT_ID", "testproj")
os.environ.setdefault("SANITY_API_TOKEN", "sk_sanity_test")
os.environ.setdefault("CLERK_PUBLISHABLE_KEY", "pk_test_c3VwZXJiLXRpY2stNDUuY2xlcmsuYWNjb3VudHMuZGV2JA")

import pytest

from factories import FakeContentBackend, FakeStripeGateway
from storefront.core.exceptions import ContentBackendError
from storefront.schemas.order import LineItem


@pytest.fixture
def fake_gateway():
    return FakeStripeGateway(line_items=[LineItem(product_id="p1", quantity=2)])


@pytest.fixture
def fake_content():
    return FakeContentBackend()


@pytest.fixture
def failing_content():
    return FakeContentBackend(error=ContentBackendError("connection reset by peer"))


@pytest.fixture
def make_client():
    """Factory for a TestClient over the real app with collaborators replaced by fakes."""
    from fastapi.testclient import TestClient

    from storefront.api.deps import get_content_client, get_payment_gateway
    from storefront.main import create_app

    clients = []

    def _make(gateway, content):
        app = create_app()
        app.dependency_overrides[get_payment_gateway] = lambda: gateway
        app.dependency_overrides[get_content_client] = lambda: content
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def api_client(make_client, fake_gateway, fake_content):
    return make_client(fake_gateway, fake_content)
