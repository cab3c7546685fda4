"""Tests for app wiring: correlation IDs, error shapes and collaborator lifecycle."""

import uuid

import pytest
from fastapi.testclient import TestClient

from storefront.integrations.sanity import SanityClient
from storefront.integrations.stripe_gateway import StripeGateway
from storefront.main import create_app

pytestmark = pytest.mark.integration


def test_response_includes_correlation_id_header(api_client):
    response = api_client.get("/api/health")

    assert "x-request-id" in response.headers
    uuid.UUID(response.headers["x-request-id"])


def test_custom_correlation_id_echoed(api_client):
    response = api_client.get("/api/health", headers={"X-Request-ID": "custom-id-123"})

    assert response.headers["x-request-id"] == "custom-id-123"


def test_webhook_error_includes_correlation_id_header(api_client):
    response = api_client.post("/api/webhook", content=b"{}")

    assert response.status_code == 400
    assert "x-request-id" in response.headers
    assert set(response.json()) == {"error"}


def test_http_error_does_not_leak_internals(api_client):
    response = api_client.get("/api/orders")

    assert response.status_code == 401
    body = response.json()
    uuid.UUID(body["debug_id"])
    assert "traceback" not in response.text.lower()


def test_lifespan_creates_and_closes_collaborators():
    app = create_app()

    with TestClient(app) as client:
        assert isinstance(app.state.payment_gateway, StripeGateway)
        assert isinstance(app.state.content_client, SanityClient)
        assert client.get("/api/health").status_code == 200

    assert app.state.content_client._client.is_closed
