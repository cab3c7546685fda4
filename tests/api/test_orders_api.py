"""Tests for the customer routes: order history and checkout session creation."""

import pytest

from factories import FakeContentBackend, FakeStripeGateway
from storefront.core.auth import ClerkUser, require_auth
from storefront.core.exceptions import ContentBackendError, PaymentGatewayError
from storefront.services.catalog_service import MY_ORDERS_QUERY

pytestmark = pytest.mark.integration

PRODUCTS = [
    {"_id": "p1", "_type": "product", "name": "Canvas Tote", "price": 18.5},
    {"_id": "p2", "_type": "product", "name": "Cotton Cap", "price": 12, "description": "One size"},
    {"_id": "p3", "_type": "product", "name": "Unpriced Sample"},
]


def override_auth(user: ClerkUser):
    """Dependency override factory for require_auth."""

    async def _override():
        return user

    return _override


@pytest.fixture
def test_user():
    return ClerkUser(
        user_id="user_shopper",
        claims={"sub": "user_shopper", "email": "shopper@example.com", "name": "Sam Shopper"},
    )


@pytest.fixture
def authed_client(make_client, test_user):
    def _make(gateway, content, user=test_user):
        client = make_client(gateway, content)
        client.app.dependency_overrides[require_auth] = override_auth(user)
        return client

    return _make


class TestOrderHistory:
    def test_requires_auth(self, api_client):
        response = api_client.get("/api/orders")

        assert response.status_code == 401
        assert "debug_id" in response.json()

    def test_returns_callers_orders(self, authed_client):
        orders = [{"_id": "o2", "orderNumber": "n2"}, {"_id": "o1", "orderNumber": "n1"}]
        content = FakeContentBackend(results={'_type == "order"': orders})
        client = authed_client(FakeStripeGateway(), content)

        response = client.get("/api/orders")

        assert response.status_code == 200
        assert response.json() == orders
        assert content.queries == [(MY_ORDERS_QUERY, {"userId": "user_shopper"})]

    def test_backend_failure_returns_502(self, authed_client):
        client = authed_client(FakeStripeGateway(), FakeContentBackend(error=ContentBackendError("down")))

        response = client.get("/api/orders")

        assert response.status_code == 502
        assert response.json()["detail"] == "Error fetching orders"


class TestCheckout:
    def test_creates_session_with_metadata_for_webhook(self, authed_client):
        gateway = FakeStripeGateway()
        content = FakeContentBackend(results={"_id in $ids": PRODUCTS})
        client = authed_client(gateway, content)

        response = client.post(
            "/api/checkout",
            json={"items": [{"product_id": "p1", "quantity": 2}, {"product_id": "p2", "quantity": 1}]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["checkout_url"] == "https://checkout.stripe.com/c/pay/cs_test_new"
        assert body["session_id"] == "cs_test_new"

        params = gateway.checkout_params[0]
        assert params["mode"] == "payment"
        assert params["metadata"] == {
            "orderNumber": body["order_number"],
            "customerName": "Sam Shopper",
            "customerEmail": "shopper@example.com",
            "clerkUserId": "user_shopper",
        }
        assert params["customer_email"] == "shopper@example.com"
        assert "{CHECKOUT_SESSION_ID}" in params["success_url"]
        assert body["order_number"] in params["success_url"]
        assert params["cancel_url"].endswith("/basket")

        first, second = params["line_items"]
        assert first["quantity"] == 2
        assert first["price_data"]["unit_amount"] == 1850
        assert first["price_data"]["currency"] == "gbp"
        assert first["price_data"]["product_data"]["metadata"] == {"id": "p1"}
        assert second["price_data"]["unit_amount"] == 1200
        assert second["price_data"]["product_data"]["description"] == "One size"

    def test_unknown_product_returns_400(self, authed_client):
        gateway = FakeStripeGateway()
        client = authed_client(gateway, FakeContentBackend(results={"_id in $ids": PRODUCTS}))

        response = client.post("/api/checkout", json={"items": [{"product_id": "missing", "quantity": 1}]})

        assert response.status_code == 400
        assert "missing" in response.json()["detail"]
        assert gateway.checkout_params == []

    def test_unpriced_product_returns_400(self, authed_client):
        client = authed_client(FakeStripeGateway(), FakeContentBackend(results={"_id in $ids": PRODUCTS}))

        response = client.post("/api/checkout", json={"items": [{"product_id": "p3", "quantity": 1}]})

        assert response.status_code == 400

    def test_empty_basket_is_rejected(self, authed_client):
        client = authed_client(FakeStripeGateway(), FakeContentBackend())

        response = client.post("/api/checkout", json={"items": []})

        assert response.status_code == 422

    def test_gateway_failure_returns_502(self, authed_client):
        gateway = FakeStripeGateway(error=PaymentGatewayError("card network down"))
        client = authed_client(gateway, FakeContentBackend(results={"_id in $ids": PRODUCTS}))

        response = client.post("/api/checkout", json={"items": [{"product_id": "p1", "quantity": 1}]})

        assert response.status_code == 502

    def test_customer_without_email_gets_customer_creation(self, authed_client):
        gateway = FakeStripeGateway()
        anonymous = ClerkUser(user_id="user_noemail", claims={"sub": "user_noemail"})
        client = authed_client(gateway, FakeContentBackend(results={"_id in $ids": PRODUCTS}), user=anonymous)

        response = client.post("/api/checkout", json={"items": [{"product_id": "p1", "quantity": 1}]})

        assert response.status_code == 200
        params = gateway.checkout_params[0]
        assert params["customer_creation"] == "always"
        assert "customer_email" not in params
        assert params["metadata"]["customerName"] == "Unknown"
