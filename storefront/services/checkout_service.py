"""Hosted checkout session creation from a customer's basket."""

import uuid
from typing import Any, Protocol
from urllib.parse import quote

import structlog

from storefront.core.auth import ClerkUser
from storefront.core.money import to_minor_units
from storefront.schemas.catalog import BasketItem, CheckoutResponse
from storefront.services.catalog_service import ContentQuery, get_products_by_ids

logger = structlog.get_logger(__name__)


class CheckoutGateway(Protocol):
    async def create_checkout_session(self, **params: Any) -> Any: ...


class InvalidBasket(ValueError):
    """Raised when a basket references unknown or unpriced products."""


def build_line_items(items: list[BasketItem], products: dict[str, dict], currency: str) -> list[dict]:
    line_items = []
    missing = []
    for item in items:
        product = products.get(item.product_id)
        if product is None or product.get("price") is None:
            missing.append(item.product_id)
            continue

        product_data: dict[str, Any] = {
            "name": product.get("name") or "Unnamed product",
            "metadata": {"id": product["_id"]},
        }
        if isinstance(product.get("description"), str) and product["description"]:
            product_data["description"] = product["description"]

        line_items.append(
            {
                "price_data": {
                    "currency": currency,
                    "unit_amount": to_minor_units(product["price"]),
                    "product_data": product_data,
                },
                "quantity": item.quantity,
            }
        )

    if missing:
        raise InvalidBasket(f"Unknown or unpriced products: {', '.join(missing)}")
    return line_items


def build_metadata(user: ClerkUser, order_number: str) -> dict[str, str]:
    """Session metadata read back by the webhook when the order is materialized."""
    return {
        "orderNumber": order_number,
        "customerName": user.full_name or "Unknown",
        "customerEmail": user.email or "Unknown",
        "clerkUserId": user.user_id,
    }


async def create_checkout_session(
    gateway: CheckoutGateway,
    content: ContentQuery,
    user: ClerkUser,
    items: list[BasketItem],
    frontend_url: str,
    currency: str,
) -> CheckoutResponse:
    """Create a Stripe Checkout session for the basket and return its URL.

    Raises:
        InvalidBasket: a basket item has no matching priced product
        ContentBackendError / PaymentGatewayError: collaborator failure
    """
    products = await get_products_by_ids(content, [item.product_id for item in items])
    line_items = build_line_items(items, products, currency)

    order_number = str(uuid.uuid4())
    metadata = build_metadata(user, order_number)

    params: dict[str, Any] = {
        "mode": "payment",
        "line_items": line_items,
        "metadata": metadata,
        "allow_promotion_codes": True,
        "success_url": (
            f"{frontend_url}/success?session_id={{CHECKOUT_SESSION_ID}}&orderNumber={quote(order_number)}"
        ),
        "cancel_url": f"{frontend_url}/basket",
    }
    if user.email:
        params["customer_email"] = user.email
    else:
        params["customer_creation"] = "always"

    session = await gateway.create_checkout_session(**params)

    logger.info(
        "checkout_session_created",
        session_id=session.id,
        order_number=order_number,
        line_items=len(line_items),
        user_id=user.user_id,
    )
    return CheckoutResponse(checkout_url=session.url, session_id=session.id, order_number=order_number)
