"""Stripe gateway: the subset of the Stripe API the storefront consumes."""

import json
from typing import Any

import stripe
import structlog

from storefront.core.exceptions import InvalidSignature, PaymentGatewayError
from storefront.schemas.order import LineItem, WebhookEvent

logger = structlog.get_logger(__name__)


def _line_item_from_stripe(item: Any) -> LineItem:
    """Flatten an expanded Stripe line item to (product document id, quantity).

    ``price.product`` is only an object when expanded; an unexpanded product
    is a bare ID string and carries no metadata.
    """
    price = getattr(item, "price", None)
    product = getattr(price, "product", None)
    metadata = getattr(product, "metadata", None)
    product_id = metadata.get("id") if metadata else None
    return LineItem(product_id=product_id, quantity=getattr(item, "quantity", None))


class StripeGateway:
    """Stripe API access bound to one secret key.

    The key is passed per call rather than assigned to ``stripe.api_key`` so
    separate gateway instances never share module state.
    """

    def __init__(self, api_key: str):
        self.api_key = api_key

    def construct_event(self, payload: bytes, sig_header: str, secret: str) -> WebhookEvent:
        """Verify the signature header over the raw payload and parse the event.

        Raises:
            InvalidSignature: signature mismatch, stale timestamp or unparseable payload
        """
        try:
            stripe.WebhookSignature.verify_header(
                payload.decode("utf-8"),
                sig_header,
                secret,
                stripe.Webhook.DEFAULT_TOLERANCE,
            )
        except stripe.SignatureVerificationError as exc:
            raise InvalidSignature(f"webhook error {exc}") from exc
        except UnicodeDecodeError as exc:
            raise InvalidSignature("webhook error payload is not valid UTF-8") from exc

        try:
            return WebhookEvent.model_validate(json.loads(payload))
        except ValueError as exc:
            raise InvalidSignature(f"webhook error invalid payload: {exc}") from exc

    async def list_line_items(self, session_id: str) -> list[LineItem]:
        """List a checkout session's line items with ``price.product`` expanded."""
        try:
            line_items = await stripe.checkout.Session.list_line_items_async(
                session_id,
                api_key=self.api_key,
                expand=["data.price.product"],
                limit=100,
            )
        except stripe.StripeError as exc:
            raise PaymentGatewayError(f"Failed to list line items for {session_id}: {exc}") from exc

        return [_line_item_from_stripe(item) for item in line_items.data]

    async def create_checkout_session(self, **params: Any) -> Any:
        """Create a hosted Checkout session; returns the Stripe session object."""
        try:
            return await stripe.checkout.Session.create_async(api_key=self.api_key, **params)
        except stripe.StripeError as exc:
            raise PaymentGatewayError(f"Failed to create checkout session: {exc}") from exc
