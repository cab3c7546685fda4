"""Checkout completion -> order document.

The webhook flow has three steps:

1. ``verify_webhook``: signature check over the raw body, yielding a typed event
2. ``dispatch_event``: only ``checkout.session.completed`` goes further
3. ``OrderMaterializer.materialize``: line items -> order document -> create

There is no deduplication on the session ID: a redelivered event creates a
second order document.
"""

import uuid
from datetime import UTC, datetime
from typing import Any, Protocol

import structlog
from pydantic import ValidationError

from storefront.core.exceptions import (
    ConfigurationError,
    InvalidSignature,
    MalformedMetadata,
    MaterializationFailure,
)
from storefront.core.money import from_minor_units
from storefront.schemas.order import (
    CHECKOUT_SESSION_COMPLETED,
    CheckoutMetadata,
    DocumentReference,
    LineItem,
    OrderDocument,
    OrderProduct,
    WebhookEvent,
)

logger = structlog.get_logger(__name__)


class PaymentGateway(Protocol):
    def construct_event(self, payload: bytes, sig_header: str, secret: str) -> WebhookEvent: ...

    async def list_line_items(self, session_id: str) -> list[LineItem]: ...


class ContentBackend(Protocol):
    async def create(self, document: dict[str, Any]) -> dict[str, Any]: ...


def verify_webhook(
    gateway: PaymentGateway,
    payload: bytes,
    sig_header: str | None,
    secret: str | None,
) -> WebhookEvent:
    """Verify a webhook delivery and return the parsed event.

    Raises:
        InvalidSignature: header missing or signature does not match the body
        ConfigurationError: no webhook secret configured
    """
    if not sig_header:
        raise InvalidSignature("no signature")

    if not secret:
        logger.error("stripe_webhook_secret_missing")
        raise ConfigurationError("stripe webhook secret is not set")

    try:
        return gateway.construct_event(payload, sig_header, secret)
    except InvalidSignature as exc:
        logger.warning("stripe_webhook_signature_invalid", error=exc.message)
        raise


def parse_checkout_metadata(session: dict[str, Any]) -> CheckoutMetadata:
    try:
        return CheckoutMetadata.model_validate(session.get("metadata") or {})
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        raise MalformedMetadata(
            f"invalid checkout metadata: {', '.join(fields)}",
            errors=exc.errors(include_url=False),
        ) from exc


def build_order_products(line_items: list[LineItem]) -> list[OrderProduct]:
    return [
        OrderProduct(
            _key=uuid.uuid4().hex,
            product=DocumentReference(_ref=item.product_id),
            quantity=item.quantity or 0,
        )
        for item in line_items
    ]


def build_order_document(
    session: dict[str, Any],
    metadata: CheckoutMetadata,
    line_items: list[LineItem],
    now: datetime | None = None,
) -> OrderDocument:
    """Map a completed checkout session and its line items to an order document.

    Amounts arrive in minor units; ``orderDate`` is the materialization time,
    not the session's creation time.
    """
    total_details = session.get("total_details") or {}
    return OrderDocument(
        orderNumber=metadata.order_number,
        stripeCheckoutSessionId=session["id"],
        stripePaymentIntentId=session.get("payment_intent"),
        customerName=metadata.customer_name,
        stripeCustomerId=session.get("customer"),
        clerkUserId=metadata.clerk_user_id,
        email=metadata.customer_email,
        currency=session.get("currency"),
        amountDiscount=from_minor_units(total_details.get("amount_discount")),
        products=build_order_products(line_items),
        totalPrice=from_minor_units(session.get("amount_total")),
        status="paid",
        orderDate=now or datetime.now(UTC),
    )


class OrderMaterializer:
    """Creates the order document for a completed checkout session."""

    def __init__(self, gateway: PaymentGateway, content: ContentBackend):
        self.gateway = gateway
        self.content = content

    async def materialize(self, session: Any) -> dict[str, Any]:
        """Fetch line items, build the order document and persist it.

        Raises:
            MalformedMetadata: session is not an object or its metadata fails
                validation (nothing fetched)
            MaterializationFailure: line-item fetch or document create failed
        """
        if not isinstance(session, dict):
            raise MalformedMetadata(f"checkout session must be an object, got {type(session).__name__}")

        session_id = session.get("id")
        if not session_id:
            raise MalformedMetadata("checkout session has no id")

        metadata = parse_checkout_metadata(session)

        try:
            line_items = await self.gateway.list_line_items(session_id)
            document = build_order_document(session, metadata, line_items)
            order = await self.content.create(document.to_document())
        except Exception as exc:
            logger.error(
                "order_materialization_failed",
                session_id=session_id,
                order_number=metadata.order_number,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise MaterializationFailure(session_id, exc) from exc

        logger.info(
            "order_materialized",
            session_id=session_id,
            order_number=metadata.order_number,
            order_id=order.get("_id"),
            line_items=len(line_items),
        )
        return order


async def dispatch_event(event: WebhookEvent, materializer: OrderMaterializer) -> dict[str, Any] | None:
    """Route a verified event. Returns the created order, or None when ignored."""
    if event.type != CHECKOUT_SESSION_COMPLETED:
        logger.info("stripe_webhook_ignored", event_id=event.id, event_type=event.type)
        return None

    return await materializer.materialize(event.data_object)
