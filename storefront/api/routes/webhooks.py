"""Payment processor webhook: checkout completion creates the order document."""

import structlog
from fastapi import APIRouter, Depends, Request

from storefront.api.deps import get_order_materializer, get_payment_gateway
from storefront.core.config import get_settings
from storefront.integrations.stripe_gateway import StripeGateway
from storefront.services.order_service import OrderMaterializer, dispatch_event, verify_webhook

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    gateway: StripeGateway = Depends(get_payment_gateway),
    materializer: OrderMaterializer = Depends(get_order_materializer),
):
    """Handle a Stripe webhook delivery.

    Errors are raised as ``WebhookError`` subclasses and rendered as
    ``{"error": ...}`` by the app's exception handler: 400 for signature,
    configuration and metadata problems, 500 when the order could not be
    created (Stripe then redelivers).
    """
    settings = get_settings()
    body = await request.body()

    event = verify_webhook(
        gateway,
        body,
        request.headers.get("stripe-signature"),
        settings.stripe_webhook_secret,
    )

    logger.info("stripe_webhook_received", event_id=event.id, event_type=event.type)

    await dispatch_event(event, materializer)

    return {"received": True}
