"""Customer routes: order history and checkout."""

import structlog
from fastapi import APIRouter, Depends, HTTPException

from storefront.api.deps import get_content_client, get_payment_gateway
from storefront.core.auth import ClerkUser, require_auth
from storefront.core.config import get_settings
from storefront.core.exceptions import ContentBackendError, PaymentGatewayError
from storefront.integrations.sanity import SanityClient
from storefront.integrations.stripe_gateway import StripeGateway
from storefront.schemas.catalog import CheckoutRequest, CheckoutResponse
from storefront.services import catalog_service
from storefront.services.checkout_service import InvalidBasket, create_checkout_session

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/orders")
async def list_my_orders(
    user: ClerkUser = Depends(require_auth),
    content: SanityClient = Depends(get_content_client),
) -> list[dict]:
    """Orders placed by the signed-in customer, newest first."""
    try:
        return await catalog_service.get_my_orders(content, user.user_id)
    except ContentBackendError as exc:
        logger.error("fetch_orders_failed", user_id=user.user_id, error=str(exc))
        raise HTTPException(status_code=502, detail="Error fetching orders")


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    body: CheckoutRequest,
    user: ClerkUser = Depends(require_auth),
    gateway: StripeGateway = Depends(get_payment_gateway),
    content: SanityClient = Depends(get_content_client),
):
    """Create a hosted checkout session for the basket and return its URL."""
    settings = get_settings()
    try:
        return await create_checkout_session(
            gateway,
            content,
            user,
            body.items,
            frontend_url=settings.frontend_url,
            currency=settings.stripe_currency,
        )
    except InvalidBasket as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except (ContentBackendError, PaymentGatewayError) as exc:
        logger.error("checkout_session_failed", user_id=user.user_id, error=str(exc), error_type=type(exc).__name__)
        raise HTTPException(status_code=502, detail="Error creating checkout session")
