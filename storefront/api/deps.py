"""FastAPI dependencies for the external collaborators.

Clients are created in the app lifespan and stored on ``app.state``; routes
receive them through these dependencies so tests can swap in fakes with
``app.dependency_overrides``.
"""

from fastapi import Depends, Request

from storefront.integrations.sanity import SanityClient
from storefront.integrations.stripe_gateway import StripeGateway
from storefront.services.order_service import OrderMaterializer


def get_payment_gateway(request: Request) -> StripeGateway:
    return request.app.state.payment_gateway


def get_content_client(request: Request) -> SanityClient:
    return request.app.state.content_client


def get_order_materializer(
    gateway: StripeGateway = Depends(get_payment_gateway),
    content: SanityClient = Depends(get_content_client),
) -> OrderMaterializer:
    return OrderMaterializer(gateway=gateway, content=content)
