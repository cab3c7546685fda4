from fastapi import APIRouter

from storefront.api.routes import catalog, health, orders, webhooks

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(catalog.router, tags=["catalog"])
api_router.include_router(orders.router, tags=["orders"])
api_router.include_router(webhooks.router, tags=["webhooks"])
