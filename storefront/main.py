"""Storefront backend: FastAPI application entry point."""

import uuid
from contextlib import asynccontextmanager

# configure_logging must run before the other app imports: structlog caches
# loggers on first use.
from storefront.core.config import get_settings as _get_settings_early
from storefront.core.logging import configure_logging

_early_settings = _get_settings_early()
configure_logging(debug=_early_settings.debug)

import structlog

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.routes import api_router
from storefront.core.config import get_settings
from storefront.core.exceptions import WebhookError
from storefront.integrations.sanity import SanityClient
from storefront.integrations.stripe_gateway import StripeGateway
from storefront.middleware.correlation import get_correlation_id, setup_correlation_middleware

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the collaborator clients on startup and close them on shutdown."""
    settings = get_settings()
    logger.info("startup_begin", app_name=settings.app_name, debug=settings.debug)

    if not settings.stripe_webhook_secret:
        logger.warning("stripe_webhook_secret_missing", action="webhook_deliveries_will_be_rejected")

    app.state.payment_gateway = StripeGateway(api_key=settings.stripe_secret_key)
    app.state.content_client = SanityClient.from_settings(settings)
    logger.info(
        "content_client_initialized",
        project_id=settings.sanity_project_id,
        dataset=settings.sanity_dataset,
    )

    yield

    logger.info("shutdown_begin")
    await app.state.content_client.aclose()
    logger.info("shutdown_complete")


async def webhook_exception_handler(request: Request, exc: WebhookError) -> JSONResponse:
    """Render webhook failures as ``{"error": message}`` with the error's status.

    The payload goes back to the payment processor, not to an end user.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "webhook_error",
        status_code=exc.status_code,
        error=exc.message,
        error_type=type(exc).__name__,
        correlation_id=get_correlation_id(),
        path=request.url.path,
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Global exception handler for HTTPException with debug_id tracking.

    Logs errors server-side with full context, returns sanitized response to client.
    """
    debug_id = str(uuid.uuid4())

    logger.error(
        "http_exception",
        status_code=exc.status_code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        user_id=getattr(request.state, "user_id", None),
        detail=exc.detail,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "debug_id": debug_id},
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors with debug_id tracking."""
    debug_id = str(uuid.uuid4())

    logger.error(
        "unhandled_exception",
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        user_id=getattr(request.state, "user_id", None),
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "debug_id": debug_id},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Storefront API: catalog, checkout, order history and payment webhooks",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url, "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Runs first on incoming requests
    setup_correlation_middleware(app)

    app.exception_handler(WebhookError)(webhook_exception_handler)
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
