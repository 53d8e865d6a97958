"""ASGI application factory."""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import (
    account_router,
    analytics_router,
    checkout_router,
    order_router,
    product_router,
    vendor_router,
)
from marketplace.domain import marketplace
from marketplace.utils.logging import add_context, clear_context

ROUTERS = [order_router, checkout_router, vendor_router, account_router, product_router, analytics_router]


def create_app() -> FastAPI:
    """Build the API. The domain must already be initialised."""
    app = FastAPI(
        title="Marketplace API",
        description="Multi-vendor order, payment, inventory and sales analytics core",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the marketplace domain context and bind a request id for logging."""
        clear_context()
        add_context(request_id=request.headers.get("X-Request-ID", uuid4().hex))
        with marketplace.domain_context():
            response = await call_next(request)
        return response

    register_error_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": marketplace.name})

    return app
