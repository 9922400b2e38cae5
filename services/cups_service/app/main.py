"""FastAPI application for the Cups Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.cups_service.routers import (
    admin_cups_router,
    admin_stores_router,
    cups_router,
    stores_router,
)
from slowapi.errors import RateLimitExceeded


def create_app() -> FastAPI:
    """Create and configure the Cups Service FastAPI app."""
    app = FastAPI(
        title="SipSmart Cups Service",
        version="0.1.0",
        description="Partner stores, cup inventory and the borrow/return lifecycle.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    # Borrow/return are rate limited per user
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "cups"}

    # Gateway: /api/v1/cups/{path} → /cups/{path}
    app.include_router(cups_router)
    # Gateway: /api/v1/stores/{path} → /stores/{path}
    app.include_router(stores_router)

    # Gateway: /api/v1/admin/cups/{path} → /admin/cups/{path}
    app.include_router(admin_cups_router)
    # Gateway: /api/v1/admin/stores/{path} → /admin/stores/{path}
    app.include_router(admin_stores_router)

    return app


app = create_app()
