"""FastAPI application for the AI Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.ai_service.routers import admin_ai_router, ai_router
from slowapi.errors import RateLimitExceeded


def create_app() -> FastAPI:
    """Create and configure the AI Service FastAPI app."""
    app = FastAPI(
        title="SipSmart AI Service",
        version="0.1.0",
        description="Chat assistant for SipSmart users.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "ai"}

    # Gateway: /api/v1/ai/{path} → /ai/{path}
    app.include_router(ai_router)

    # Gateway: /api/v1/admin/ai/{path} → /admin/ai/{path}
    app.include_router(admin_ai_router)

    return app


app = create_app()
