"""FastAPI application for the Wallet Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.wallet_service.routers.admin import router as admin_router
from services.wallet_service.routers.member import router as wallet_router


def create_app() -> FastAPI:
    """Create and configure the Wallet Service FastAPI app."""
    app = FastAPI(
        title="SipSmart Wallet Service",
        version="0.1.0",
        description="VND wallet, ledger and top-ups for SipSmart.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "wallet"}

    # Member-facing routes
    # Gateway: /api/v1/wallet/{path} → /wallet/{path}
    app.include_router(wallet_router)

    # Admin routes
    # Gateway: /api/v1/admin/wallet/{path} → /admin/wallet/{path}
    app.include_router(admin_router)

    return app


app = create_app()
