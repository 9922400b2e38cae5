"""FastAPI application for the KYC Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.kyc_service.routers import admin_kyc_router, kyc_router


def create_app() -> FastAPI:
    """Create and configure the KYC Service FastAPI app."""
    app = FastAPI(
        title="SipSmart KYC Service",
        version="0.1.0",
        description="Identity verification (eKYC) for e-bike rentals.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "kyc"}

    # Gateway: /api/v1/kyc/{path} → /kyc/{path}
    app.include_router(kyc_router)

    # Gateway: /api/v1/admin/kyc/{path} → /admin/kyc/{path}
    app.include_router(admin_kyc_router)

    return app


app = create_app()
