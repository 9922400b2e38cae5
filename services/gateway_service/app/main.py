"""FastAPI application entrypoint for the SipSmart gateway service.

The gateway owns no data: every ``/api/v1/...`` request is forwarded to the
service that owns the area, with headers, query string and body untouched.
"""

from __future__ import annotations

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi.errors import RateLimitExceeded

from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import get_logger, get_request_id
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.gateway_service.app import clients

logger = get_logger(__name__)

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]

# Public area -> attribute name of the owning client in ``clients``.
# Each area is exposed as /api/v1/<area>/... and /api/v1/admin/<area>/...
MEMBER_ROUTES = {
    "users": "users_client",
    "wallet": "wallet_client",
    "cups": "cups_client",
    "stores": "cups_client",
    "partners": "partners_client",
    "mobility": "mobility_client",
    "kyc": "kyc_client",
    "rewards": "rewards_client",
    "challenges": "rewards_client",
    "social": "social_client",
    "ai": "ai_client",
    "reports": "reports_client",
}

ADMIN_ROUTES = {
    "users": "users_client",
    "wallet": "wallet_client",
    "cups": "cups_client",
    "stores": "cups_client",
    "partners": "partners_client",
    "redistribution": "partners_client",
    "mobility": "mobility_client",
    "kyc": "kyc_client",
    "rewards": "rewards_client",
    "challenges": "rewards_client",
    "social": "social_client",
    "ai": "ai_client",
    "reports": "reports_client",
}


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()
    app = FastAPI(
        title="SipSmart Gateway Service",
        version="0.1.0",
        description="API Gateway that routes SipSmart requests to their services.",
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple readiness endpoint."""
        return {"status": "ok", "service": "gateway"}

    # ==================================================================
    # ADMIN PROXIES (registered first so /api/v1/admin/... never
    # falls into a member area)
    # ==================================================================
    for area, client_name in ADMIN_ROUTES.items():
        _register_proxy(app, f"/api/v1/admin/{area}", f"/admin/{area}", client_name)

    # ==================================================================
    # MEMBER PROXIES
    # ==================================================================
    for area, client_name in MEMBER_ROUTES.items():
        _register_proxy(app, f"/api/v1/{area}", f"/{area}", client_name)

    return app


def _register_proxy(app: FastAPI, public_prefix: str, upstream_prefix: str, client_name: str):
    """Route ``public_prefix`` and everything below it to ``upstream_prefix``."""

    # Clients are resolved per request so tests can swap the module-level ones.
    async def proxy_root(request: Request):
        return await proxy_request(getattr(clients, client_name), upstream_prefix, request)

    async def proxy_path(path: str, request: Request):
        return await proxy_request(
            getattr(clients, client_name), f"{upstream_prefix}/{path}", request
        )

    name = "proxy" + public_prefix.replace("/api/v1", "").replace("/", "_")
    app.add_api_route(
        public_prefix, proxy_root, methods=PROXY_METHODS, name=name, include_in_schema=False
    )
    app.add_api_route(
        f"{public_prefix}/{{path:path}}",
        proxy_path,
        methods=PROXY_METHODS,
        name=f"{name}_path",
        include_in_schema=False,
    )


def _filter_service_headers(headers: httpx.Headers) -> list[tuple[str, str]]:
    """Strip hop-by-hop headers that FastAPI/starlette manages."""
    hop_by_hop = {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "content-length",
        "content-encoding",
        "host",
        "content-type",
    }
    return [(k, v) for k, v in headers.items() if k.lower() not in hop_by_hop]


async def proxy_request(client: clients.ServiceClient, path: str, request: Request):
    """Generic proxy function to forward requests to microservices."""
    # Forward the body as raw bytes; re-serializing JSON would change it.
    content_body = None
    if request.method in ["POST", "PATCH", "PUT"]:
        body_bytes = await request.body()
        if body_bytes:
            content_body = body_bytes

    # Content-Length is recomputed by httpx and Host is set for the upstream
    headers = {
        k: v
        for k, v in request.headers.items()
        if k.lower() not in ["content-length", "host"]
    }
    headers["x-request-id"] = get_request_id() or headers.get("x-request-id", "")

    query_params = request.url.query
    if query_params:
        path = f"{path}?{query_params}"

    try:
        service_response = await client.request(
            request.method, path, content=content_body, headers=headers
        )
    except httpx.RequestError as e:
        logger.error("Upstream %s %s unreachable: %s", request.method, path, e)
        raise HTTPException(status_code=503, detail=f"Service unavailable: {str(e)}")

    forward_headers = dict(_filter_service_headers(service_response.headers))

    if service_response.status_code == 204:
        return Response(status_code=204, headers=forward_headers)

    content_type = service_response.headers.get("content-type", "")

    if "application/json" in content_type:
        try:
            payload = service_response.json()
            return JSONResponse(
                content=payload,
                status_code=service_response.status_code,
                headers=forward_headers,
            )
        except ValueError:
            # Fall back to raw bytes if the payload is not valid JSON.
            pass

    return Response(
        content=service_response.content,
        status_code=service_response.status_code,
        media_type=content_type or None,
        headers=forward_headers,
    )


app = create_app()
