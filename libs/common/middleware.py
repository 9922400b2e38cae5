"""Request tracing for every SipSmart service.

Each request gets an ``X-Request-ID`` (taken from the gateway when it already
set one) that is bound to the logging context, echoed back on the response and
forwarded by the gateway to the service it proxies to. Responses also carry
``X-Response-Time`` in milliseconds.
"""
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

QUIET_PATHS = frozenset({"/health", "/docs", "/openapi.json"})


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, service_name: str = "sipsmart"):
        super().__init__(app)
        self.service_name = service_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
            method=request.method,
        )
        quiet = request.url.path in QUIET_PATHS
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled error in %s",
                self.service_name,
                extra={"extra_fields": {"duration_ms": _elapsed_ms(started)}},
            )
            clear_request_context()
            raise

        duration = _elapsed_ms(started)
        if not quiet:
            fields = {
                "service": self.service_name,
                "status_code": response.status_code,
                "duration_ms": duration,
            }
            user = getattr(request.state, "user", None)
            if user is not None:
                fields["user_id"] = user.user_id
            if response.status_code >= 500:
                logger.error("Request failed", extra={"extra_fields": fields})
            elif response.status_code >= 400:
                logger.warning("Request rejected", extra={"extra_fields": fields})
            else:
                logger.info("Request served", extra={"extra_fields": fields})

        clear_request_context()
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration}ms"
        return response


def add_observability_middleware(app: FastAPI, service_name: str = None) -> None:
    """Configure JSON logging and install request tracing on ``app``."""
    configure_logging()
    app.add_middleware(
        RequestContextMiddleware, service_name=service_name or app.title
    )
