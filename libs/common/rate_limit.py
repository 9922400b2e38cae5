"""slowapi limiter shared by the gateway, cups and AI services.

Authenticated calls are counted per user, anonymous ones per client IP.
Limits are read from settings so operators can tune them without a deploy;
storage defaults to in-process memory (``RATE_LIMIT_STORAGE_URI``).
"""

from functools import lru_cache
from typing import Callable

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.common.config import get_settings


def rate_limit_key(request: Request) -> str:
    user = getattr(request.state, "user", None)
    if user is not None:
        return f"user:{user.user_id}"
    # Behind the gateway the first X-Forwarded-For hop is the real client
    forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    return f"ip:{forwarded or get_remote_address(request)}"


@lru_cache
def get_limiter() -> Limiter:
    settings = get_settings()
    return Limiter(
        key_func=rate_limit_key,
        default_limits=[settings.RATE_LIMIT_DEFAULT],
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


limiter = get_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """429 in the ``{"error", "code"}`` shape every service returns."""
    return JSONResponse(
        status_code=429,
        content={
            "error": f"Bạn thao tác quá nhanh ({exc.detail}). Vui lòng thử lại sau.",
            "code": "rate_limited",
        },
        headers={"Retry-After": "60"},
    )


def lifecycle_limit(func: Callable) -> Callable:
    """Borrow and return, per user."""
    return limiter.limit(lambda: get_settings().RATE_LIMIT_CUP_LIFECYCLE)(func)


def chat_limit(func: Callable) -> Callable:
    """AI assistant chat, per user."""
    return limiter.limit(lambda: get_settings().RATE_LIMIT_AI_CHAT)(func)
