"""AI Service schemas package."""

from services.ai_service.schemas.chat import (  # noqa: F401
    AIRequestListResponse,
    AIRequestResponse,
    ChatRequest,
    ChatResponse,
    ChatTurn,
)

__all__ = [
    "AIRequestListResponse",
    "AIRequestResponse",
    "ChatRequest",
    "ChatResponse",
    "ChatTurn",
]
