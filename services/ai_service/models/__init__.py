"""AI Service models package."""

from services.ai_service.models.chat import AIRequest  # noqa: F401

__all__ = ["AIRequest"]
