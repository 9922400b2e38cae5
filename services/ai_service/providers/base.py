"""LLM provider access.

Every model call goes through LiteLLM so the configured model string alone
decides the vendor (Gemini, OpenAI, Anthropic, ...).
"""

import time
from typing import Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


class AIProviderResponse:
    """Standardized response from any AI provider."""

    def __init__(
        self,
        content: str,
        model: str,
        provider: str,
        input_tokens: int = 0,
        output_tokens: int = 0,
        latency_ms: int = 0,
    ):
        self.content = content
        self.model = model
        self.provider = provider
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens
        self.latency_ms = latency_ms


def provider_for(model: str) -> str:
    """Best-effort vendor name from a LiteLLM model string."""
    if "/" in model:
        return model.split("/", 1)[0]
    if "gpt" in model or "o1" in model or "o3" in model:
        return "openai"
    if "claude" in model:
        return "anthropic"
    if "gemini" in model:
        return "gemini"
    return "unknown"


async def call_llm(
    messages: list[dict],
    model: Optional[str] = None,
    temperature: float = 0.7,
    max_tokens: int = 1024,
    timeout: float = 30.0,
) -> AIProviderResponse:
    """
    Call an LLM via LiteLLM.

    Args:
        messages: Chat messages, system prompt first
        model: LiteLLM model string (defaults to ``AI_DEFAULT_MODEL``)
        temperature: Sampling temperature
        max_tokens: Max output tokens
        timeout: Seconds before the call is abandoned
    """
    import litellm

    settings = get_settings()
    model = model or settings.AI_DEFAULT_MODEL

    start = time.monotonic()
    try:
        response = await litellm.acompletion(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            api_key=settings.AI_API_KEY,
            timeout=timeout,
        )
    except Exception as e:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.error("LLM call failed after %dms (model=%s): %s", elapsed_ms, model, e)
        raise

    elapsed_ms = int((time.monotonic() - start) * 1000)
    usage = getattr(response, "usage", None)
    return AIProviderResponse(
        content=response.choices[0].message.content or "",
        model=model,
        provider=provider_for(model),
        input_tokens=usage.prompt_tokens if usage else 0,
        output_tokens=usage.completion_tokens if usage else 0,
        latency_ms=elapsed_ms,
    )
