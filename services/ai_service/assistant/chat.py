"""SipSmart chat assistant.

Answers with the configured LLM when an API key is present and falls back
to keyword-matched canned answers otherwise, or when the model call fails.
"""

from dataclasses import dataclass
from typing import Optional

from libs.common.config import get_settings
from libs.common.currency import format_vnd
from libs.common.logging import get_logger
from services.ai_service.assistant.fallback import fallback_reply
from services.ai_service.providers.base import AIProviderResponse, call_llm

logger = get_logger(__name__)

HISTORY_TURNS = 5

SYSTEM_PROMPT = """Bạn là trợ lý AI thân thiện của SipSmart, hệ thống mượn - trả ly tái sử dụng tại làng đại học nhằm giảm rác thải nhựa.

Kiến thức chính:
- Sinh viên quét mã QR trên ly tại quán đối tác để mượn ly, đặt cọc {deposit} và được giảm {discount} ngay.
- Ly có thể trả tại bất kỳ quán nào trong hệ thống trong vòng {hours} giờ; tiền cọc được hoàn tự động vào ví.
- Trả đúng hạn được {on_time} Green Points, trả trễ được {late} điểm; trả trễ quá lâu sẽ bị trừ phí vào tiền cọc.
- Hạng: seed, sprout, sapling, tree, forest theo tổng điểm tích lũy.
- Ngoài ly, SipSmart còn có xe đạp điện (cần xác thực eKYC), thanh toán xe buýt/metro xanh, thử thách và đổi quà.

Nhiệm vụ: hướng dẫn sử dụng ứng dụng, giải thích Green Points và xếp hạng, hỗ trợ về ví và mượn/trả ly, khuyến khích lối sống xanh.
Luôn trả lời bằng tiếng Việt, ngắn gọn, tích cực, dùng emoji phù hợp."""


@dataclass
class ChatReply:
    response: str
    source: str  # "llm" or "fallback"
    ai_response: Optional[AIProviderResponse] = None
    error: Optional[str] = None


def build_system_prompt() -> str:
    settings = get_settings()
    return SYSTEM_PROMPT.format(
        deposit=format_vnd(settings.DEPOSIT_AMOUNT),
        discount=format_vnd(settings.BORROW_DISCOUNT),
        hours=settings.BORROW_DURATION_HOURS,
        on_time=settings.POINTS_RETURN_ON_TIME,
        late=settings.POINTS_RETURN_LATE,
    )


def build_messages(message: str, history: list[dict]) -> list[dict]:
    """System prompt, the last few history turns, then the new message."""
    messages = [{"role": "system", "content": build_system_prompt()}]
    for turn in history[-HISTORY_TURNS:]:
        role = "user" if turn.get("role") == "user" else "assistant"
        messages.append({"role": role, "content": turn.get("content", "")})
    messages.append({"role": "user", "content": message})
    return messages


async def answer(message: str, history: Optional[list[dict]] = None) -> ChatReply:
    settings = get_settings()
    if not settings.AI_API_KEY:
        return ChatReply(response=fallback_reply(message), source="fallback")

    try:
        ai_response = await call_llm(build_messages(message, history or []))
    except Exception as e:
        logger.warning("Chat model unavailable, using canned answer: %s", e)
        return ChatReply(response=fallback_reply(message), source="fallback", error=str(e))

    content = ai_response.content.strip()
    if not content:
        return ChatReply(
            response=fallback_reply(message), source="fallback", ai_response=ai_response
        )
    return ChatReply(response=content, source="llm", ai_response=ai_response)
