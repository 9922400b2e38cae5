"""Unit tests for the chat assistant: canned answers, prompt building and
model fallback. The model call is stubbed; nothing leaves the process."""

import pytest
from libs.common.config import get_settings
from services.ai_service.assistant import chat
from services.ai_service.assistant.fallback import DEFAULT_ANSWER, fallback_reply
from services.ai_service.providers.base import AIProviderResponse

# ---------------------------------------------------------------------------
# Canned answers
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_qr_question_gets_scan_guide():
    assert "quét mã QR" in fallback_reply("Làm sao để quét mã QR?")


@pytest.mark.unit
def test_borrow_topic_wins_over_return():
    reply = fallback_reply("Tôi muốn mượn ly rồi trả ở quán khác")
    assert reply.startswith("Để mượn ly SipSmart")
    assert "10.000₫" in reply


@pytest.mark.unit
def test_return_topic():
    assert fallback_reply("Trả ly ở đâu?").startswith("Để trả ly")


@pytest.mark.unit
def test_points_topic_lists_rank_thresholds():
    reply = fallback_reply("Green Points là gì")
    assert "Forest (5,000 điểm)" in reply


@pytest.mark.unit
def test_wallet_topic():
    assert fallback_reply("Nạp tiền thế nào").startswith("Ví điện tử")


@pytest.mark.unit
def test_unknown_question_gets_default():
    assert fallback_reply("Xin chào bạn") == DEFAULT_ANSWER


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_messages_keep_last_history_turns():
    history = [{"role": "user", "content": f"q{i}"} for i in range(8)]

    messages = chat.build_messages("câu hỏi mới", history)

    assert messages[0]["role"] == "system"
    assert [m["content"] for m in messages[1:-1]] == ["q3", "q4", "q5", "q6", "q7"]
    assert messages[-1] == {"role": "user", "content": "câu hỏi mới"}


@pytest.mark.unit
def test_unknown_history_roles_become_assistant():
    messages = chat.build_messages("hi", [{"role": "bot", "content": "hello"}])
    assert messages[1]["role"] == "assistant"


@pytest.mark.unit
def test_system_prompt_formats_amounts_as_dong():
    prompt = chat.build_system_prompt()

    assert "đặt cọc 10.000₫" in prompt
    assert "giảm 3.000₫" in prompt
    assert "10,000" not in prompt


# ---------------------------------------------------------------------------
# Model fallback
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_no_api_key_uses_fallback(monkeypatch):
    monkeypatch.setattr(get_settings(), "AI_API_KEY", None)

    reply = await chat.answer("Trả ly ở đâu?")

    assert reply.source == "fallback"
    assert reply.response.startswith("Để trả ly")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_model_answer_used_when_available(monkeypatch):
    monkeypatch.setattr(get_settings(), "AI_API_KEY", "test-key")

    async def _fake_llm(messages, **_kwargs):
        return AIProviderResponse(
            content="  Chào bạn! 🌱 ",
            model="gemini/gemini-1.5-flash",
            provider="gemini",
            input_tokens=10,
            output_tokens=5,
            latency_ms=12,
        )

    monkeypatch.setattr(chat, "call_llm", _fake_llm)

    reply = await chat.answer("Xin chào")

    assert reply.source == "llm"
    assert reply.response == "Chào bạn! 🌱"
    assert reply.ai_response.provider == "gemini"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_model_failure_falls_back_with_error(monkeypatch):
    monkeypatch.setattr(get_settings(), "AI_API_KEY", "test-key")

    async def _failing_llm(messages, **_kwargs):
        raise RuntimeError("quota exceeded")

    monkeypatch.setattr(chat, "call_llm", _failing_llm)

    reply = await chat.answer("Ví của tôi")

    assert reply.source == "fallback"
    assert reply.error == "quota exceeded"
    assert reply.response.startswith("Ví điện tử")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_empty_model_answer_falls_back(monkeypatch):
    monkeypatch.setattr(get_settings(), "AI_API_KEY", "test-key")

    async def _empty_llm(messages, **_kwargs):
        return AIProviderResponse(
            content="   ", model="m", provider="p", latency_ms=1
        )

    monkeypatch.setattr(chat, "call_llm", _empty_llm)

    reply = await chat.answer("abc")

    assert reply.source == "fallback"
    assert reply.response == DEFAULT_ANSWER
