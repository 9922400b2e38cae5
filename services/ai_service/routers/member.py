"""Chat assistant endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from libs.auth.dependencies import get_current_user, require_admin
from libs.auth.models import AuthUser
from libs.common.errors import ValidationFailed
from libs.common.logging import get_logger
from libs.common.rate_limit import chat_limit
from libs.db.session import atomic, get_async_db
from services.ai_service.assistant.chat import answer
from services.ai_service.models import AIRequest
from services.ai_service.schemas import (
    AIRequestListResponse,
    AIRequestResponse,
    ChatRequest,
    ChatResponse,
)
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])
admin_router = APIRouter(prefix="/admin/ai", tags=["ai-admin"])


@router.post("/chat", response_model=ChatResponse)
@chat_limit
async def chat(
    request: Request,
    body: ChatRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Answer a question about SipSmart; always 200 once a message is given."""
    message = (body.message or "").strip()
    if not message:
        raise ValidationFailed("Missing message")

    reply = await answer(message, [turn.model_dump() for turn in body.history])

    ai = reply.ai_response
    async with atomic(db):
        db.add(
            AIRequest(
                auth_id=current_user.user_id,
                source=reply.source,
                model_provider=ai.provider if ai else None,
                model_name=ai.model if ai else None,
                message=message,
                response=reply.response,
                error_message=reply.error,
                latency_ms=ai.latency_ms if ai else None,
                input_tokens=ai.input_tokens if ai else None,
                output_tokens=ai.output_tokens if ai else None,
            )
        )
    logger.info("Chat answered via %s for %s", reply.source, current_user.user_id)
    return ChatResponse(response=reply.response, source=reply.source)


# ── Admin ──


@admin_router.get("/requests", response_model=AIRequestListResponse)
async def list_ai_requests(
    source: Optional[str] = Query(None, description="llm or fallback"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List logged assistant requests, newest first."""
    query = select(AIRequest)
    count_query = select(func.count()).select_from(AIRequest)
    if source:
        query = query.where(AIRequest.source == source)
        count_query = count_query.where(AIRequest.source == source)

    total = (await db.execute(count_query)).scalar_one()
    result = await db.execute(
        query.order_by(desc(AIRequest.created_at)).offset(skip).limit(limit)
    )
    items = [AIRequestResponse.model_validate(row) for row in result.scalars().all()]
    return AIRequestListResponse(items=items, total=total)
