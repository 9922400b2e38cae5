"""Story moderation."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.db.session import atomic, get_async_db
from services.social_service.models import Story
from services.social_service.routers.member import stories_to_response
from services.social_service.schemas import StoryResponse
from services.social_service.services.story_ops import delete_story
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin/social", tags=["admin-social"])


@router.get("/stories", response_model=list[StoryResponse])
async def list_all_stories(
    include_expired: bool = False,
    limit: int = Query(100, ge=1, le=500),
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(Story)
    if not include_expired:
        query = query.where(Story.expires_at > utc_now())
    result = await db.execute(query.order_by(Story.created_at.desc()).limit(limit))
    return await stories_to_response(db, list(result.scalars().all()), admin.user_id)


@router.delete("/stories/{story_id}", status_code=status.HTTP_204_NO_CONTENT)
async def moderate_story(
    story_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        await delete_story(db, story_id)
