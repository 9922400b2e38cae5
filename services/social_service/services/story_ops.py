"""Stories: short-lived posts visible to the author and their friends."""

import uuid
from datetime import timedelta
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.errors import NotFound, PermissionDenied
from libs.common.logging import get_logger
from libs.db.session import conditional_update
from services.social_service.models import Story, StoryLike, StoryType, StoryView
from services.social_service.services.friend_ops import are_friends, friend_ids
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

STORY_TTL = timedelta(hours=24)


async def create_story(
    db: AsyncSession,
    auth_id: str,
    *,
    content: str,
    story_type: StoryType = StoryType.TEXT,
    image_url: Optional[str] = None,
    achievement_type: Optional[str] = None,
    achievement_data: Optional[dict] = None,
) -> Story:
    now = utc_now()
    story = Story(
        auth_id=auth_id,
        story_type=story_type,
        content=content,
        image_url=image_url,
        achievement_type=achievement_type,
        achievement_data=achievement_data,
        created_at=now,
        expires_at=now + STORY_TTL,
    )
    db.add(story)
    await db.flush()
    logger.info("Story %s created by %s", story.id, auth_id)
    return story


async def visible_stories(db: AsyncSession, auth_id: str) -> list[Story]:
    """Unexpired stories by the user and their friends, newest first."""
    authors = [auth_id, *await friend_ids(db, auth_id)]
    result = await db.execute(
        select(Story)
        .where(Story.auth_id.in_(authors), Story.expires_at > utc_now())
        .order_by(Story.created_at.desc())
    )
    return list(result.scalars().all())


async def get_visible_story(db: AsyncSession, story_id: uuid.UUID, auth_id: str) -> Story:
    result = await db.execute(
        select(Story).where(Story.id == story_id, Story.expires_at > utc_now())
    )
    story = result.scalar_one_or_none()
    if not story:
        raise NotFound("Story not found or expired")
    if story.auth_id != auth_id and not await are_friends(db, auth_id, story.auth_id):
        raise PermissionDenied("Stories are only visible to friends")
    return story


async def view_story(db: AsyncSession, story_id: uuid.UUID, auth_id: str) -> Story:
    """Record a view; repeated views by the same user count once."""
    story = await get_visible_story(db, story_id, auth_id)
    result = await db.execute(
        select(StoryView.id).where(
            StoryView.story_id == story.id, StoryView.viewer_auth_id == auth_id
        )
    )
    if result.scalar_one_or_none() is None:
        db.add(StoryView(story_id=story.id, viewer_auth_id=auth_id))
        await conditional_update(
            db, Story, Story.id == story.id, view_count=Story.view_count + 1
        )
        await db.refresh(story)
    return story


async def has_liked(db: AsyncSession, story_id: uuid.UUID, auth_id: str) -> bool:
    result = await db.execute(
        select(StoryLike.id).where(StoryLike.story_id == story_id, StoryLike.auth_id == auth_id)
    )
    return result.scalar_one_or_none() is not None


async def set_like(db: AsyncSession, story_id: uuid.UUID, auth_id: str, *, liked: bool) -> Story:
    """Like or unlike; repeating the same action changes nothing."""
    story = await get_visible_story(db, story_id, auth_id)
    already = await has_liked(db, story.id, auth_id)
    if liked and not already:
        db.add(StoryLike(story_id=story.id, auth_id=auth_id))
        await conditional_update(
            db, Story, Story.id == story.id, like_count=Story.like_count + 1
        )
        await db.refresh(story)
    elif not liked and already:
        result = await db.execute(
            select(StoryLike).where(StoryLike.story_id == story.id, StoryLike.auth_id == auth_id)
        )
        await db.delete(result.scalar_one())
        await conditional_update(
            db,
            Story,
            Story.id == story.id,
            Story.like_count > 0,
            like_count=Story.like_count - 1,
        )
        await db.refresh(story)
    return story


async def delete_story(
    db: AsyncSession, story_id: uuid.UUID, auth_id: Optional[str] = None
) -> None:
    """Delete a story; ``auth_id`` restricts deletion to the author."""
    result = await db.execute(select(Story).where(Story.id == story_id))
    story = result.scalar_one_or_none()
    if not story:
        raise NotFound("Story not found")
    if auth_id is not None and story.auth_id != auth_id:
        raise PermissionDenied("You can only delete your own stories")
    await db.delete(story)
    await db.flush()
    logger.info("Story %s deleted by %s", story_id, auth_id or "admin")
