"""Friends, stories and public profiles."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.errors import PermissionDenied, ValidationFailed
from libs.db.session import atomic, get_async_db
from services.social_service.models import Story, StoryLike
from services.social_service.schemas import (
    FriendRequestCreate,
    FriendRequestResponse,
    FriendSearchResponse,
    FriendSummary,
    PublicProfileResponse,
    StoryCreate,
    StoryResponse,
)
from services.social_service.services.friend_ops import (
    pending_between,
    are_friends,
    can_view_profile,
    find_by_student_id,
    friend_ids,
    pending_requests,
    remove_friend,
    respond_request,
    send_request,
)
from services.social_service.services.story_ops import (
    create_story,
    delete_story,
    set_like,
    view_story,
    visible_stories,
)
from services.users_service.models import UserProfile
from services.users_service.services.profile_ops import get_or_create_profile, get_profile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/social", tags=["social"])


async def stories_to_response(
    db: AsyncSession, stories: list[Story], viewer: str
) -> list[StoryResponse]:
    if not stories:
        return []
    story_ids = [story.id for story in stories]
    names = dict(
        (
            await db.execute(
                select(UserProfile.auth_id, UserProfile.display_name).where(
                    UserProfile.auth_id.in_({story.auth_id for story in stories})
                )
            )
        ).all()
    )
    liked = set(
        (
            await db.execute(
                select(StoryLike.story_id).where(
                    StoryLike.story_id.in_(story_ids), StoryLike.auth_id == viewer
                )
            )
        ).scalars()
    )
    responses = []
    for story in stories:
        response = StoryResponse.model_validate(story)
        response.author_name = names.get(story.auth_id)
        response.liked_by_me = story.id in liked
        responses.append(response)
    return responses


# ---------------------------------------------------------------------------
# Friends
# ---------------------------------------------------------------------------


@router.get("/friends", response_model=list[FriendSummary])
async def list_friends(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    ids = await friend_ids(db, current_user.user_id)
    if not ids:
        return []
    result = await db.execute(
        select(UserProfile)
        .where(UserProfile.auth_id.in_(ids))
        .order_by(UserProfile.lifetime_green_points.desc())
    )
    return result.scalars().all()


@router.get("/friends/search", response_model=FriendSearchResponse)
async def search_by_student_id(
    student_id: str = Query(..., min_length=4, max_length=20),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    profile = await find_by_student_id(db, student_id)
    return FriendSearchResponse(
        user=FriendSummary.model_validate(profile),
        is_friend=await are_friends(db, current_user.user_id, profile.auth_id),
        request_pending=(
            await pending_between(db, current_user.user_id, profile.auth_id)
        )
        is not None,
    )


@router.get("/friends/requests", response_model=list[FriendRequestResponse])
async def list_pending_requests(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Pending requests addressed to the caller."""
    return await pending_requests(db, current_user.user_id)


@router.post(
    "/friends/requests",
    response_model=FriendRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_friend_request(
    body: FriendRequestCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        await get_or_create_profile(db, current_user.user_id, email=current_user.email)
        if body.student_id:
            target = (await find_by_student_id(db, body.student_id)).auth_id
        elif body.to_auth_id:
            target = body.to_auth_id
        else:
            raise ValidationFailed("Provide student_id or to_auth_id")
        request = await send_request(db, current_user.user_id, target)
    return request


@router.post("/friends/requests/{request_id}/accept", response_model=FriendRequestResponse)
async def accept_request(
    request_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        request = await respond_request(db, request_id, current_user.user_id, accept=True)
    return request


@router.post("/friends/requests/{request_id}/reject", response_model=FriendRequestResponse)
async def reject_request(
    request_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        request = await respond_request(db, request_id, current_user.user_id, accept=False)
    return request


@router.delete("/friends/{friend_auth_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unfriend(
    friend_auth_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        await remove_friend(db, current_user.user_id, friend_auth_id)


# ---------------------------------------------------------------------------
# Public profiles
# ---------------------------------------------------------------------------


@router.get("/profiles/{auth_id}", response_model=PublicProfileResponse)
async def public_profile(
    auth_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Private profiles are only visible to the owner and their friends."""
    profile = await get_profile(db, auth_id)
    if not await can_view_profile(db, current_user.user_id, profile):
        raise PermissionDenied("This profile is private", code="profile_private")
    response = PublicProfileResponse.model_validate(profile)
    response.is_friend = await are_friends(db, current_user.user_id, auth_id)
    return response


# ---------------------------------------------------------------------------
# Stories
# ---------------------------------------------------------------------------


@router.get("/stories", response_model=list[StoryResponse])
async def list_stories(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    stories = await visible_stories(db, current_user.user_id)
    return await stories_to_response(db, stories, current_user.user_id)


@router.post("/stories", response_model=StoryResponse, status_code=status.HTTP_201_CREATED)
async def post_story(
    body: StoryCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        await get_or_create_profile(db, current_user.user_id, email=current_user.email)
        story = await create_story(db, current_user.user_id, **body.model_dump())
    return (await stories_to_response(db, [story], current_user.user_id))[0]


@router.post("/stories/{story_id}/view", response_model=StoryResponse)
async def mark_viewed(
    story_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        story = await view_story(db, story_id, current_user.user_id)
    return (await stories_to_response(db, [story], current_user.user_id))[0]


@router.post("/stories/{story_id}/like", response_model=StoryResponse)
async def like_story(
    story_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        story = await set_like(db, story_id, current_user.user_id, liked=True)
    return (await stories_to_response(db, [story], current_user.user_id))[0]


@router.delete("/stories/{story_id}/like", response_model=StoryResponse)
async def unlike_story(
    story_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        story = await set_like(db, story_id, current_user.user_id, liked=False)
    return (await stories_to_response(db, [story], current_user.user_id))[0]


@router.delete("/stories/{story_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_story(
    story_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        await delete_story(db, story_id, current_user.user_id)
