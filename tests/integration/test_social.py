"""Integration tests for friends, public profiles and stories."""

from datetime import timedelta

import pytest
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from services.social_service.models import Friendship, Story, StoryType
from services.users_service.models import Notification
from sqlalchemy import select
from tests.factories import UserProfileFactory

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _act_as(auth_id: str) -> None:
    from services.social_service.app.main import app

    user = AuthUser(user_id=auth_id, email=f"{auth_id}@sipsmart.vn", role="authenticated")
    app.dependency_overrides[get_current_user] = lambda: user


async def _friend(db_session, a: str, b: str) -> None:
    low, high = sorted([a, b])
    db_session.add(Friendship(user_low=low, user_high=high))
    await db_session.commit()


async def _story(db_session, auth_id: str, **overrides) -> Story:
    now = utc_now()
    values = {
        "auth_id": auth_id,
        "story_type": StoryType.TEXT,
        "content": "Hôm nay mình đã mượn ly thay vì dùng ly nhựa",
        "created_at": now,
        "expires_at": now + timedelta(hours=24),
    }
    values.update(overrides)
    story = Story(**values)
    db_session.add(story)
    await db_session.commit()
    return story


@pytest.fixture
def friend_profile():
    return UserProfileFactory.create(
        auth_id="friend-2", display_name="Minh", student_id="SV2024002"
    )


# ---------------------------------------------------------------------------
# Friends
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_friend_request_accept_flow(
    social_client, db_session, member_profile, friend_profile
):
    """Request by student id, accept as the recipient, both see the friendship."""
    db_session.add(friend_profile)
    await db_session.commit()

    found = await social_client.get("/social/friends/search", params={"student_id": "SV2024002"})
    assert found.status_code == 200, found.text
    assert found.json()["user"]["auth_id"] == "friend-2"
    assert found.json()["is_friend"] is False

    sent = await social_client.post("/social/friends/requests", json={"student_id": "SV2024002"})
    assert sent.status_code == 201, sent.text
    request_id = sent.json()["id"]

    duplicate = await social_client.post(
        "/social/friends/requests", json={"to_auth_id": "friend-2"}
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["code"] == "request_exists"

    # The sender cannot accept their own request
    forbidden = await social_client.post(f"/social/friends/requests/{request_id}/accept")
    assert forbidden.status_code == 403

    _act_as("friend-2")
    inbox = await social_client.get("/social/friends/requests")
    assert [r["id"] for r in inbox.json()] == [request_id]

    accepted = await social_client.post(f"/social/friends/requests/{request_id}/accept")
    assert accepted.status_code == 200, accepted.text
    assert accepted.json()["status"] == "accepted"

    friends = await social_client.get("/social/friends")
    assert [f["auth_id"] for f in friends.json()] == ["member-1"]

    notified = await db_session.execute(
        select(Notification.auth_id).order_by(Notification.created_at)
    )
    assert notified.scalars().all() == ["friend-2", "member-1"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_friend_request_to_self(social_client, member_profile):
    response = await social_client.post(
        "/social/friends/requests", json={"to_auth_id": "member-1"}
    )

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_friend_request_needs_a_target(social_client, member_profile):
    response = await social_client.post("/social/friends/requests", json={})

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unfriend(social_client, db_session, member_profile, friend_profile):
    db_session.add(friend_profile)
    await _friend(db_session, "member-1", "friend-2")

    removed = await social_client.delete("/social/friends/friend-2")
    assert removed.status_code == 204

    again = await social_client.delete("/social/friends/friend-2")
    assert again.status_code == 404


# ---------------------------------------------------------------------------
# Public profiles
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_private_profile_visible_to_friends_only(
    social_client, db_session, member_profile, friend_profile
):
    friend_profile.is_profile_public = False
    db_session.add(friend_profile)
    await db_session.commit()

    hidden = await social_client.get("/social/profiles/friend-2")
    assert hidden.status_code == 403
    assert hidden.json()["code"] == "profile_private"

    await _friend(db_session, "member-1", "friend-2")
    visible = await social_client.get("/social/profiles/friend-2")
    assert visible.status_code == 200, visible.text
    assert visible.json()["display_name"] == "Minh"
    assert visible.json()["is_friend"] is True
    assert "email" not in visible.json()


# ---------------------------------------------------------------------------
# Stories
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_post_story_expires_in_a_day(social_client, member_profile):
    response = await social_client.post(
        "/social/stories",
        json={
            "story_type": "achievement",
            "content": "Lên hạng Mầm!",
            "achievement_type": "rank_up",
            "achievement_data": {"rank": "sprout"},
        },
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["view_count"] == 0
    assert data["author_name"] == member_profile.display_name

    mine = await social_client.get("/social/stories")
    assert [s["id"] for s in mine.json()] == [data["id"]]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_feed_shows_friends_only_and_unexpired(
    social_client, db_session, member_profile, friend_profile
):
    db_session.add(friend_profile)
    await _friend(db_session, "member-1", "friend-2")
    friend_story = await _story(db_session, "friend-2")
    await _story(db_session, "stranger-3")
    await _story(
        db_session, "friend-2", expires_at=utc_now() - timedelta(minutes=1)
    )

    response = await social_client.get("/social/stories")

    assert response.status_code == 200, response.text
    assert [s["id"] for s in response.json()] == [str(friend_story.id)]
    assert response.json()[0]["author_name"] == "Minh"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_views_and_likes_count_once(
    social_client, db_session, member_profile, friend_profile
):
    db_session.add(friend_profile)
    await _friend(db_session, "member-1", "friend-2")
    story = await _story(db_session, "friend-2")

    await social_client.post(f"/social/stories/{story.id}/view")
    viewed = await social_client.post(f"/social/stories/{story.id}/view")
    assert viewed.json()["view_count"] == 1

    await social_client.post(f"/social/stories/{story.id}/like")
    liked = await social_client.post(f"/social/stories/{story.id}/like")
    assert liked.json()["like_count"] == 1
    assert liked.json()["liked_by_me"] is True

    unliked = await social_client.delete(f"/social/stories/{story.id}/like")
    assert unliked.json()["like_count"] == 0
    assert unliked.json()["liked_by_me"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_stranger_story_not_viewable(social_client, db_session, member_profile):
    story = await _story(db_session, "stranger-3")

    response = await social_client.post(f"/social/stories/{story.id}/view")

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_only_author_deletes_story(social_client, db_session, member_profile, admin_headers):
    story = await _story(db_session, "stranger-3")
    story_id = story.id

    denied = await social_client.delete(f"/social/stories/{story_id}")
    assert denied.status_code == 403

    moderated = await social_client.delete(
        f"/admin/social/stories/{story_id}", headers=admin_headers
    )
    assert moderated.status_code == 204
