"""Integration tests for users_service: profile, points, garden and admin."""

import pytest
from services.users_service.models import (
    Notification,
    NotificationType,
    UserProfile,
    VirtualTree,
)
from sqlalchemy import select
from tests.factories import UserProfileFactory

# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_me_creates_profile(users_client, db_session):
    """GET /users/me: first access creates a seed-rank profile."""
    response = await users_client.get("/users/me")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["auth_id"] == "member-1"
    assert data["display_name"] == "member-1"
    assert data["rank_level"] == "seed"
    assert data["green_points"] == 0

    count = await db_session.execute(
        select(UserProfile.id).where(UserProfile.auth_id == "member-1")
    )
    assert len(count.all()) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_me(users_client, member_profile):
    response = await users_client.patch(
        "/users/me", json={"display_name": "Lan", "student_id": "SV2024001"}
    )

    assert response.status_code == 200, response.text
    assert response.json()["display_name"] == "Lan"
    assert response.json()["student_id"] == "SV2024001"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_me_rejects_bad_student_id(users_client, member_profile):
    response = await users_client.patch("/users/me", json={"student_id": "sv-01"})

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_me_student_id_taken(users_client, db_session, member_profile):
    db_session.add(UserProfileFactory.create(student_id="SV2024001"))
    await db_session.commit()

    response = await users_client.patch("/users/me", json={"student_id": "SV2024001"})

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_rank_progress(users_client, db_session, member_profile):
    member_profile.lifetime_green_points = 300
    await db_session.commit()

    response = await users_client.get("/users/me/rank")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["rank"] == "sprout"
    assert data["next_rank"] == "sapling"
    assert data["points_to_next"] == 200
    assert data["progress_percent"] == 50
    assert data["borrow_limit"] == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_leaderboard_skips_private_and_blacklisted(users_client, db_session):
    db_session.add_all(
        [
            UserProfileFactory.create(auth_id="top", lifetime_green_points=900),
            UserProfileFactory.create(auth_id="mid", lifetime_green_points=400),
            UserProfileFactory.create(
                auth_id="hidden", lifetime_green_points=5000, is_profile_public=False
            ),
            UserProfileFactory.create(
                auth_id="banned", lifetime_green_points=3000, is_blacklisted=True
            ),
        ]
    )
    await db_session.commit()

    response = await users_client.get("/users/leaderboard")

    assert response.status_code == 200
    board = response.json()
    assert [entry["auth_id"] for entry in board] == ["top", "mid"]
    assert board[0]["position"] == 1


# ---------------------------------------------------------------------------
# Mini-games and garden
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_game_score_awards_points(users_client, member_profile):
    response = await users_client.post(
        "/users/me/games/score", json={"game_type": "eco_quiz", "score": 8}
    )

    assert response.status_code == 200, response.text
    assert response.json()["points_earned"] == 40
    assert response.json()["green_points"] == 40

    history = await users_client.get("/users/me/points")
    [entry] = history.json()["entries"]
    assert entry["source"] == "mini_game"
    assert entry["amount"] == 40


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_game_rejected(users_client, member_profile):
    response = await users_client.post(
        "/users/me/games/score", json={"game_type": "tetris", "score": 10}
    )

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_watering_levels_up_tree(users_client, db_session, member_profile):
    db_session.add(
        VirtualTree(auth_id=member_profile.auth_id, level=1, growth=90, total_waterings=9)
    )
    await db_session.commit()

    response = await users_client.post("/users/me/tree/water")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["leveled_up"] is True
    assert data["bonus_points"] == 50
    assert data["tree"]["level"] == 2
    assert data["tree"]["growth"] == 0
    assert data["tree"]["total_waterings"] == 10

    await db_session.refresh(member_profile)
    assert member_profile.green_points == 50


@pytest.mark.asyncio
@pytest.mark.integration
async def test_tree_created_on_first_view(users_client):
    response = await users_client.get("/users/me/tree")

    assert response.status_code == 200
    assert response.json()["level"] == 1
    assert response.json()["growth"] == 0


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_notifications_mark_read(users_client, db_session, member_profile):
    mine = Notification(
        auth_id=member_profile.auth_id,
        title="Mượn ly thành công",
        message="Bạn đã mượn ly 12345678",
        type=NotificationType.BORROW,
    )
    other = Notification(
        auth_id="someone-else", title="x", message="y", type=NotificationType.SYSTEM
    )
    db_session.add_all([mine, other])
    await db_session.commit()

    listed = await users_client.get("/users/me/notifications", params={"unread_only": True})
    assert [n["id"] for n in listed.json()] == [str(mine.id)]

    read = await users_client.post(f"/users/me/notifications/{mine.id}/read")
    assert read.status_code == 200, read.text
    assert read.json()["is_read"] is True

    foreign = await users_client.post(f"/users/me/notifications/{other.id}/read")
    assert foreign.status_code == 404


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_blacklist_cycle(users_client, member_profile, admin_headers):
    blocked = await users_client.post(
        f"/admin/users/{member_profile.auth_id}/blacklist",
        json={"reason": "Không trả ly nhiều lần"},
        headers=admin_headers,
    )
    assert blocked.status_code == 200, blocked.text
    assert blocked.json()["is_blacklisted"] is True

    listed = await users_client.get(
        "/admin/users", params={"blacklisted": True}, headers=admin_headers
    )
    assert listed.json()["total"] == 1

    unblocked = await users_client.post(
        f"/admin/users/{member_profile.auth_id}/unblacklist", headers=admin_headers
    )
    assert unblocked.json()["is_blacklisted"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_points_adjustment(users_client, db_session, member_profile, admin_headers):
    member_profile.green_points = 100
    member_profile.lifetime_green_points = 100
    await db_session.commit()

    deduct = await users_client.post(
        f"/admin/users/{member_profile.auth_id}/points",
        json={"delta": -30, "reason": "Điều chỉnh"},
        headers=admin_headers,
    )
    assert deduct.status_code == 200, deduct.text
    assert deduct.json()["green_points"] == 70
    assert deduct.json()["lifetime_green_points"] == 100

    overdraw = await users_client.post(
        f"/admin/users/{member_profile.auth_id}/points",
        json={"delta": -500, "reason": "Điều chỉnh"},
        headers=admin_headers,
    )
    assert overdraw.status_code == 400
    assert overdraw.json()["code"] == "insufficient_points"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_user_not_found(users_client, admin_headers):
    response = await users_client.get("/admin/users/ghost", headers=admin_headers)

    assert response.status_code == 404
