"""Mini-game rewards and the virtual garden."""

from libs.common.datetime_utils import utc_now
from libs.common.gamification import game_reward, water_tree
from libs.common.logging import get_logger
from services.users_service.models import (
    GameScore,
    PointSource,
    UserProfile,
    VirtualTree,
)
from services.users_service.services.profile_ops import award_points
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def submit_game_score(
    db: AsyncSession, profile: UserProfile, *, game_type: str, score: int
) -> GameScore:
    points = game_reward(game_type, score)
    entry = GameScore(
        auth_id=profile.auth_id,
        game_type=game_type,
        score=score,
        points_earned=points,
    )
    db.add(entry)
    await db.flush()

    await award_points(
        db,
        profile,
        points,
        source=PointSource.MINI_GAME,
        description=f"Mini-game {game_type}: {score}",
        reference_id=str(entry.id),
    )
    return entry


async def get_or_create_tree(db: AsyncSession, auth_id: str) -> VirtualTree:
    result = await db.execute(select(VirtualTree).where(VirtualTree.auth_id == auth_id))
    tree = result.scalar_one_or_none()
    if tree:
        return tree
    tree = VirtualTree(auth_id=auth_id, level=1, growth=0, total_waterings=0)
    db.add(tree)
    await db.flush()
    return tree


async def water(db: AsyncSession, profile: UserProfile) -> tuple[VirtualTree, int]:
    """Water the user's tree; returns the tree and any level-up bonus awarded."""
    tree = await get_or_create_tree(db, profile.auth_id)
    level, growth, bonus = water_tree(tree.level, tree.growth)
    tree.level = level
    tree.growth = growth
    tree.total_waterings += 1
    tree.last_watered_at = utc_now()

    if bonus:
        await award_points(
            db,
            profile,
            bonus,
            source=PointSource.TREE,
            description=f"Cây lên cấp {level}",
        )
        logger.info("Tree of %s reached level %d", profile.auth_id, level)
    await db.flush()
    return tree, bonus
