"""Point, deposit and fee rules for SipSmart.

Every function here is pure: it reads its inputs and a ``GamificationConfig``
and returns a value. Services build the config once from settings with
``get_gamification_config()``; tests construct alternate configs directly.
"""

import enum
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Optional

from libs.common.config import Settings, get_settings
from libs.common.currency import round_vnd
from libs.common.datetime_utils import ensure_utc


class RankLevel(str, enum.Enum):
    """Ordered rank tiers. Comparison follows tier order, not the string value."""

    SEED = "seed"
    SPROUT = "sprout"
    SAPLING = "sapling"
    TREE = "tree"
    FOREST = "forest"

    @property
    def order(self) -> int:
        return _RANK_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, RankLevel):
            return NotImplemented
        return self.order < other.order

    def __le__(self, other):
        if not isinstance(other, RankLevel):
            return NotImplemented
        return self.order <= other.order

    def __gt__(self, other):
        if not isinstance(other, RankLevel):
            return NotImplemented
        return self.order > other.order

    def __ge__(self, other):
        if not isinstance(other, RankLevel):
            return NotImplemented
        return self.order >= other.order


_RANK_ORDER = [
    RankLevel.SEED,
    RankLevel.SPROUT,
    RankLevel.SAPLING,
    RankLevel.TREE,
    RankLevel.FOREST,
]

# Minimum lifetime points per tier.
RANK_THRESHOLDS: dict[RankLevel, int] = {
    RankLevel.SEED: 0,
    RankLevel.SPROUT: 100,
    RankLevel.SAPLING: 500,
    RankLevel.TREE: 2000,
    RankLevel.FOREST: 5000,
}

# Concurrent cups a user may hold per tier.
BORROW_LIMITS: dict[RankLevel, int] = {
    RankLevel.SEED: 1,
    RankLevel.SPROUT: 2,
    RankLevel.SAPLING: 2,
    RankLevel.TREE: 3,
    RankLevel.FOREST: 5,
}

RANK_LABELS_VI: dict[RankLevel, str] = {
    RankLevel.SEED: "Hạt giống",
    RankLevel.SPROUT: "Mầm non",
    RankLevel.SAPLING: "Cây non",
    RankLevel.TREE: "Cây trưởng thành",
    RankLevel.FOREST: "Rừng xanh",
}

# E-bike fare table: planned hours -> VND.
EBIKE_FARES: dict[int, int] = {1: 20000, 3: 45000, 5: 80000, 24: 120000}


@dataclass(frozen=True)
class GamificationConfig:
    deposit_amount: int = 10000
    borrow_discount: int = 3000
    borrow_duration: timedelta = timedelta(hours=24)
    points_speed_return: int = 200
    points_on_time: int = 50
    points_late: int = 20
    speed_return_window: timedelta = timedelta(hours=1)
    late_fee: int = 5000
    late_fee_window: timedelta = timedelta(hours=24)
    streak_voucher_after: int = 5
    streak_voucher_discount_percent: int = 10
    commission_rate: float = 0.001
    ebike_fares: dict = field(default_factory=lambda: dict(EBIKE_FARES))

    @classmethod
    def from_settings(cls, settings: Settings) -> "GamificationConfig":
        return cls(
            deposit_amount=settings.DEPOSIT_AMOUNT,
            borrow_discount=settings.BORROW_DISCOUNT,
            borrow_duration=timedelta(hours=settings.BORROW_DURATION_HOURS),
            points_speed_return=settings.POINTS_SPEED_RETURN,
            points_on_time=settings.POINTS_RETURN_ON_TIME,
            points_late=settings.POINTS_RETURN_LATE,
            speed_return_window=timedelta(minutes=settings.SPEED_RETURN_MINUTES),
            late_fee=settings.LATE_FEE_24_48,
            late_fee_window=timedelta(hours=settings.LATE_FEE_WINDOW_HOURS),
            streak_voucher_after=settings.STREAK_VOUCHER_AFTER,
            streak_voucher_discount_percent=settings.STREAK_VOUCHER_DISCOUNT_PERCENT,
            commission_rate=settings.PLATFORM_COMMISSION_RATE,
        )


@lru_cache
def get_gamification_config() -> GamificationConfig:
    return GamificationConfig.from_settings(get_settings())


@dataclass(frozen=True)
class StreakVoucher:
    discount_percent: int
    streak_length: int


@dataclass(frozen=True)
class RankProgress:
    rank: RankLevel
    next_rank: Optional[RankLevel]
    points: int
    points_to_next: int
    progress_percent: int


# ---------------------------------------------------------------------------
# Cup returns
# ---------------------------------------------------------------------------


def compute_due_time(borrow_time: datetime, config: GamificationConfig) -> datetime:
    return ensure_utc(borrow_time) + config.borrow_duration


def is_overdue(due_time: datetime, at: datetime) -> bool:
    return ensure_utc(at) > ensure_utc(due_time)


def compute_return_points(
    borrow_time: datetime,
    return_time: datetime,
    due_time: datetime,
    config: GamificationConfig,
) -> int:
    """Speed tier, else on-time tier (due time inclusive), else late tier."""
    borrow_time = ensure_utc(borrow_time)
    return_time = ensure_utc(return_time)
    if return_time - borrow_time < config.speed_return_window:
        return config.points_speed_return
    if return_time <= ensure_utc(due_time):
        return config.points_on_time
    return config.points_late


def compute_late_fee(
    due_time: datetime, return_time: datetime, config: GamificationConfig
) -> int:
    """Zero when on time, the fixed fee within the first overdue window,
    the whole deposit beyond it."""
    overdue = ensure_utc(return_time) - ensure_utc(due_time)
    if overdue <= timedelta(0):
        return 0
    if overdue <= config.late_fee_window:
        return config.late_fee
    return config.deposit_amount


def compute_refund(deposit: int, late_fee: int) -> int:
    return max(0, deposit - late_fee)


def overdue_hours(due_time: datetime, at: datetime) -> int:
    seconds = (ensure_utc(at) - ensure_utc(due_time)).total_seconds()
    if seconds <= 0:
        return 0
    return math.ceil(seconds / 3600)


def compute_streak_voucher(
    consecutive_on_time_returns: int, config: GamificationConfig
) -> Optional[StreakVoucher]:
    """A voucher once the streak reaches the threshold; the caller resets the streak."""
    if config.streak_voucher_after <= 0:
        return None
    if consecutive_on_time_returns >= config.streak_voucher_after:
        return StreakVoucher(
            discount_percent=config.streak_voucher_discount_percent,
            streak_length=consecutive_on_time_returns,
        )
    return None


# ---------------------------------------------------------------------------
# Ranks
# ---------------------------------------------------------------------------


def compute_rank(total_green_points: int) -> RankLevel:
    rank = RankLevel.SEED
    for level in _RANK_ORDER:
        if total_green_points >= RANK_THRESHOLDS[level]:
            rank = level
    return rank


def borrow_limit(rank: RankLevel) -> int:
    return BORROW_LIMITS[rank]


def rank_progress(total_green_points: int) -> RankProgress:
    rank = compute_rank(total_green_points)
    idx = rank.order
    if idx == len(_RANK_ORDER) - 1:
        return RankProgress(rank, None, total_green_points, 0, 100)
    next_rank = _RANK_ORDER[idx + 1]
    floor_points = RANK_THRESHOLDS[rank]
    span = RANK_THRESHOLDS[next_rank] - floor_points
    percent = int((total_green_points - floor_points) * 100 / span)
    return RankProgress(
        rank=rank,
        next_rank=next_rank,
        points=total_green_points,
        points_to_next=RANK_THRESHOLDS[next_rank] - total_green_points,
        progress_percent=percent,
    )


# ---------------------------------------------------------------------------
# Fares and commission
# ---------------------------------------------------------------------------


def split_commission(amount: int, rate: float) -> tuple[int, int]:
    """Return ``(platform_commission, partner_amount)``; shares sum to ``amount``."""
    commission = round_vnd(amount * rate)
    return commission, amount - commission


def ebike_fare(planned_hours: int, config: GamificationConfig) -> Optional[int]:
    return config.ebike_fares.get(planned_hours)


def mobility_points(distance_km: float) -> int:
    """Green points for a bus/metro trip: 1 point per km, at least 1."""
    return max(1, int(distance_km))


def ebike_points(distance_km: float) -> int:
    """Flat green credit for an e-bike ride plus 1 point per 2 km."""
    return 5 + int(distance_km // 2)


# ---------------------------------------------------------------------------
# Mini-games and garden
# ---------------------------------------------------------------------------

GAME_TYPES = ("cup_catch", "eco_quiz")

TREE_GROWTH_PER_WATERING = 10
TREE_LEVEL_UP_AT = 100
TREE_LEVEL_UP_BONUS = 50


def game_reward(game_type: str, score: int) -> int:
    if game_type == "cup_catch":
        return min(50, score // 10)
    if game_type == "eco_quiz":
        return min(100, score * 5)
    return 0


def water_tree(level: int, growth: int) -> tuple[int, int, int]:
    """Return ``(level, growth, bonus_points)`` after one watering."""
    growth += TREE_GROWTH_PER_WATERING
    if growth >= TREE_LEVEL_UP_AT:
        return level + 1, growth - TREE_LEVEL_UP_AT, TREE_LEVEL_UP_BONUS
    return level, growth, 0
