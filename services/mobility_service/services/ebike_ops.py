"""E-bike unlock and return.

Unlock moves a rental ``requested -> active`` after the bike is claimed with
a conditional update and the fare is debited; return moves it
``active -> completed`` and docks the bike. Both run inside the caller's
``atomic`` block.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from libs.common.currency import format_vnd
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    InsufficientBalance,
    NotFound,
    PermissionDenied,
    StateConflict,
    ValidationFailed,
)
from libs.common.gamification import (
    GamificationConfig,
    ebike_fare,
    ebike_points,
    get_gamification_config,
    split_commission,
)
from libs.common.impact import CO2_KG_PER_GREEN_KM, trip_co2
from libs.common.lifecycle import ensure_transition
from libs.common.logging import get_logger
from libs.db.session import conditional_update
from services.kyc_service.services.verification_ops import require_verified
from services.mobility_service.models import (
    BikeStatus,
    Ebike,
    EbikeRental,
    EbikeStation,
    RentalStatus,
)
from services.rewards_service.models import RequirementType
from services.rewards_service.services.challenge_ops import record_progress
from services.users_service.models import NotificationType, PointSource, UserProfile
from services.users_service.services.profile_ops import (
    award_points,
    ensure_not_blacklisted,
    notify,
)
from services.wallet_service.models import TransactionType
from services.wallet_service.services.wallet_ops import (
    check_balance,
    debit_wallet,
    get_wallet_by_auth_id,
)
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass
class UnlockResult:
    rental: EbikeRental
    bike: Ebike
    balance: int
    message: str


async def get_station(db: AsyncSession, station_id: uuid.UUID) -> EbikeStation:
    result = await db.execute(select(EbikeStation).where(EbikeStation.id == station_id))
    station = result.scalar_one_or_none()
    if not station:
        raise NotFound("Station not found")
    return station


async def get_bike_by_code(db: AsyncSession, bike_code: str) -> Ebike:
    result = await db.execute(select(Ebike).where(Ebike.bike_code == bike_code))
    bike = result.scalar_one_or_none()
    if not bike:
        raise NotFound("Bike not found")
    return bike


async def docked_bikes(db: AsyncSession, station_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count()).select_from(Ebike).where(Ebike.station_id == station_id)
    )
    return result.scalar() or 0


def _rental_in_progress() -> StateConflict:
    return StateConflict(
        "Bạn đang có một chuyến xe chưa kết thúc. Vui lòng trả xe trước.",
        code="active_rental_exists",
    )


async def get_active_rental(db: AsyncSession, auth_id: str) -> Optional[EbikeRental]:
    result = await db.execute(
        select(EbikeRental).where(
            EbikeRental.auth_id == auth_id,
            EbikeRental.status.in_((RentalStatus.REQUESTED, RentalStatus.ACTIVE)),
        )
    )
    return result.scalars().first()


# ---------------------------------------------------------------------------
# Unlock
# ---------------------------------------------------------------------------


async def unlock_bike(
    db: AsyncSession,
    profile: UserProfile,
    *,
    bike_code: str,
    station_id: uuid.UUID,
    planned_hours: int,
    config: Optional[GamificationConfig] = None,
) -> UnlockResult:
    config = config or get_gamification_config()
    auth_id = profile.auth_id

    ensure_not_blacklisted(profile)
    await require_verified(db, auth_id)

    if await get_active_rental(db, auth_id):
        raise _rental_in_progress()

    fare = ebike_fare(planned_hours, config)
    if fare is None:
        raise ValidationFailed(
            f"Thời gian thuê không hợp lệ. Chọn một trong: "
            f"{', '.join(str(h) for h in sorted(config.ebike_fares))} giờ"
        )

    station = await get_station(db, station_id)
    if not station.is_active:
        raise StateConflict("Trạm hiện không hoạt động", code="station_inactive")
    bike = await get_bike_by_code(db, bike_code)
    if bike.status != BikeStatus.AVAILABLE or bike.station_id != station.id:
        raise StateConflict("Xe hiện không có sẵn tại trạm này", code="bike_not_available")

    sufficient, balance = await check_balance(db, auth_id, fare)
    if not sufficient:
        raise InsufficientBalance(
            f"Số dư không đủ. Cần {format_vnd(fare)}, hiện có {format_vnd(balance)}.",
            extra={"required": fare, "balance": balance},
        )

    rental = EbikeRental(
        auth_id=auth_id,
        bike_id=bike.id,
        start_station_id=station.id,
        status=RentalStatus.REQUESTED,
        planned_hours=planned_hours,
        fare=fare,
    )
    db.add(rental)
    try:
        await db.flush()
    except IntegrityError:
        # A parallel unlock opened a rental first
        raise _rental_in_progress() from None

    claimed = await conditional_update(
        db,
        Ebike,
        Ebike.id == bike.id,
        Ebike.status == BikeStatus.AVAILABLE,
        Ebike.station_id == station.id,
        status=BikeStatus.IN_USE,
        is_locked=False,
        station_id=None,
    )
    await db.refresh(bike)
    if not claimed:
        raise StateConflict("Xe vừa được người khác thuê", code="bike_not_available")

    await debit_wallet(
        db,
        auth_id=auth_id,
        amount=fare,
        idempotency_key=f"ebike-fare-{rental.id}",
        transaction_type=TransactionType.EBIKE_FARE,
        description=f"Thuê xe đạp điện {bike.bike_code} ({planned_hours} giờ)",
        reference_type="ebike_rental",
        reference_id=str(rental.id),
    )

    commission, partner_amount = split_commission(fare, config.commission_rate)
    ensure_transition("rental", rental.status, RentalStatus.ACTIVE)
    rental.status = RentalStatus.ACTIVE
    rental.start_time = utc_now()
    rental.platform_commission = commission
    rental.partner_amount = partner_amount
    await db.flush()

    await notify(
        db,
        auth_id,
        "Xe đã mở khóa!",
        f"Chuyến đi của bạn đã bắt đầu. Phí: {format_vnd(fare)}.",
        NotificationType.SYSTEM,
    )
    wallet = await get_wallet_by_auth_id(db, auth_id)
    logger.info(
        "User %s unlocked bike %s at station %s (rental=%s, fare=%d)",
        auth_id,
        bike.bike_code,
        station.id,
        rental.id,
        fare,
    )
    return UnlockResult(
        rental=rental,
        bike=bike,
        balance=wallet.balance,
        message=f"Mở khóa thành công! Đã thanh toán {format_vnd(fare)}.",
    )


# ---------------------------------------------------------------------------
# Return
# ---------------------------------------------------------------------------


async def return_bike(
    db: AsyncSession,
    profile: UserProfile,
    *,
    rental_id: uuid.UUID,
    station_id: uuid.UUID,
    distance_km: float,
    battery_level: Optional[int] = None,
) -> EbikeRental:
    auth_id = profile.auth_id

    result = await db.execute(select(EbikeRental).where(EbikeRental.id == rental_id))
    rental = result.scalar_one_or_none()
    if not rental:
        raise NotFound("Rental not found")
    if rental.auth_id != auth_id:
        raise PermissionDenied("This rental does not belong to you")
    if rental.status != RentalStatus.ACTIVE:
        raise StateConflict("Rental already completed", code="rental_not_active")

    station = await get_station(db, station_id)
    if not station.is_active:
        raise StateConflict("Trạm hiện không hoạt động", code="station_inactive")
    if await docked_bikes(db, station.id) >= station.total_slots:
        raise StateConflict("Trạm đã hết chỗ trống", code="station_full")

    now = utc_now()
    co2 = trip_co2(distance_km, CO2_KG_PER_GREEN_KM)
    points = ebike_points(distance_km)

    ensure_transition("rental", rental.status, RentalStatus.COMPLETED)
    completed = await conditional_update(
        db,
        EbikeRental,
        EbikeRental.id == rental.id,
        EbikeRental.status == RentalStatus.ACTIVE,
        status=RentalStatus.COMPLETED,
        end_station_id=station.id,
        end_time=now,
        distance_km=distance_km,
        co2_saved_kg=co2,
        points_earned=points,
    )
    await db.refresh(rental)
    if not completed:
        raise StateConflict("Rental already completed", code="rental_not_active")

    bike_values = dict(
        status=BikeStatus.AVAILABLE,
        is_locked=True,
        station_id=station.id,
        total_km=Ebike.total_km + distance_km,
    )
    if battery_level is not None:
        bike_values["battery_level"] = battery_level
    await conditional_update(db, Ebike, Ebike.id == rental.bike_id, **bike_values)

    await award_points(
        db,
        profile,
        points,
        source=PointSource.EBIKE_RIDE,
        description=f"Đi xe đạp điện {distance_km:g} km",
        reference_id=str(rental.id),
    )
    await record_progress(db, auth_id, RequirementType.TRIPS)
    await record_progress(db, auth_id, RequirementType.POINTS, points)
    await notify(
        db,
        auth_id,
        "Trả xe thành công",
        f"Bạn đã đi {distance_km:g} km, tiết kiệm {co2:g} kg CO₂ và nhận {points} điểm xanh.",
        NotificationType.SYSTEM,
    )
    logger.info(
        "User %s returned rental %s at station %s (%.1f km)",
        auth_id,
        rental.id,
        station.id,
        distance_km,
    )
    return rental
