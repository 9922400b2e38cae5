"""Scan-and-pay for bus and metro rides at transport partners."""

import uuid
from dataclasses import dataclass
from typing import Optional

from libs.common.currency import format_vnd
from libs.common.errors import InsufficientBalance, StateConflict, ValidationFailed
from libs.common.gamification import (
    GamificationConfig,
    get_gamification_config,
    mobility_points,
    split_commission,
)
from libs.common.impact import CO2_KG_PER_TRANSIT_KM, trip_co2
from libs.common.logging import get_logger
from services.cups_service.models import PartnerStatus, PartnerType
from services.cups_service.services.store_ops import get_store
from services.mobility_service.models import GreenTrip, TripType
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
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass(frozen=True)
class RouteInfo:
    origin: str
    destination: str
    distance_km: float
    route_name: Optional[str] = None
    vehicle_number: Optional[str] = None


@dataclass
class TripResult:
    trip: GreenTrip
    balance: int


async def pay_green_trip(
    db: AsyncSession,
    profile: UserProfile,
    *,
    partner_id: uuid.UUID,
    trip_type: TripType,
    fare: int,
    route: RouteInfo,
    config: Optional[GamificationConfig] = None,
) -> TripResult:
    config = config or get_gamification_config()
    auth_id = profile.auth_id

    ensure_not_blacklisted(profile)
    partner = await get_store(db, partner_id)
    if partner.partner_type != PartnerType.TRANSPORT:
        raise ValidationFailed("Invalid transport partner")
    if partner.partner_status != PartnerStatus.ACTIVE:
        raise StateConflict("Đối tác hiện không hoạt động", code="store_inactive")

    sufficient, balance = await check_balance(db, auth_id, fare)
    if not sufficient:
        raise InsufficientBalance(
            f"Số dư không đủ. Cần {format_vnd(fare)}, hiện có {format_vnd(balance)}.",
            extra={"required": fare, "balance": balance},
        )

    commission, partner_amount = split_commission(fare, config.commission_rate)
    co2 = trip_co2(route.distance_km, CO2_KG_PER_TRANSIT_KM)
    points = mobility_points(route.distance_km)

    trip = GreenTrip(
        id=uuid.uuid4(),
        auth_id=auth_id,
        partner_store_id=partner.id,
        trip_type=trip_type,
        origin=route.origin,
        destination=route.destination,
        route_name=route.route_name,
        vehicle_number=route.vehicle_number,
        distance_km=route.distance_km,
        fare=fare,
        platform_commission=commission,
        partner_amount=partner_amount,
        co2_saved_kg=co2,
        points_earned=points,
    )

    await debit_wallet(
        db,
        auth_id=auth_id,
        amount=fare,
        idempotency_key=f"green-trip-{trip.id}",
        transaction_type=TransactionType.MOBILITY_FARE,
        description=f"Vé {trip_type.value} {partner.name}: {route.origin} → {route.destination}",
        reference_type="green_trip",
        reference_id=str(trip.id),
    )
    db.add(trip)
    await db.flush()

    await award_points(
        db,
        profile,
        points,
        source=PointSource.GREEN_TRIP,
        description=f"Đi {trip_type.value} {route.distance_km:g} km",
        reference_id=str(trip.id),
    )
    await record_progress(db, auth_id, RequirementType.TRIPS)
    await record_progress(db, auth_id, RequirementType.POINTS, points)
    await notify(
        db,
        auth_id,
        "Thanh toán chuyến đi xanh",
        f"Bạn đã tiết kiệm {co2:g} kg CO₂ và nhận {points} điểm xanh.",
        NotificationType.SYSTEM,
    )

    wallet = await get_wallet_by_auth_id(db, auth_id)
    logger.info(
        "User %s paid %d for %s trip with partner %s (trip=%s)",
        auth_id,
        fare,
        trip_type.value,
        partner.id,
        trip.id,
    )
    return TripResult(trip=trip, balance=wallet.balance)
