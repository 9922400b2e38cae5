"""Read-only rollups for the admin dashboards and personal impact.

Every sum is coalesced so empty tables report zeros instead of failing.
"""

from datetime import datetime
from typing import Optional

from libs.common.impact import CO2_KG_PER_CUP, PLASTIC_GRAMS_PER_CUP, trees_equivalent
from services.cups_service.models import OPEN_STATUSES, CupTransaction, CupTransactionStatus
from services.mobility_service.models import EbikeRental, GreenTrip, RentalStatus
from services.reports_service.schemas import (
    ESGReport,
    FeatureCounts,
    FinancialReport,
    PersonalImpact,
)
from services.wallet_service.models import TopupStatus, WalletTopup
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

# Rentals are paid at unlock, so active ones already count as revenue.
PAID_RENTAL_STATUSES = (RentalStatus.ACTIVE, RentalStatus.COMPLETED)


def _since(column, since: Optional[datetime]) -> list:
    return [column >= since] if since is not None else []


async def _scalar(db: AsyncSession, query) -> float:
    return (await db.execute(query)).scalar_one() or 0


async def financial_report(db: AsyncSession, since: Optional[datetime]) -> FinancialReport:
    rental_filter = [
        EbikeRental.status.in_(PAID_RENTAL_STATUSES),
        *_since(EbikeRental.created_at, since),
    ]
    rental_row = (
        await db.execute(
            select(
                func.coalesce(func.sum(EbikeRental.fare), 0),
                func.coalesce(func.sum(EbikeRental.platform_commission), 0),
                func.coalesce(func.sum(EbikeRental.partner_amount), 0),
            ).where(*rental_filter)
        )
    ).one()
    trip_row = (
        await db.execute(
            select(
                func.coalesce(func.sum(GreenTrip.fare), 0),
                func.coalesce(func.sum(GreenTrip.platform_commission), 0),
                func.coalesce(func.sum(GreenTrip.partner_amount), 0),
            ).where(*_since(GreenTrip.created_at, since))
        )
    ).one()

    # Escrow is a point-in-time figure: deposits currently held for open borrows.
    escrow = await _scalar(
        db,
        select(func.coalesce(func.sum(CupTransaction.deposit_amount), 0)).where(
            CupTransaction.status.in_(OPEN_STATUSES)
        ),
    )
    topups = await _scalar(
        db,
        select(func.coalesce(func.sum(WalletTopup.amount), 0)).where(
            WalletTopup.status == TopupStatus.COMPLETED,
            *_since(WalletTopup.completed_at, since),
        ),
    )

    ebike_revenue, ebike_commission, ebike_partner = (int(v) for v in rental_row)
    mobility_revenue, mobility_commission, mobility_partner = (int(v) for v in trip_row)
    return FinancialReport(
        total_revenue=ebike_revenue + mobility_revenue,
        ebike_revenue=ebike_revenue,
        mobility_revenue=mobility_revenue,
        platform_commission=ebike_commission + mobility_commission,
        partner_share=ebike_partner + mobility_partner,
        escrow_balance=int(escrow),
        completed_topups=int(topups),
    )


async def feature_counts(db: AsyncSession, since: Optional[datetime]) -> FeatureCounts:
    return FeatureCounts(
        cup_rentals=int(
            await _scalar(
                db,
                select(func.count(CupTransaction.id)).where(
                    CupTransaction.status != CupTransactionStatus.CANCELLED,
                    *_since(CupTransaction.borrow_time, since),
                ),
            )
        ),
        ebike_rentals=int(
            await _scalar(
                db,
                select(func.count(EbikeRental.id)).where(
                    EbikeRental.status.in_(PAID_RENTAL_STATUSES),
                    *_since(EbikeRental.created_at, since),
                ),
            )
        ),
        mobility_trips=int(
            await _scalar(
                db,
                select(func.count(GreenTrip.id)).where(*_since(GreenTrip.created_at, since)),
            )
        ),
        wallet_topups=int(
            await _scalar(
                db,
                select(func.count(WalletTopup.id)).where(
                    WalletTopup.status == TopupStatus.COMPLETED,
                    *_since(WalletTopup.completed_at, since),
                ),
            )
        ),
    )


async def _impact_totals(
    db: AsyncSession, since: Optional[datetime], auth_id: Optional[str] = None
) -> dict:
    cup_filter = [
        CupTransaction.status == CupTransactionStatus.COMPLETED,
        *_since(CupTransaction.return_time, since),
    ]
    rental_filter = [
        EbikeRental.status == RentalStatus.COMPLETED,
        *_since(EbikeRental.end_time, since),
    ]
    trip_filter = _since(GreenTrip.created_at, since)
    if auth_id is not None:
        cup_filter.append(CupTransaction.auth_id == auth_id)
        rental_filter.append(EbikeRental.auth_id == auth_id)
        trip_filter.append(GreenTrip.auth_id == auth_id)

    cups, cup_points = (
        await db.execute(
            select(
                func.count(CupTransaction.id),
                func.coalesce(func.sum(CupTransaction.points_earned), 0),
            ).where(*cup_filter)
        )
    ).one()
    rentals, rental_km, rental_co2, rental_points = (
        await db.execute(
            select(
                func.count(EbikeRental.id),
                func.coalesce(func.sum(EbikeRental.distance_km), 0),
                func.coalesce(func.sum(EbikeRental.co2_saved_kg), 0),
                func.coalesce(func.sum(EbikeRental.points_earned), 0),
            ).where(*rental_filter)
        )
    ).one()
    trips, trip_km, trip_co2, trip_points = (
        await db.execute(
            select(
                func.count(GreenTrip.id),
                func.coalesce(func.sum(GreenTrip.distance_km), 0),
                func.coalesce(func.sum(GreenTrip.co2_saved_kg), 0),
                func.coalesce(func.sum(GreenTrip.points_earned), 0),
            ).where(*trip_filter)
        )
    ).one()

    mobility_co2 = float(rental_co2) + float(trip_co2)
    cup_co2 = cups * CO2_KG_PER_CUP
    return {
        "cups": int(cups),
        "rentals": int(rentals),
        "trips": int(trips),
        "distance_km": round(float(rental_km) + float(trip_km), 1),
        "mobility_co2": round(mobility_co2, 3),
        "cup_co2": round(cup_co2, 3),
        "points": int(cup_points) + int(rental_points) + int(trip_points),
    }


async def esg_report(db: AsyncSession, since: Optional[datetime]) -> ESGReport:
    totals = await _impact_totals(db, since)
    co2 = round(totals["mobility_co2"] + totals["cup_co2"], 3)
    return ESGReport(
        co2_saved_kg=co2,
        co2_from_mobility_kg=totals["mobility_co2"],
        co2_from_cups_kg=totals["cup_co2"],
        plastic_avoided_g=totals["cups"] * PLASTIC_GRAMS_PER_CUP,
        trees_equivalent=trees_equivalent(co2),
        cups_reused=totals["cups"],
        green_distance_km=totals["distance_km"],
    )


async def personal_impact(
    db: AsyncSession, auth_id: str, since: Optional[datetime]
) -> PersonalImpact:
    totals = await _impact_totals(db, since, auth_id=auth_id)
    co2 = round(totals["mobility_co2"] + totals["cup_co2"], 3)
    return PersonalImpact(
        co2_saved_kg=co2,
        plastic_avoided_g=totals["cups"] * PLASTIC_GRAMS_PER_CUP,
        trees_equivalent=trees_equivalent(co2),
        total_distance_km=totals["distance_km"],
        total_points=totals["points"],
        cups_saved=totals["cups"],
        ebike_rentals=totals["rentals"],
        green_trips=totals["trips"],
    )
