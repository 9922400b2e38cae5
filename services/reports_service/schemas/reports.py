"""Report payloads. Amounts are whole VND."""

from pydantic import BaseModel


class FinancialReport(BaseModel):
    total_revenue: int = 0
    ebike_revenue: int = 0
    mobility_revenue: int = 0
    platform_commission: int = 0
    partner_share: int = 0
    escrow_balance: int = 0
    completed_topups: int = 0


class FeatureCounts(BaseModel):
    cup_rentals: int = 0
    ebike_rentals: int = 0
    mobility_trips: int = 0
    wallet_topups: int = 0


class ESGReport(BaseModel):
    co2_saved_kg: float = 0
    co2_from_mobility_kg: float = 0
    co2_from_cups_kg: float = 0
    plastic_avoided_g: int = 0
    trees_equivalent: int = 0
    cups_reused: int = 0
    green_distance_km: float = 0


class PersonalImpact(BaseModel):
    co2_saved_kg: float = 0
    plastic_avoided_g: int = 0
    trees_equivalent: int = 0
    total_distance_km: float = 0
    total_points: int = 0
    cups_saved: int = 0
    ebike_rentals: int = 0
    green_trips: int = 0
