"""Environmental impact constants and conversions."""

import math
from dataclasses import dataclass

CO2_KG_PER_CUP = 0.05
PLASTIC_GRAMS_PER_CUP = 15
CO2_KG_PER_GREEN_KM = 0.15  # e-bike vs. motorbike
CO2_KG_PER_TRANSIT_KM = 0.12  # bus/metro vs. motorbike
CO2_KG_PER_TREE = 17  # absorbed by one tree per year


@dataclass(frozen=True)
class ImpactSummary:
    co2_saved_kg: float
    plastic_avoided_g: int
    trees_equivalent: int


def trees_equivalent(co2_kg: float) -> int:
    return math.floor(co2_kg / CO2_KG_PER_TREE)


def compute_co2_saved(
    cups_reused: int,
    km_traveled_green: float,
    co2_per_km: float = CO2_KG_PER_GREEN_KM,
) -> ImpactSummary:
    co2 = cups_reused * CO2_KG_PER_CUP + km_traveled_green * co2_per_km
    co2 = round(co2, 3)
    return ImpactSummary(
        co2_saved_kg=co2,
        plastic_avoided_g=cups_reused * PLASTIC_GRAMS_PER_CUP,
        trees_equivalent=trees_equivalent(co2),
    )


def trip_co2(distance_km: float, per_km: float) -> float:
    return round(distance_km * per_km, 3)
