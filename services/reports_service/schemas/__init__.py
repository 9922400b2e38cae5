"""Reports Service schemas package."""

from services.reports_service.schemas.reports import (  # noqa: F401
    ESGReport,
    FeatureCounts,
    FinancialReport,
    PersonalImpact,
)

__all__ = [
    "ESGReport",
    "FeatureCounts",
    "FinancialReport",
    "PersonalImpact",
]
