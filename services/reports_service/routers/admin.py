"""Admin financial, usage and ESG reports."""

from typing import Literal

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.datetime_utils import Period, period_start
from libs.db.session import get_async_db
from services.reports_service.routers._helpers import report_csv
from services.reports_service.schemas import ESGReport, FeatureCounts, FinancialReport
from services.reports_service.services.aggregates import (
    esg_report,
    feature_counts,
    financial_report,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin/reports", tags=["admin-reports"])

ReportFormat = Literal["json", "csv"]


@router.get("/financial", response_model=FinancialReport)
async def get_financial_report(
    period: Period = "all",
    format: ReportFormat = Query("json"),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Revenue split into platform commission and partner share.

    Escrow is the current deposit total of open cup borrows and ignores the period.
    """
    report = await financial_report(db, period_start(period))
    if format == "csv":
        return report_csv(report, name="financial", period=period)
    return report


@router.get("/counts", response_model=FeatureCounts)
async def get_feature_counts(
    period: Period = "all",
    format: ReportFormat = Query("json"),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    report = await feature_counts(db, period_start(period))
    if format == "csv":
        return report_csv(report, name="counts", period=period)
    return report


@router.get("/esg", response_model=ESGReport)
async def get_esg_report(
    period: Period = "all",
    format: ReportFormat = Query("json"),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    report = await esg_report(db, period_start(period))
    if format == "csv":
        return report_csv(report, name="esg", period=period)
    return report
