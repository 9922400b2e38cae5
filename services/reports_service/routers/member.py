"""Personal environmental impact."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.datetime_utils import Period, period_start
from libs.db.session import get_async_db
from services.reports_service.schemas import PersonalImpact
from services.reports_service.services.aggregates import personal_impact
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/impact", response_model=PersonalImpact)
async def my_impact(
    period: Period = "all",
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await personal_impact(db, current_user.user_id, period_start(period))
