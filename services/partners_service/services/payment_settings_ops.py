"""Payment provider credentials kept for the back-office."""

from typing import Optional

from libs.common.errors import NotFound
from services.partners_service.models import PaymentProvider, PaymentSetting
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

VISIBLE_SUFFIX = 4


def mask_value(value: str) -> str:
    """Replace everything but the last four characters with ``*``."""
    if len(value) <= VISIBLE_SUFFIX:
        return "*" * len(value)
    return "*" * (len(value) - VISIBLE_SUFFIX) + value[-VISIBLE_SUFFIX:]


def display_value(setting: PaymentSetting) -> str:
    return mask_value(setting.value) if setting.is_sensitive else setting.value


async def upsert_setting(
    db: AsyncSession,
    *,
    provider: PaymentProvider,
    key: str,
    value: str,
    is_sensitive: bool,
    updated_by: Optional[str] = None,
) -> PaymentSetting:
    result = await db.execute(
        select(PaymentSetting).where(
            PaymentSetting.provider == provider, PaymentSetting.key == key
        )
    )
    setting = result.scalar_one_or_none()
    if setting is None:
        setting = PaymentSetting(provider=provider, key=key)
        db.add(setting)
    setting.value = value
    setting.is_sensitive = is_sensitive
    setting.updated_by = updated_by
    await db.flush()
    return setting


async def delete_setting(db: AsyncSession, provider: PaymentProvider, key: str) -> None:
    result = await db.execute(
        select(PaymentSetting).where(
            PaymentSetting.provider == provider, PaymentSetting.key == key
        )
    )
    setting = result.scalar_one_or_none()
    if setting is None:
        raise NotFound("Payment setting not found")
    await db.delete(setting)
    await db.flush()
