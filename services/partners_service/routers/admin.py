"""Back-office: partner approval, contracts, redistribution and payment settings."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.errors import NotFound, StateConflict, ValidationFailed
from libs.db.session import atomic, get_async_db
from services.cups_service.models import PartnerStatus, Store
from services.cups_service.routers._helpers import store_to_response
from services.cups_service.schemas import StoreResponse
from services.cups_service.services.store_ops import get_store, store_inventory
from services.partners_service.models import (
    ContractStatus,
    PartnerContract,
    PaymentProvider,
    PaymentSetting,
    RedistributionOrder,
    RedistributionStatus,
)
from services.partners_service.schemas import (
    ContractCreate,
    ContractResponse,
    ContractUpdate,
    OrderCreate,
    OrderResponse,
    OrderSourceUpdate,
    PartnerStatusRequest,
    PaymentSettingResponse,
    PaymentSettingUpsert,
    RecommendationResponse,
)
from services.partners_service.services.partner_ops import set_partner_status
from services.partners_service.services.payment_settings_ops import (
    delete_setting,
    display_value,
    upsert_setting,
)
from services.partners_service.services.redistribution_ops import (
    advance_order,
    create_order,
    get_order,
    recommend_redistribution,
)
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin/partners", tags=["admin-partners"])
redistribution_router = APIRouter(prefix="/admin/redistribution", tags=["admin-redistribution"])


def _setting_response(setting: PaymentSetting) -> PaymentSettingResponse:
    return PaymentSettingResponse(
        id=setting.id,
        provider=setting.provider,
        key=setting.key,
        value=display_value(setting),
        is_sensitive=setting.is_sensitive,
        updated_by=setting.updated_by,
        updated_at=setting.updated_at,
    )


# ---------------------------------------------------------------------------
# Partners
# ---------------------------------------------------------------------------


@router.get("", response_model=list[StoreResponse])
async def list_partners(
    partner_status: Optional[PartnerStatus] = PartnerStatus.PENDING,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Partner applications, pending ones by default."""
    query = select(Store)
    if partner_status:
        query = query.where(Store.partner_status == partner_status)
    stores = list((await db.execute(query.order_by(Store.created_at))).scalars().all())
    inventory = await store_inventory(db, [store.id for store in stores])
    return [store_to_response(store, inventory[store.id]) for store in stores]


@router.post("/{store_id}/approve", response_model=StoreResponse)
async def approve_partner(
    store_id: uuid.UUID,
    body: Optional[PartnerStatusRequest] = None,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        store = await set_partner_status(
            db,
            store_id,
            PartnerStatus.ACTIVE,
            performed_by=admin.email or admin.user_id,
            reason=body.reason if body else None,
        )
    inventory = await store_inventory(db, [store.id])
    return store_to_response(store, inventory[store.id])


@router.post("/{store_id}/pause", response_model=StoreResponse)
async def pause_partner(
    store_id: uuid.UUID,
    body: Optional[PartnerStatusRequest] = None,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        store = await set_partner_status(
            db,
            store_id,
            PartnerStatus.PAUSED,
            performed_by=admin.email or admin.user_id,
            reason=body.reason if body else None,
        )
    inventory = await store_inventory(db, [store.id])
    return store_to_response(store, inventory[store.id])


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


@router.get("/contracts", response_model=list[ContractResponse])
async def list_contracts(
    store_id: Optional[uuid.UUID] = None,
    contract_status: Optional[ContractStatus] = None,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(PartnerContract)
    if store_id:
        query = query.where(PartnerContract.store_id == store_id)
    if contract_status:
        query = query.where(PartnerContract.status == contract_status)
    result = await db.execute(query.order_by(desc(PartnerContract.created_at)))
    return result.scalars().all()


@router.post(
    "/contracts", response_model=ContractResponse, status_code=status.HTTP_201_CREATED
)
async def create_contract(
    body: ContractCreate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        await get_store(db, body.store_id)
        contract = PartnerContract(
            **body.model_dump(), created_by=admin.email or admin.user_id
        )
        db.add(contract)
        await db.flush()
    await db.refresh(contract)
    return contract


@router.patch("/contracts/{contract_id}", response_model=ContractResponse)
async def update_contract(
    contract_id: uuid.UUID,
    body: ContractUpdate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        result = await db.execute(
            select(PartnerContract).where(PartnerContract.id == contract_id)
        )
        contract = result.scalar_one_or_none()
        if not contract:
            raise NotFound("Contract not found")
        for field, value in body.model_dump(exclude_unset=True).items():
            setattr(contract, field, value)
        if contract.end_date and contract.end_date < contract.start_date:
            raise ValidationFailed("end_date must not be before start_date")
        await db.flush()
    await db.refresh(contract)
    return contract


# ---------------------------------------------------------------------------
# Payment settings
# ---------------------------------------------------------------------------


@router.get("/payment-settings", response_model=list[PaymentSettingResponse])
async def list_payment_settings(
    provider: Optional[PaymentProvider] = None,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Sensitive values are masked; only the last four characters are shown."""
    query = select(PaymentSetting)
    if provider:
        query = query.where(PaymentSetting.provider == provider)
    result = await db.execute(query.order_by(PaymentSetting.provider, PaymentSetting.key))
    return [_setting_response(setting) for setting in result.scalars().all()]


@router.put("/payment-settings/{provider}/{key}", response_model=PaymentSettingResponse)
async def put_payment_setting(
    provider: PaymentProvider,
    key: str,
    body: PaymentSettingUpsert,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        setting = await upsert_setting(
            db,
            provider=provider,
            key=key,
            value=body.value,
            is_sensitive=body.is_sensitive,
            updated_by=admin.email or admin.user_id,
        )
    await db.refresh(setting)
    return _setting_response(setting)


@router.delete(
    "/payment-settings/{provider}/{key}", status_code=status.HTTP_204_NO_CONTENT
)
async def remove_payment_setting(
    provider: PaymentProvider,
    key: str,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        await delete_setting(db, provider, key)


# ---------------------------------------------------------------------------
# Redistribution
# ---------------------------------------------------------------------------


@redistribution_router.get("/orders", response_model=list[OrderResponse])
async def list_orders(
    order_status: Optional[RedistributionStatus] = None,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(RedistributionOrder)
    if order_status:
        query = query.where(RedistributionOrder.status == order_status)
    result = await db.execute(query.order_by(desc(RedistributionOrder.created_at)))
    return result.scalars().all()


@redistribution_router.post(
    "/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED
)
async def create_redistribution_order(
    body: OrderCreate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        order = await create_order(
            db,
            to_store_id=body.to_store_id,
            from_store_id=body.from_store_id,
            quantity=body.quantity,
            priority=body.priority,
            requested_by=admin.email or admin.user_id,
            notes=body.notes,
        )
    return order


@redistribution_router.patch("/orders/{order_id}/source", response_model=OrderResponse)
async def assign_order_source(
    order_id: uuid.UUID,
    body: OrderSourceUpdate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        order = await get_order(db, order_id)
        if order.status != RedistributionStatus.PENDING:
            raise StateConflict("Only pending orders can change source store")
        if body.from_store_id == order.to_store_id:
            raise ValidationFailed("Source and destination stores must differ")
        await get_store(db, body.from_store_id)
        order.from_store_id = body.from_store_id
        await db.flush()
    return order


@redistribution_router.post("/orders/{order_id}/dispatch", response_model=OrderResponse)
async def dispatch_order(
    order_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        order = await advance_order(db, order_id, RedistributionStatus.IN_TRANSIT)
    return order


@redistribution_router.post("/orders/{order_id}/complete", response_model=OrderResponse)
async def complete_order(
    order_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Deliver the order; cups move to the destination store atomically."""
    async with atomic(db):
        order = await advance_order(db, order_id, RedistributionStatus.COMPLETED)
    return order


@redistribution_router.post("/orders/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        order = await advance_order(db, order_id, RedistributionStatus.CANCELLED)
    return order


@redistribution_router.get("/recommendations", response_model=list[RecommendationResponse])
async def get_recommendations(
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    recommendations = await recommend_redistribution(db)
    return [
        RecommendationResponse(
            from_store_id=rec.from_store.id,
            from_store_name=rec.from_store.name,
            to_store_id=rec.to_store.id,
            to_store_name=rec.to_store.name,
            quantity=rec.quantity,
            distance_km=rec.distance_km,
            priority=rec.priority,
        )
        for rec in recommendations
    ]
