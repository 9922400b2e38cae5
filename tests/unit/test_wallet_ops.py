"""Unit tests for wallet_ops core business logic.

Tests call wallet_ops functions directly with the db_session fixture.
No HTTP layer involved, only business logic validation.
"""

import uuid

import pytest
from libs.common.errors import InsufficientBalance, NotFound, StateConflict
from services.wallet_service.models import (
    PaymentMethod,
    TopupStatus,
    TransactionDirection,
    TransactionType,
    WalletStatus,
)
from services.wallet_service.services.topup_ops import confirm_topup, initiate_topup
from services.wallet_service.services.wallet_ops import (
    check_balance,
    credit_wallet,
    debit_wallet,
    get_or_create_wallet,
    get_wallet_by_auth_id,
)
from tests.factories import WalletFactory


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _make_active_wallet(db, balance=20000, auth_id=None):
    """Insert an active wallet directly and return it."""
    wallet = WalletFactory.create(
        auth_id=auth_id or f"auth-{uuid.uuid4().hex[:8]}",
        balance=balance,
        lifetime_topped_up=balance,
    )
    db.add(wallet)
    await db.commit()
    await db.refresh(wallet)
    return wallet


def _key(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


# ---------------------------------------------------------------------------
# get_or_create_wallet
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_new_wallet_starts_empty(db_session):
    wallet = await get_or_create_wallet(db_session, "auth-new")

    assert wallet.balance == 0
    assert wallet.status == WalletStatus.ACTIVE


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_or_create_wallet_idempotent(db_session):
    """Creating a wallet twice for the same user returns the existing one."""
    wallet1 = await get_or_create_wallet(db_session, "auth-twice")
    wallet2 = await get_or_create_wallet(db_session, "auth-twice")

    assert wallet1.id == wallet2.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_missing_wallet_raises_not_found(db_session):
    with pytest.raises(NotFound):
        await get_wallet_by_auth_id(db_session, "nobody")


# ---------------------------------------------------------------------------
# debit_wallet
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_debit_wallet_success(db_session):
    """Successful debit decreases balance and records snapshots."""
    wallet = await _make_active_wallet(db_session, balance=20000)

    txn = await debit_wallet(
        db_session,
        auth_id=wallet.auth_id,
        amount=10000,
        idempotency_key=_key("debit"),
        transaction_type=TransactionType.CUP_DEPOSIT,
        description="Đặt cọc ly",
    )

    assert txn.direction == TransactionDirection.DEBIT
    assert txn.amount == 10000
    assert txn.balance_before == 20000
    assert txn.balance_after == 10000
    assert txn.performed_by is None

    await db_session.refresh(wallet)
    assert wallet.balance == 10000
    assert wallet.lifetime_spent == 10000


@pytest.mark.asyncio
@pytest.mark.unit
async def test_debit_wallet_insufficient_balance(db_session):
    """Debit more than the balance raises with required/balance details."""
    wallet = await _make_active_wallet(db_session, balance=5000)

    with pytest.raises(InsufficientBalance) as exc_info:
        await debit_wallet(
            db_session,
            auth_id=wallet.auth_id,
            amount=10000,
            idempotency_key=_key("debit"),
            transaction_type=TransactionType.CUP_DEPOSIT,
            description="Too expensive",
        )

    assert exc_info.value.status_code == 400
    assert exc_info.value.extra == {"required": 10000, "balance": 5000}
    assert "10.000₫" in exc_info.value.message


@pytest.mark.asyncio
@pytest.mark.unit
async def test_debit_wallet_frozen(db_session):
    """Debit on a frozen wallet is refused."""
    wallet = await _make_active_wallet(db_session, balance=20000)
    wallet.status = WalletStatus.FROZEN
    await db_session.commit()

    with pytest.raises(StateConflict) as exc_info:
        await debit_wallet(
            db_session,
            auth_id=wallet.auth_id,
            amount=1000,
            idempotency_key=_key("debit"),
            transaction_type=TransactionType.EBIKE_FARE,
            description="Should fail",
        )

    assert exc_info.value.code == "wallet_frozen"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_debit_wallet_idempotency(db_session):
    """Replaying the same idempotency key returns the existing transaction."""
    wallet = await _make_active_wallet(db_session, balance=20000)
    key = _key("debit")

    txn1 = await debit_wallet(
        db_session,
        auth_id=wallet.auth_id,
        amount=5000,
        idempotency_key=key,
        transaction_type=TransactionType.MOBILITY_FARE,
        description="First",
    )
    txn2 = await debit_wallet(
        db_session,
        auth_id=wallet.auth_id,
        amount=5000,
        idempotency_key=key,
        transaction_type=TransactionType.MOBILITY_FARE,
        description="Replay",
    )

    assert txn1.id == txn2.id

    # Balance should only be debited once
    await db_session.refresh(wallet)
    assert wallet.balance == 15000


# ---------------------------------------------------------------------------
# credit_wallet
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_credit_topup_counts_as_topped_up(db_session):
    wallet = await _make_active_wallet(db_session, balance=10000)

    txn = await credit_wallet(
        db_session,
        auth_id=wallet.auth_id,
        amount=50000,
        idempotency_key=_key("credit"),
        transaction_type=TransactionType.TOPUP,
        description="Nạp tiền",
    )

    assert txn.direction == TransactionDirection.CREDIT
    assert txn.balance_before == 10000
    assert txn.balance_after == 60000

    await db_session.refresh(wallet)
    assert wallet.lifetime_topped_up == 60000
    assert wallet.lifetime_received == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_credit_refund_counts_as_received(db_session):
    wallet = await _make_active_wallet(db_session, balance=0)

    await credit_wallet(
        db_session,
        auth_id=wallet.auth_id,
        amount=10000,
        idempotency_key=_key("refund"),
        transaction_type=TransactionType.DEPOSIT_REFUND,
        description="Hoàn cọc",
    )

    await db_session.refresh(wallet)
    assert wallet.balance == 10000
    assert wallet.lifetime_received == 10000


@pytest.mark.asyncio
@pytest.mark.unit
async def test_credit_wallet_frozen_receives_credit(db_session):
    """Frozen wallets can still receive credits (deposit refunds)."""
    wallet = await _make_active_wallet(db_session, balance=0)
    wallet.status = WalletStatus.FROZEN
    await db_session.commit()

    txn = await credit_wallet(
        db_session,
        auth_id=wallet.auth_id,
        amount=10000,
        idempotency_key=_key("refund"),
        transaction_type=TransactionType.DEPOSIT_REFUND,
        description="Refund to frozen wallet",
    )

    assert txn.balance_after == 10000


# ---------------------------------------------------------------------------
# check_balance
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_check_balance(db_session):
    wallet = await _make_active_wallet(db_session, balance=10000)

    assert await check_balance(db_session, wallet.auth_id, 10000) == (True, 10000)
    assert await check_balance(db_session, wallet.auth_id, 10001) == (False, 10000)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_check_balance_without_wallet_is_zero(db_session):
    assert await check_balance(db_session, "no-wallet", 1) == (False, 0)


# ---------------------------------------------------------------------------
# Top-ups
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_topup_confirm_credits_once(db_session):
    topup = await initiate_topup(
        db_session, auth_id="auth-topup", amount=50000, payment_method=PaymentMethod.MOMO
    )
    assert topup.status == TopupStatus.PENDING
    assert topup.reference.startswith("TOP-")

    await confirm_topup(db_session, topup, payment_reference="MOMO-1", confirmed_by="admin")

    assert topup.status == TopupStatus.COMPLETED
    wallet = await get_wallet_by_auth_id(db_session, "auth-topup")
    assert wallet.balance == 50000

    with pytest.raises(StateConflict):
        await confirm_topup(
            db_session, topup, payment_reference="MOMO-1", confirmed_by="admin"
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_credit_records_reference_and_details(db_session):
    wallet = await _make_active_wallet(db_session, balance=0)

    txn = await credit_wallet(
        db_session,
        auth_id=wallet.auth_id,
        amount=9000,
        idempotency_key=_key("refund"),
        transaction_type=TransactionType.DEPOSIT_REFUND,
        description="Hoàn cọc trễ hạn",
        reference_type="cup_transaction",
        reference_id="txn-1",
        performed_by="admin@sipsmart.vn",
        details={"late_fee": 1000},
    )

    assert txn.reference_type == "cup_transaction"
    assert txn.reference_id == "txn-1"
    assert txn.performed_by == "admin@sipsmart.vn"
    assert txn.details == {"late_fee": 1000}
