"""WalletTransaction: append-only VND ledger, one row per balance change."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import JSONType, UTCDateTime
from services.wallet_service.models.enums import (
    TransactionDirection,
    TransactionType,
    enum_values,
)
from sqlalchemy import CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class WalletTransaction(Base):
    __tablename__ = "wallet_transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    wallet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("wallets.id"), nullable=False, index=True
    )
    # e.g. "cup-deposit-<txn id>", "topup-TOP-XXXXXX"
    idempotency_key: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    transaction_type: Mapped[TransactionType] = mapped_column(
        SAEnum(
            TransactionType,
            name="transaction_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    direction: Mapped[TransactionDirection] = mapped_column(
        SAEnum(
            TransactionDirection,
            name="transaction_direction_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_before: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)

    # What the money moved for: cup_transaction, ebike_rental, green_trip, topup
    reference_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    reference_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    performed_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    details: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )

    wallet: Mapped["Wallet"] = relationship(  # noqa: F821
        back_populates="transactions", lazy="noload"
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_wallet_transaction_amount_positive"),
        CheckConstraint("balance_after >= 0", name="ck_wallet_transaction_balance_after"),
        Index("ix_wallet_transactions_reference", "reference_type", "reference_id"),
        Index("ix_wallet_transactions_wallet_created", "wallet_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<WalletTransaction {self.transaction_type.value} "
            f"{self.direction.value} {self.amount}>"
        )
