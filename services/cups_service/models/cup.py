"""Reusable cups and borrow/return transactions."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.cups_service.models.enums import (
    CupMaterial,
    CupStatus,
    CupTransactionStatus,
    enum_values,
)
from sqlalchemy import CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class Cup(Base):
    """A physical cup identified by the 8-digit id printed in its QR code."""

    __tablename__ = "cups"

    id: Mapped[str] = mapped_column(String(8), primary_key=True)
    material: Mapped[CupMaterial] = mapped_column(
        SAEnum(
            CupMaterial,
            name="cup_material_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=CupMaterial.PP_PLASTIC,
        nullable=False,
    )
    status: Mapped[CupStatus] = mapped_column(
        SAEnum(
            CupStatus,
            name="cup_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=CupStatus.AVAILABLE,
        nullable=False,
        index=True,
    )
    # Null while the cup is with a borrower
    current_store_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("stores.id"), nullable=True, index=True
    )
    current_transaction_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, nullable=True
    )
    total_uses: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_cleaned_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("total_uses >= 0", name="ck_cup_total_uses_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Cup {self.id} ({self.status.value})>"


class CupTransaction(Base):
    """One borrow of one cup, from borrow until return or admin override."""

    __tablename__ = "cup_transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    auth_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    cup_id: Mapped[str] = mapped_column(
        String(8), ForeignKey("cups.id"), nullable=False, index=True
    )
    borrow_store_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("stores.id"), nullable=False
    )
    return_store_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("stores.id"), nullable=True
    )
    status: Mapped[CupTransactionStatus] = mapped_column(
        SAEnum(
            CupTransactionStatus,
            name="cup_transaction_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=CupTransactionStatus.ONGOING,
        nullable=False,
        index=True,
    )
    borrow_time: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    due_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)
    return_time: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    deposit_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_amount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    late_fee: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    refund_amount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    points_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("deposit_amount >= 0", name="ck_cup_txn_deposit_non_negative"),
        CheckConstraint("late_fee >= 0", name="ck_cup_txn_late_fee_non_negative"),
        CheckConstraint("refund_amount >= 0", name="ck_cup_txn_refund_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<CupTransaction {self.id} cup={self.cup_id} ({self.status.value})>"
