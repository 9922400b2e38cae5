"""WalletTopup model: top-up requests confirmed by an admin or payment callback."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.wallet_service.models.enums import PaymentMethod, TopupStatus, enum_values
from sqlalchemy import CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class WalletTopup(Base):
    __tablename__ = "wallet_topups"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    wallet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("wallets.id"), nullable=False, index=True
    )
    auth_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    reference: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(
            PaymentMethod,
            name="topup_payment_method_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    status: Mapped[TopupStatus] = mapped_column(
        SAEnum(
            TopupStatus,
            name="topup_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=TopupStatus.PENDING,
        nullable=False,
    )
    payment_reference: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    failed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    failure_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("amount >= 10000", name="ck_topup_min_amount"),
        CheckConstraint("amount <= 10000000", name="ck_topup_max_amount"),
    )

    def __repr__(self) -> str:
        return f"<WalletTopup {self.id} {self.amount} {self.status.value}>"
