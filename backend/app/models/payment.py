from __future__ import annotations
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Numeric, DateTime, Uuid
import uuid
from app.db import Base
from app.models.user import _utcnow

class PaymentRecord(Base):
    """
    Reconciled checkout payment (one per provider transaction).
    Sequential integer ids: the repair pass keeps the lowest id of a duplicate group.
    transaction_id uniqueness is installed by app.services.maintenance, not declared here,
    so the repair can collapse legacy duplicates before the index exists.
    """
    __tablename__ = "payment_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    contest_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)
    contest_name: Mapped[str | None] = mapped_column(String(160))
    user_email: Mapped[str] = mapped_column(String(320), index=True, nullable=False)
    amount: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)  # major units (USD)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="usd")
    tracking_id: Mapped[str] = mapped_column(String(16), nullable=False)  # display only, not unique
    transaction_id: Mapped[str] = mapped_column(String(255), nullable=False)  # e.g. pi_...
    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
