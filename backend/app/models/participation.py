from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, DateTime, Uuid, UniqueConstraint
from app.db import Base
from app.models.user import _utcnow

class Participation(Base):
    """
    One registration per (contest, user).
    contest_id is an opaque reference: no FK, a deleted contest leaves its participations behind.
    transaction_id is set when the registration came from a reconciled payment.
    """
    __tablename__ = "participations"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    contest_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)
    user_email: Mapped[str] = mapped_column(String(320), index=True, nullable=False)
    transaction_id: Mapped[str | None] = mapped_column(String(255))
    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("contest_id", "user_email", name="uq_participation_contest_user"),
    )
