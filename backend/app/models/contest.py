from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Numeric, DateTime, Text, Uuid, CheckConstraint
from app.db import Base
from app.models.user import _utcnow

CONTEST_STATUSES = ("pending", "approved", "rejected", "completed")

class Contest(Base):
    __tablename__ = "contests"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    creator_email: Mapped[str] = mapped_column(String(320), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    image: Mapped[str | None] = mapped_column(Text())
    description: Mapped[str | None] = mapped_column(Text())
    task_instruction: Mapped[str | None] = mapped_column(Text())
    type: Mapped[str] = mapped_column(String(32), index=True, nullable=False)  # image-design|article-writing|business-idea|gaming-review
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    prize_money: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    status: Mapped[str] = mapped_column(String(16), index=True, nullable=False, default="pending")  # pending|approved|rejected|completed
    participants_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Written by declare-winner only
    winner_email: Mapped[str | None] = mapped_column(String(320), index=True)
    winner_name: Mapped[str | None] = mapped_column(String(120))
    winner_photo: Mapped[str | None] = mapped_column(Text())
    win_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("participants_count >= 0", name="ck_contests_participants_nonneg"),
    )
