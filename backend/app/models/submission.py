from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, DateTime, Uuid, UniqueConstraint
from app.db import Base
from app.models.user import _utcnow


class Submission(Base):
    __tablename__ = "submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Opaque references, resolved by lookup
    contest_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)
    user_email: Mapped[str] = mapped_column(String(320), index=True, nullable=False)

    task_link: Mapped[str] = mapped_column(Text(), nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")  # 'pending'|'winner'

    __table_args__ = (
        UniqueConstraint("contest_id", "user_email", name="uq_submission_contest_user"),
    )
