from __future__ import annotations
from typing import Literal
from uuid import UUID
from datetime import datetime
from pydantic import Field, field_validator
from app.schemas.common import CamelModel

ContestType = Literal["image-design", "article-writing", "business-idea", "gaming-review"]
ContestStatus = Literal["pending", "approved", "rejected", "completed"]

# Display names used by the public category filter
TYPE_LABELS: dict[str, str] = {
    "Image Design": "image-design",
    "Article Writing": "article-writing",
    "Business Ideas": "business-idea",
    "Gaming Reviews": "gaming-review",
}

class ContestCreate(CamelModel):
    name: str = Field(min_length=3, max_length=160)
    image: str | None = None
    description: str | None = None
    task_instruction: str | None = None
    type: ContestType
    price: float = Field(ge=0, default=0)
    prize_money: float = Field(ge=0, default=0)
    deadline: datetime | None = None

class ContestUpdate(CamelModel):
    """Patchable fields. Counter, winner and ownership fields are deliberately absent."""
    name: str | None = Field(default=None, min_length=3, max_length=160)
    image: str | None = None
    description: str | None = None
    task_instruction: str | None = None
    type: ContestType | None = None
    price: float | None = Field(default=None, ge=0)
    prize_money: float | None = Field(default=None, ge=0)
    deadline: datetime | None = None
    status: ContestStatus | None = None

    @field_validator("status")
    @classmethod
    def not_completed(cls, v: str | None):
        if v == "completed":
            raise ValueError("use declare-winner to complete a contest")
        return v

class WinnerDeclare(CamelModel):
    winner_email: str = Field(min_length=3)
    winner_name: str | None = None
    winner_photo: str | None = None

class ContestPublic(CamelModel):
    id: UUID
    creator_email: str
    name: str
    image: str | None = None
    description: str | None = None
    task_instruction: str | None = None
    type: str
    price: float
    prize_money: float
    deadline: datetime | None = None
    status: ContestStatus
    participants_count: int
    winner_email: str | None = None
    winner_name: str | None = None
    winner_photo: str | None = None
    win_date: datetime | None = None
    created_at: datetime

class ParticipatedContest(CamelModel):
    """A participation joined to its contest; contest fields are null once the contest is gone."""
    contest_id: UUID
    registered_at: datetime
    transaction_id: str | None = None
    id: UUID | None = None
    creator_email: str | None = None
    name: str | None = None
    image: str | None = None
    description: str | None = None
    task_instruction: str | None = None
    type: str | None = None
    price: float | None = None
    prize_money: float | None = None
    deadline: datetime | None = None
    status: str | None = None
    participants_count: int | None = None
    winner_email: str | None = None
    winner_name: str | None = None
    winner_photo: str | None = None
    win_date: datetime | None = None
    created_at: datetime | None = None
