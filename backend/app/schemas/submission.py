from __future__ import annotations
from pydantic import Field
from uuid import UUID
from datetime import datetime
from app.schemas.common import CamelModel


class SubmissionCreate(CamelModel):
    contest_id: str
    user_email: str = Field(min_length=3)
    task_link: str = Field(min_length=1)
    submitted_at: datetime | None = None


class SubmissionPublic(CamelModel):
    id: UUID
    contest_id: UUID
    user_email: str
    task_link: str
    submitted_at: datetime
    status: str
