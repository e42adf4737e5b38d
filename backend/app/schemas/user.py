from __future__ import annotations
from typing import Literal
from uuid import UUID
from datetime import datetime
from pydantic import EmailStr, Field
from app.schemas.common import CamelModel

Role = Literal["user", "creator", "admin"]

class UserCreate(CamelModel):
    email: EmailStr
    name: str | None = Field(default=None, max_length=120)
    photo: str | None = None

class UserPublic(CamelModel):
    id: UUID
    email: str
    name: str | None = None
    photo: str | None = None
    bio: str | None = None
    address: str | None = None
    role: Role
    win_count: int
    created_at: datetime

class ProfileUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=120)
    photo: str | None = None
    bio: str | None = None
    address: str | None = Field(default=None, max_length=255)

class RoleUpdate(CamelModel):
    role: Role

class RoleLookup(CamelModel):
    role: Role | None = None

class LeaderboardRow(CamelModel):
    email: str
    name: str | None = None
    photo: str | None = None
    win_count: int
