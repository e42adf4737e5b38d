from __future__ import annotations
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.errors import Forbidden, NotFound
from app.models.user import User
from app.schemas.user import UserCreate, ProfileUpdate
from app.security import Identity

log = structlog.get_logger()


async def get_user(session: AsyncSession, email: str) -> User | None:
    return await session.scalar(select(User).where(User.email == email))


async def create_user(session: AsyncSession, payload: UserCreate) -> tuple[User, bool]:
    """
    First sign-in registration. Idempotent by email.
    Returns (user, created); role is always 'user' on creation.
    """
    existing = await get_user(session, payload.email)
    if existing:
        return existing, False
    user = User(email=payload.email, name=payload.name, photo=payload.photo, role="user", win_count=0)
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        # concurrent first sign-in for the same email
        await session.rollback()
        return await get_user(session, payload.email), False
    log.info("user_created", email=user.email)
    return user, True


async def list_users(session: AsyncSession) -> list[User]:
    return (await session.execute(select(User).order_by(User.created_at.asc()))).scalars().all()


async def update_profile(session: AsyncSession, identity: Identity, email: str, payload: ProfileUpdate) -> User:
    if identity.email != email:
        raise Forbidden("Forbidden access: Cannot edit other profiles")
    user = await get_user(session, email)
    if not user:
        raise NotFound("User not found")
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    await session.commit()
    return user


async def set_role(session: AsyncSession, email: str, role: str) -> User:
    user = await get_user(session, email)
    if not user:
        raise NotFound("User not found")
    previous, user.role = user.role, role
    await session.commit()
    log.info("role_changed", email=email, previous=previous, role=role)
    return user


async def increment_win_count(session: AsyncSession, email: str) -> None:
    """Caller owns the transaction."""
    await session.execute(update(User).where(User.email == email).values(win_count=User.win_count + 1))


async def leaderboard(session: AsyncSession, limit: int) -> list[User]:
    return (await session.execute(
        select(User).where(User.win_count > 0).order_by(User.win_count.desc(), User.created_at.asc()).limit(limit)
    )).scalars().all()
