from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from uuid import UUID
from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.errors import InvalidArgument, NotFound, Forbidden
from app.models.contest import Contest
from app.models.submission import Submission
from app.schemas.contest import ContestCreate, ContestUpdate, WinnerDeclare, TYPE_LABELS
from app.security import Identity
from app.services.users import increment_win_count

log = structlog.get_logger()


def parse_contest_id(raw: str | UUID | None) -> UUID:
    if isinstance(raw, UUID):
        return raw
    if not raw:
        raise InvalidArgument("contestId is required")
    try:
        return UUID(str(raw))
    except ValueError:
        raise InvalidArgument("Invalid contest id")


def resolve_type_filter(raw: str | None) -> str | None:
    """Accepts display labels ('Image Design'), raw slugs, or 'all'/None for no filter."""
    if not raw or raw == "all":
        return None
    return TYPE_LABELS.get(raw, raw)


async def list_contests(session: AsyncSession) -> list[Contest]:
    return (await session.execute(select(Contest))).scalars().all()


async def list_by_creator(session: AsyncSession, email: str) -> list[Contest]:
    return (await session.execute(
        select(Contest).where(Contest.creator_email == email).order_by(Contest.created_at.desc())
    )).scalars().all()


async def list_approved(session: AsyncSession, type_filter: str | None = None) -> list[Contest]:
    q = select(Contest).where(Contest.status == "approved")
    slug = resolve_type_filter(type_filter)
    if slug:
        q = q.where(Contest.type == slug)
    return (await session.execute(q.order_by(Contest.created_at.desc()))).scalars().all()


async def list_popular(session: AsyncSession, limit: int) -> list[Contest]:
    return (await session.execute(
        select(Contest)
        .where(Contest.status == "approved")
        .order_by(Contest.participants_count.desc(), Contest.created_at.desc())
        .limit(limit)
    )).scalars().all()


async def list_won(session: AsyncSession, email: str) -> list[Contest]:
    return (await session.execute(
        select(Contest).where(Contest.winner_email == email).order_by(Contest.win_date.desc())
    )).scalars().all()


async def get_contest(session: AsyncSession, contest_id: str | UUID) -> Contest:
    ch = await session.get(Contest, parse_contest_id(contest_id))
    if not ch:
        raise NotFound("Contest not found")
    return ch


async def create_contest(session: AsyncSession, identity: Identity, payload: ContestCreate) -> Contest:
    # Lifecycle fields are forced regardless of what the caller sent
    ch = Contest(
        **payload.model_dump(),
        creator_email=identity.email,
        status="pending",
        participants_count=0,
        created_at=datetime.now(dt_tz.utc),
    )
    session.add(ch)
    await session.commit()
    log.info("contest_created", contest_id=str(ch.id), creator=identity.email)
    return ch


async def update_contest(
    session: AsyncSession, identity: Identity, role: str | None, contest_id: str, payload: ContestUpdate
) -> Contest:
    """Status changes are admin-only; other fields are editable by an admin or the owning creator."""
    ch = await get_contest(session, contest_id)
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise InvalidArgument("Nothing to update")
    is_admin = role == "admin"
    if "status" in changes and not is_admin:
        raise Forbidden("Forbidden access: Admin only")
    if not is_admin and not (role == "creator" and ch.creator_email == identity.email):
        raise Forbidden("Forbidden access: Cannot edit this contest")
    if ch.status == "completed" and "status" in changes:
        raise InvalidArgument("Contest already completed")
    for field, value in changes.items():
        setattr(ch, field, value)
    await session.commit()
    log.info("contest_updated", contest_id=str(ch.id), fields=sorted(changes), by=identity.email)
    return ch


async def declare_winner(
    session: AsyncSession, identity: Identity, role: str | None, contest_id: str, payload: WinnerDeclare
) -> bool:
    """
    Completes the contest with its winner. Write-once: returns False (nothing changed)
    when a winner is already recorded. Winner's winCount and submission status move with it.
    """
    ch = await get_contest(session, contest_id)
    if role != "admin" and not (role == "creator" and ch.creator_email == identity.email):
        raise Forbidden("Forbidden access: Cannot declare a winner for this contest")
    cid = ch.id

    # Conditional write so two concurrent declarations cannot both succeed
    res = await session.execute(
        update(Contest)
        .where(Contest.id == cid, Contest.winner_email.is_(None))
        .values(
            winner_email=payload.winner_email,
            winner_name=payload.winner_name,
            winner_photo=payload.winner_photo,
            status="completed",
            win_date=datetime.now(dt_tz.utc),
        )
    )
    if res.rowcount == 0:
        await session.rollback()
        log.info("winner_already_declared", contest_id=str(cid))
        return False
    await increment_win_count(session, payload.winner_email)
    await session.execute(
        update(Submission)
        .where(Submission.contest_id == cid, Submission.user_email == payload.winner_email)
        .values(status="winner")
    )
    await session.commit()
    log.info("winner_declared", contest_id=str(cid), winner=payload.winner_email, by=identity.email)
    return True


async def delete_contest(session: AsyncSession, contest_id: str) -> bool:
    res = await session.execute(delete(Contest).where(Contest.id == parse_contest_id(contest_id)))
    await session.commit()
    return res.rowcount > 0


async def increment_participants(session: AsyncSession, contest_id: UUID) -> None:
    """Caller owns the transaction."""
    await session.execute(
        update(Contest).where(Contest.id == contest_id).values(participants_count=Contest.participants_count + 1)
    )
