from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from uuid import UUID
from sqlalchemy import select, exists
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.errors import InvalidArgument, Conflict
from app.models.contest import Contest
from app.models.participation import Participation
from app.services.contests import parse_contest_id, increment_participants

log = structlog.get_logger()


async def find_participation(session: AsyncSession, contest_id: UUID, user_email: str) -> Participation | None:
    return await session.scalar(
        select(Participation).where(Participation.contest_id == contest_id, Participation.user_email == user_email)
    )


async def is_registered(session: AsyncSession, contest_id: str | None, user_email: str | None) -> bool:
    if not contest_id or not user_email:
        return False
    try:
        cid = UUID(str(contest_id))
    except ValueError:
        return False
    return bool(await session.scalar(
        select(exists().where(Participation.contest_id == cid, Participation.user_email == user_email))
    ))


async def register(
    session: AsyncSession, contest_id: str | None, user_email: str | None, registered_at: datetime | None = None
) -> Participation:
    """
    Free registration. Raises InvalidArgument on missing keys, Conflict when the pair is
    already registered (checked up front, enforced by uq_participation_contest_user).
    """
    if not contest_id or not user_email:
        raise InvalidArgument("contestId & userEmail are required")
    cid = parse_contest_id(contest_id)

    if await find_participation(session, cid, user_email):
        log.info("already_registered", contest_id=str(cid), user_email=user_email)
        raise Conflict("Already registered")

    p = Participation(contest_id=cid, user_email=user_email, registered_at=registered_at or datetime.now(dt_tz.utc))
    session.add(p)
    try:
        await session.flush()
        await increment_participants(session, cid)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        log.info("already_registered", contest_id=str(cid), user_email=user_email, race=True)
        raise Conflict("Already registered")
    log.info("registered", contest_id=str(cid), user_email=user_email)
    return p


async def list_participated(session: AsyncSession, email: str) -> list[tuple[Participation, Contest | None]]:
    """Every participation of `email` with its contest; the contest is None once deleted."""
    rows = (await session.execute(
        select(Participation, Contest)
        .outerjoin(Contest, Contest.id == Participation.contest_id)
        .where(Participation.user_email == email)
        .order_by(Participation.registered_at.desc())
    )).all()
    return [(p, ch) for (p, ch) in rows]
