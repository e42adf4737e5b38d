from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.errors import Forbidden, Conflict
from app.models.contest import Contest
from app.models.submission import Submission
from app.schemas.submission import SubmissionCreate
from app.services.contests import parse_contest_id
from app.services.participations import find_participation

log = structlog.get_logger()


async def create_submission(session: AsyncSession, payload: SubmissionCreate) -> Submission:
    """Requires a participation for the pair; at most one submission per pair (Conflict otherwise)."""
    cid = parse_contest_id(payload.contest_id)
    if not await find_participation(session, cid, payload.user_email):
        raise Forbidden("You must be registered/paid to submit a task.")

    existing = await session.scalar(
        select(Submission).where(Submission.contest_id == cid, Submission.user_email == payload.user_email)
    )
    if existing:
        raise Conflict("You have already submitted this contest")

    s = Submission(
        contest_id=cid,
        user_email=payload.user_email,
        task_link=payload.task_link,
        submitted_at=payload.submitted_at or datetime.now(dt_tz.utc),
        status="pending",
    )
    session.add(s)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise Conflict("You have already submitted this contest")
    log.info("submission_created", contest_id=str(cid), user_email=payload.user_email)
    return s


async def list_for_contest(session: AsyncSession, contest_id: str) -> list[Submission]:
    cid = parse_contest_id(contest_id)
    return (await session.execute(
        select(Submission).where(Submission.contest_id == cid).order_by(Submission.submitted_at.asc())
    )).scalars().all()


async def list_for_creator(session: AsyncSession, creator_email: str) -> list[Submission]:
    contest_ids: list[UUID] = (await session.execute(
        select(Contest.id).where(Contest.creator_email == creator_email)
    )).scalars().all()
    if not contest_ids:
        return []
    return (await session.execute(
        select(Submission).where(Submission.contest_id.in_(contest_ids)).order_by(Submission.submitted_at.desc())
    )).scalars().all()
