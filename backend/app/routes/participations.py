from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_session
from app.errors import Conflict
from app.schemas.common import InsertResult
from app.schemas.contest import ContestPublic, ParticipatedContest
from app.schemas.participation import ParticipationCreate, RegistrationStatus
from app.services import participations as participation_service

router = APIRouter(tags=["participations"])

@router.get("/participations", response_model=RegistrationStatus)
async def check_registration(
    contest_id: str | None = Query(default=None, alias="contestId"),
    user_email: str | None = Query(default=None, alias="userEmail"),
    session: AsyncSession = Depends(get_session),
):
    return RegistrationStatus(already_registered=await participation_service.is_registered(session, contest_id, user_email))

@router.post("/participations", response_model=InsertResult)
async def register(payload: ParticipationCreate, session: AsyncSession = Depends(get_session)):
    try:
        p = await participation_service.register(session, payload.contest_id, payload.user_email, payload.registered_at)
    except Conflict as e:
        # duplicate registration is reported as a 400, not a 409
        return JSONResponse(status_code=400, content={"message": e.message})
    return InsertResult(message="Successfully registered", inserted_id=str(p.id))

@router.get("/contest/participated/{email}", response_model=list[ParticipatedContest], response_model_exclude_none=True)
async def list_participated(email: str, session: AsyncSession = Depends(get_session)):
    rows = await participation_service.list_participated(session, email)
    out: list[ParticipatedContest] = []
    for p, ch in rows:
        contest = ContestPublic.model_validate(ch).model_dump() if ch else {}
        out.append(ParticipatedContest(
            **contest,
            contest_id=p.contest_id,
            registered_at=p.registered_at,
            transaction_id=p.transaction_id,
        ))
    return out
