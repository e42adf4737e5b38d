from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_session
from app.auth_deps import get_identity, role_of
from app.errors import Conflict, Forbidden
from app.schemas.common import InsertResult
from app.schemas.submission import SubmissionCreate, SubmissionPublic
from app.security import Identity
from app.services import submissions as submission_service

router = APIRouter(tags=["submissions"])

@router.post("/submissions", response_model=InsertResult, response_model_exclude_none=True)
async def create_submission(payload: SubmissionCreate, session: AsyncSession = Depends(get_session)):
    try:
        s = await submission_service.create_submission(session, payload)
    except Conflict as e:
        return InsertResult(success=False, message=e.message)
    return InsertResult(message="Task submitted successfully", inserted_id=str(s.id))

@router.get("/creator/submissions/{contest_id}", response_model=list[SubmissionPublic])
async def list_contest_submissions(contest_id: str, session: AsyncSession = Depends(get_session)):
    return await submission_service.list_for_contest(session, contest_id)

@router.get("/creator/all-submissions/{email}", response_model=list[SubmissionPublic])
async def list_creator_submissions(
    email: str,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    if email != identity.email and await role_of(session, identity.email) != "admin":
        raise Forbidden("forbidden access")
    return await submission_service.list_for_creator(session, email)
