from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_session
from app.auth_deps import get_identity, require_admin, require_creator, role_of
from app.config import settings
from app.errors import NotFound
from app.schemas.common import InsertResult, OperationResult
from app.schemas.contest import ContestCreate, ContestUpdate, ContestPublic, WinnerDeclare
from app.security import Identity
from app.services import contests as contest_service

router = APIRouter(tags=["contests"])

@router.get("/contest", response_model=list[ContestPublic])
async def list_all(session: AsyncSession = Depends(get_session)):
    return await contest_service.list_contests(session)

@router.get("/contest/creator/{email}", response_model=list[ContestPublic])
async def list_by_creator(email: str, session: AsyncSession = Depends(get_session)):
    return await contest_service.list_by_creator(session, email)

@router.get("/contests/popular", response_model=list[ContestPublic])
async def list_popular(session: AsyncSession = Depends(get_session)):
    return await contest_service.list_popular(session, settings.popular_limit)

@router.get("/contests", response_model=list[ContestPublic])
async def list_approved(
    type: str | None = Query(default=None, description="Category label or slug; 'all' for every category"),
    session: AsyncSession = Depends(get_session),
):
    return await contest_service.list_approved(session, type)

@router.get("/contest/won/{email}", response_model=list[ContestPublic])
async def list_won(email: str, session: AsyncSession = Depends(get_session)):
    return await contest_service.list_won(session, email)

@router.get("/contest/{contest_id}", response_model=ContestPublic)
async def get_contest(contest_id: str, session: AsyncSession = Depends(get_session)):
    return await contest_service.get_contest(session, contest_id)

@router.post("/contest", response_model=InsertResult, response_model_exclude_none=True)
async def create_contest(
    payload: ContestCreate,
    identity: Identity = Depends(require_creator),
    session: AsyncSession = Depends(get_session),
):
    ch = await contest_service.create_contest(session, identity, payload)
    return InsertResult(message="Contest created", inserted_id=str(ch.id))

@router.patch("/contest/declare-winner/{contest_id}", response_model=OperationResult)
async def declare_winner(
    contest_id: str,
    payload: WinnerDeclare,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    role = await role_of(session, identity.email)
    if not await contest_service.declare_winner(session, identity, role, contest_id, payload):
        return OperationResult(success=False, message="Winner already declared")
    return OperationResult(success=True, message="Winner declared")

@router.patch("/contest/{contest_id}", response_model=OperationResult)
async def update_contest(
    contest_id: str,
    payload: ContestUpdate,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    role = await role_of(session, identity.email)
    await contest_service.update_contest(session, identity, role, contest_id, payload)
    return OperationResult(success=True, message="Contest updated successfully")

@router.delete("/contest/{contest_id}", response_model=OperationResult)
async def delete_contest(
    contest_id: str,
    _: Identity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    if not await contest_service.delete_contest(session, contest_id):
        raise NotFound("Contest not found")
    return OperationResult(success=True, message="Contest deleted")
