from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_session
from app.auth_deps import get_identity, require_admin
from app.errors import Forbidden, NotFound
from app.schemas.common import OperationResult
from app.schemas.user import UserCreate, UserPublic, ProfileUpdate, RoleUpdate, RoleLookup, LeaderboardRow
from app.security import Identity
from app.services import users as user_service
from app.config import settings

router = APIRouter(tags=["users"])

@router.post("/users")
async def create_user(payload: UserCreate, session: AsyncSession = Depends(get_session)):
    user, created = await user_service.create_user(session, payload)
    if not created:
        return {"message": "user exists"}
    return {"success": True, "message": "user created", "insertedId": str(user.id)}

@router.get("/users/role/{email}", response_model=RoleLookup)
async def get_role(email: str, identity: Identity = Depends(get_identity), session: AsyncSession = Depends(get_session)):
    if email != identity.email:
        raise Forbidden("forbidden access")
    user = await user_service.get_user(session, email)
    return RoleLookup(role=user.role if user else None)

@router.get("/users", response_model=list[UserPublic])
async def list_users(_: Identity = Depends(require_admin), session: AsyncSession = Depends(get_session)):
    return await user_service.list_users(session)

@router.get("/users/{email}", response_model=UserPublic)
async def get_user(email: str, session: AsyncSession = Depends(get_session)):
    user = await user_service.get_user(session, email)
    if not user:
        raise NotFound("User not found")
    return user

@router.patch("/users/role/{email}", response_model=UserPublic)
async def change_role(
    email: str,
    payload: RoleUpdate,
    _: Identity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return await user_service.set_role(session, email, payload.role)

@router.patch("/users/{email}", response_model=OperationResult)
async def update_profile(
    email: str,
    payload: ProfileUpdate,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    await user_service.update_profile(session, identity, email, payload)
    return OperationResult(success=True, message="Profile updated!")

@router.get("/leaderboard", response_model=list[LeaderboardRow], tags=["leaderboard"])
async def leaderboard(session: AsyncSession = Depends(get_session)):
    return await user_service.leaderboard(session, settings.leaderboard_limit)
