from __future__ import annotations
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog
from app.db import get_session
from app.errors import Unauthenticated, Forbidden
from app.models.user import User
from app.security import Identity, IdentityVerifier, get_identity_verifier

log = structlog.get_logger()

security = HTTPBearer(auto_error=False)

async def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    return verifier.verify(credentials.credentials)

async def role_of(session: AsyncSession, email: str) -> str | None:
    return await session.scalar(select(User.role).where(User.email == email))

def require_roles(*roles: str):
    """Dependency admitting only callers whose stored role is in `roles`; a missing user has no role."""
    allowed = frozenset(roles)

    async def gate(
        identity: Identity = Depends(get_identity),
        session: AsyncSession = Depends(get_session),
    ) -> Identity:
        role = await role_of(session, identity.email)
        if role not in allowed:
            log.info("role_denied", email=identity.email, role=role, required=sorted(allowed))
            label = "Admin only" if allowed == {"admin"} else "Creator only"
            raise Forbidden(f"Forbidden access: {label}")
        return identity

    return gate

require_admin = require_roles("admin")
require_creator = require_roles("creator", "admin")
