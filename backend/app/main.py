from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.db import engine
from app.errors import install_error_handlers
from app.logging_setup import configure_logging
from app.security import get_identity_verifier
from app.services.maintenance import startup_repair
from app.routes.system import router as system_router
from app.routes.users import router as users_router
from app.routes.contests import router as contests_router
from app.routes.participations import router as participations_router
from app.routes.payments import router as payments_router
from app.routes.submissions import router as submissions_router
from app.routes.stripe_webhooks import router as stripe_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha)
    get_identity_verifier()
    if settings.run_startup_repair:
        # Must finish before reconciliation traffic: the unique index is the double-processing guard
        async with engine.begin() as conn:
            await conn.run_sync(startup_repair)
    yield
    # Shutdown
    await engine.dispose()
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API for creative contests",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

# Include routers
app.include_router(system_router)
app.include_router(users_router)
app.include_router(contests_router)
app.include_router(participations_router)
app.include_router(payments_router)
app.include_router(submissions_router)
app.include_router(stripe_router)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    try:
        response: Response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()
    response.headers["X-Request-ID"] = rid
    return response
