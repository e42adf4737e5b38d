from __future__ import annotations
import os

# Settings are read at import time, so the test environment goes first
os.environ["ENVIRONMENT"] = "test"
os.environ["IDENTITY_PROVIDER"] = "jwt"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./contesthub-unused.db"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_unused"
os.environ["RUN_STARTUP_REPAIR"] = "0"

import copy
import json
import time
import uuid
import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from app.main import app as api
from app.db import Base, get_session
from app.errors import InvalidArgument, NotFound
from app.models.user import User
from app.security import make_identity_token
from app.services.maintenance import repair_payment_records
from app.services.payment_gateway import CheckoutSession, get_payment_provider
import app.models.contest, app.models.participation, app.models.submission, app.models.payment  # noqa: F401


class FakePaymentProvider:
    """In-memory stand-in for Stripe Checkout."""

    def __init__(self):
        self.sessions: dict[str, CheckoutSession] = {}
        self.created: list[dict] = []

    def create_checkout_session(self, **kwargs) -> CheckoutSession:
        self.created.append(kwargs)
        sid = f"cs_test_{uuid.uuid4().hex[:16]}"
        sess = CheckoutSession(
            id=sid,
            url=f"https://checkout.stripe.test/pay/{sid}",
            payment_status="unpaid",
            amount_total=kwargs["amount"],
            currency=kwargs["currency"],
            customer_email=kwargs["customer_email"],
            metadata=dict(kwargs["metadata"]),
            created=int(time.time()),
        )
        self.sessions[sid] = sess
        return sess

    def mark_paid(self, session_id: str, payment_intent: str | None = None) -> CheckoutSession:
        sess = self.sessions[session_id]
        sess.payment_status = "paid"
        sess.payment_intent = payment_intent or f"pi_{uuid.uuid4().hex[:16]}"
        return sess

    def retrieve_session(self, session_id: str) -> CheckoutSession:
        if session_id not in self.sessions:
            raise NotFound("Checkout session not found")
        return copy.deepcopy(self.sessions[session_id])

    def parse_webhook(self, payload: bytes, signature: str) -> dict:
        if signature != "valid-signature":
            raise InvalidArgument("Invalid webhook: bad signature")
        return json.loads(payload)


def auth(email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_identity_token(email)}"}


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}@contesthub.io"


@pytest.fixture
async def engine(tmp_path):
    eng = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'contesthub.db'}", future=True, connect_args={"timeout": 30}
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.run_sync(repair_payment_records)
    yield eng
    await eng.dispose()


@pytest.fixture
def sessionmaker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def payments():
    return FakePaymentProvider()


@pytest.fixture
async def client(sessionmaker, payments):
    async def _session():
        async with sessionmaker() as session:
            yield session

    api.dependency_overrides[get_session] = _session
    api.dependency_overrides[get_payment_provider] = lambda: payments
    async with AsyncClient(transport=httpx.ASGITransport(app=api), base_url="http://test") as ac:
        yield ac
    api.dependency_overrides.clear()


@pytest.fixture
def make_user(sessionmaker):
    async def _make(role: str = "user", email: str | None = None, win_count: int = 0) -> str:
        email = email or unique_email(role)
        async with sessionmaker() as session:
            session.add(User(email=email, name=email.split("@")[0], role=role, win_count=win_count))
            await session.commit()
        return email
    return _make


@pytest.fixture
def make_contest(client, make_user):
    """Creates a contest through the API; approves it unless approve=False."""
    async def _make(creator: str | None = None, approve: bool = True, **fields) -> str:
        creator = creator or await make_user("creator")
        body = {"name": "Poster Sprint", "type": "image-design", "price": 10, "prizeMoney": 100, **fields}
        r = await client.post("/contest", headers=auth(creator), json=body)
        assert r.status_code == 200, r.text
        contest_id = r.json()["insertedId"]
        if approve:
            admin = await make_user("admin")
            r = await client.patch(f"/contest/{contest_id}", headers=auth(admin), json={"status": "approved"})
            assert r.status_code == 200, r.text
        return contest_id
    return _make
