from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.errors import AppError, Forbidden, InvalidArgument
from app.models.participation import Participation
from app.models.payment import PaymentRecord
from app.schemas.payment import CheckoutRequest
from app.security import Identity
from app.services.contests import parse_contest_id, increment_participants
from app.services.participations import find_participation
from app.services.payment_gateway import CheckoutSession, PaymentProvider
from app.services.tracking_code import generate_tracking_code

log = structlog.get_logger()

SUCCESS_PATH = "/dashboard/payment-success?session_id={CHECKOUT_SESSION_ID}"
CANCEL_PATH = "/dashboard/payment-cancelled"


def to_minor_units(price: float) -> int:
    return int((Decimal(str(price)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def create_checkout(provider: PaymentProvider, req: CheckoutRequest) -> CheckoutSession:
    """Phase 1: open a hosted checkout. Nothing is stored locally until reconciliation."""
    contest_id = parse_contest_id(req.contest_id)
    amount = to_minor_units(req.price)
    if amount <= 0:
        raise InvalidArgument("price must be > 0")
    site = settings.site_domain.rstrip("/")
    sess = provider.create_checkout_session(
        amount=amount,
        currency=settings.checkout_currency,
        product_name=req.contest_name,
        customer_email=str(req.user_email),
        metadata={"contestId": str(contest_id), "contestName": req.contest_name},
        success_url=site + SUCCESS_PATH,
        cancel_url=site + CANCEL_PATH,
    )
    log.info("checkout_session_created", session_id=sess.id, contest_id=str(contest_id), amount=amount)
    return sess


def _payment_info(rec: PaymentRecord) -> dict:
    return {
        "contest_id": rec.contest_id,
        "contest_name": rec.contest_name,
        "amount": rec.amount,
        "currency": rec.currency,
        "tracking_id": rec.tracking_id,
        "transaction_id": rec.transaction_id,
    }


def _duplicate(rec: PaymentRecord | None) -> dict:
    return {
        "success": True,
        "message": "Payment already processed",
        "duplicate": True,
        "payment_info": _payment_info(rec) if rec else None,
    }


async def _find_record(session: AsyncSession, transaction_id: str) -> PaymentRecord | None:
    return await session.scalar(select(PaymentRecord).where(PaymentRecord.transaction_id == transaction_id))


async def reconcile(session: AsyncSession, provider: PaymentProvider, session_id: str | None) -> dict:
    """
    Phase 2: re-read the session from the provider (client-reported status is never trusted)
    and record a paid session exactly once.
    """
    if not session_id:
        raise InvalidArgument("session_id is required")
    checkout = provider.retrieve_session(session_id)
    if checkout.payment_status != "paid":
        log.info("reconcile_not_paid", session_id=session_id, status=checkout.payment_status)
        return {"success": False, "message": "Payment not completed yet", "status": checkout.payment_status}
    return await record_paid_checkout(session, checkout)


async def record_paid_checkout(session: AsyncSession, checkout: CheckoutSession) -> dict:
    """
    Writes PaymentRecord + Participation + participants counter in one transaction.
    Keyed by transaction id: a replay writes nothing, a concurrent duplicate loses on
    the unique index and is answered as already processed.
    """
    contest_id = parse_contest_id(checkout.metadata.get("contestId"))
    user_email = checkout.customer_email
    transaction_id = checkout.payment_intent
    if not user_email or not transaction_id:
        raise InvalidArgument("Checkout session is missing customer email or payment intent")

    # Second pass handles a registration that raced us on the (contest, user) pair
    for attempt in range(2):
        existing = await _find_record(session, transaction_id)
        if existing:
            log.info("reconcile_duplicate", transaction_id=transaction_id)
            return _duplicate(existing)

        participation = await find_participation(session, contest_id, user_email)
        created = checkout.created
        rec = PaymentRecord(
            contest_id=contest_id,
            contest_name=checkout.metadata.get("contestName"),
            user_email=user_email,
            amount=(checkout.amount_total or 0) / 100,
            currency=checkout.currency or settings.checkout_currency,
            tracking_id=generate_tracking_code(),
            transaction_id=transaction_id,
            registered_at=datetime.fromtimestamp(created, dt_tz.utc) if created else datetime.now(dt_tz.utc),
        )
        session.add(rec)
        if participation is None:
            session.add(Participation(
                contest_id=contest_id, user_email=user_email,
                transaction_id=transaction_id, registered_at=datetime.now(dt_tz.utc),
            ))
        elif participation.transaction_id is None:
            # already registered for free; the payment is still recorded but counts no one twice
            participation.transaction_id = transaction_id

        try:
            await session.flush()
            if participation is None:
                await increment_participants(session, contest_id)
            await session.commit()
        except IntegrityError:
            await session.rollback()
            if await _find_record(session, transaction_id):
                log.info("reconcile_race_duplicate", transaction_id=transaction_id)
                return _duplicate(await _find_record(session, transaction_id))
            log.info("reconcile_participation_race", transaction_id=transaction_id, attempt=attempt)
            continue

        log.info("reconcile_recorded", transaction_id=transaction_id, contest_id=str(contest_id),
                 user_email=user_email, new_participant=participation is None)
        return {
            "success": True,
            "message": "Payment successful & registered",
            "payment_info": _payment_info(rec),
        }

    raise AppError("Could not record payment")


async def list_payments(
    session: AsyncSession, identity: Identity, role: str | None, email: str | None = None
) -> list[PaymentRecord]:
    """Own records for everyone; any (or all) records for admins."""
    is_admin = role == "admin"
    if email and email != identity.email and not is_admin:
        raise Forbidden("forbidden access")
    q = select(PaymentRecord)
    if email or not is_admin:
        q = q.where(PaymentRecord.user_email == (email or identity.email))
    return (await session.execute(q.order_by(PaymentRecord.registered_at.desc()))).scalars().all()
