from __future__ import annotations
from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession
import structlog
from app.db import get_session
from app.services.payment_gateway import CheckoutSession, PaymentProvider, get_payment_provider
from app.services.payments import record_paid_checkout

router = APIRouter(tags=["stripe"])
log = structlog.get_logger()

@router.post("/stripe/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None, alias="Stripe-Signature"),
    db: AsyncSession = Depends(get_session),
    provider: PaymentProvider = Depends(get_payment_provider),
):
    payload = await request.body()
    event = provider.parse_webhook(payload, stripe_signature or "")

    # Same reconciliation as the browser return path; transaction id keeps it idempotent
    if event["type"] in ("checkout.session.completed", "checkout.session.async_payment_succeeded"):
        sess = CheckoutSession.from_stripe(event["data"]["object"])
        if sess.payment_status != "paid":
            return {"ok": True, "recorded": False}
        result = await record_paid_checkout(db, sess)
        return {"ok": True, "recorded": not result.get("duplicate", False)}

    log.info("stripe_event_ignored", type=event["type"])
    return {"ignored": event["type"]}
