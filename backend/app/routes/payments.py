from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_session
from app.auth_deps import get_identity, role_of
from app.schemas.payment import CheckoutRequest, CheckoutResponse, ReconcileResponse, PaymentRecordPublic
from app.security import Identity
from app.services.payment_gateway import PaymentProvider, get_payment_provider
from app.services import payments as payment_service

router = APIRouter(tags=["payments"])

@router.get("/payments", response_model=list[PaymentRecordPublic])
async def list_payments(
    email: str | None = Query(default=None),
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    role = await role_of(session, identity.email)
    return await payment_service.list_payments(session, identity, role, email)

@router.post("/create-checkout-session", response_model=CheckoutResponse)
async def create_checkout_session(payload: CheckoutRequest, provider: PaymentProvider = Depends(get_payment_provider)):
    sess = payment_service.create_checkout(provider, payload)
    return CheckoutResponse(url=sess.url or "", session_id=sess.id)

@router.patch("/payment-success", response_model=ReconcileResponse, response_model_exclude_none=True)
async def payment_success(
    session_id: str | None = Query(default=None),
    session: AsyncSession = Depends(get_session),
    provider: PaymentProvider = Depends(get_payment_provider),
):
    return await payment_service.reconcile(session, provider, session_id)
