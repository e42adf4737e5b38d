from __future__ import annotations
from pydantic import EmailStr, Field
from datetime import datetime
from uuid import UUID
from app.schemas.common import CamelModel

class CheckoutRequest(CamelModel):
    contest_id: str
    contest_name: str = Field(min_length=1, max_length=160)
    user_email: EmailStr
    price: float = Field(gt=0, description="Entry fee in major currency units")

class CheckoutResponse(CamelModel):
    url: str
    session_id: str

class PaymentInfo(CamelModel):
    contest_id: UUID
    contest_name: str | None = None
    amount: float
    currency: str
    tracking_id: str
    transaction_id: str

class ReconcileResponse(CamelModel):
    success: bool
    message: str
    status: str | None = None  # provider payment_status when not paid
    duplicate: bool | None = None
    payment_info: PaymentInfo | None = None

class PaymentRecordPublic(CamelModel):
    id: int
    contest_id: UUID
    contest_name: str | None = None
    user_email: str
    amount: float
    currency: str
    tracking_id: str
    transaction_id: str
    registered_at: datetime
