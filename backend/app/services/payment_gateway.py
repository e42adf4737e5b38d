from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Protocol
import stripe
import structlog
from app.config import settings
from app.errors import AppError, NotFound, InvalidArgument

log = structlog.get_logger()


@dataclass
class CheckoutSession:
    """Provider-neutral view of a hosted checkout session."""
    id: str
    url: str | None = None
    payment_status: str = "unpaid"
    amount_total: int | None = None  # minor units
    currency: str | None = None
    payment_intent: str | None = None
    customer_email: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    created: int | None = None  # unix seconds

    @classmethod
    def from_stripe(cls, obj: Any) -> "CheckoutSession":
        details = obj.get("customer_details") or {}
        pi = obj.get("payment_intent")
        if pi is not None and not isinstance(pi, str):
            pi = pi.get("id")  # expanded PaymentIntent
        return cls(
            id=obj["id"],
            url=obj.get("url"),
            payment_status=obj.get("payment_status") or "unpaid",
            amount_total=obj.get("amount_total"),
            currency=obj.get("currency"),
            payment_intent=pi,
            customer_email=obj.get("customer_email") or details.get("email"),
            metadata=dict(obj.get("metadata") or {}),
            created=obj.get("created"),
        )


class PaymentProvider(Protocol):
    def create_checkout_session(
        self, *, amount: int, currency: str, product_name: str, customer_email: str,
        metadata: dict[str, str], success_url: str, cancel_url: str,
    ) -> CheckoutSession: ...

    def retrieve_session(self, session_id: str) -> CheckoutSession: ...

    def parse_webhook(self, payload: bytes, signature: str) -> dict: ...


class StripeCheckoutProvider:
    def __init__(self, secret_key: str, webhook_secret: str = ""):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret

    def create_checkout_session(
        self, *, amount: int, currency: str, product_name: str, customer_email: str,
        metadata: dict[str, str], success_url: str, cancel_url: str,
    ) -> CheckoutSession:
        stripe.api_key = self.secret_key
        sess = stripe.checkout.Session.create(
            mode="payment",
            customer_email=customer_email,
            line_items=[{
                "price_data": {
                    "currency": currency,
                    "product_data": {"name": product_name},
                    "unit_amount": int(amount),
                },
                "quantity": 1,
            }],
            metadata=metadata,
            success_url=success_url,
            cancel_url=cancel_url,
        )
        return CheckoutSession.from_stripe(sess)

    def retrieve_session(self, session_id: str) -> CheckoutSession:
        stripe.api_key = self.secret_key
        try:
            sess = stripe.checkout.Session.retrieve(session_id)
        except stripe.InvalidRequestError as e:
            log.info("checkout_session_lookup_failed", session_id=session_id, error=str(e))
            raise NotFound("Checkout session not found")
        return CheckoutSession.from_stripe(sess)

    def parse_webhook(self, payload: bytes, signature: str) -> dict:
        if not self.webhook_secret:
            raise AppError("Stripe webhook not configured")
        try:
            return stripe.Webhook.construct_event(
                payload=payload.decode("utf-8"),
                sig_header=signature or "",
                secret=self.webhook_secret,
            )
        except (ValueError, stripe.SignatureVerificationError) as e:
            raise InvalidArgument(f"Invalid webhook: {e}")


def get_payment_provider() -> PaymentProvider:
    if not settings.stripe_secret_key:
        raise AppError("Stripe not configured")
    return StripeCheckoutProvider(settings.stripe_secret_key, settings.stripe_webhook_secret)
