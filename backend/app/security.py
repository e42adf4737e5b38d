from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol
import jwt
import structlog
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from app.config import settings
from app.errors import InvalidCredential

log = structlog.get_logger()

JWT_ALG = "HS256"
IDENTITY_TTL_MIN = 60


@dataclass(frozen=True)
class Identity:
    """Verified caller, passed explicitly from the auth dependency to handlers."""
    email: str


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> Identity: ...


def _identity_from_claims(claims: dict[str, Any]) -> Identity:
    email = claims.get("email")
    if not email:
        raise InvalidCredential("token carries no email")
    return Identity(email=str(email))


class FirebaseIdentityVerifier:
    """Firebase ID tokens, checked against Google's signing keys."""

    def __init__(self, project_id: str):
        # Without an audience google-auth accepts tokens minted for any Firebase project
        if not project_id:
            raise RuntimeError("FIREBASE_PROJECT_ID must be set when IDENTITY_PROVIDER=firebase")
        self.project_id = project_id
        self._request = google_requests.Request()

    def verify(self, token: str) -> Identity:
        try:
            claims = id_token.verify_firebase_token(token, self._request, audience=self.project_id)
        except ValueError as e:
            log.info("identity_rejected", provider="firebase", reason=str(e))
            raise InvalidCredential()
        if not claims:
            raise InvalidCredential()
        return _identity_from_claims(claims)


class JWTIdentityVerifier:
    """Locally signed HS256 tokens for development and tests."""

    def __init__(self, secret: str):
        self.secret = secret

    def verify(self, token: str) -> Identity:
        try:
            claims = jwt.decode(token, self.secret, algorithms=[JWT_ALG])
        except jwt.PyJWTError as e:
            log.info("identity_rejected", provider="jwt", reason=str(e))
            raise InvalidCredential()
        return _identity_from_claims(claims)


def make_identity_token(email: str, ttl_min: int = IDENTITY_TTL_MIN, secret: str | None = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl_min)).timestamp()),
    }
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=JWT_ALG)


_verifier: IdentityVerifier | None = None

def get_identity_verifier() -> IdentityVerifier:
    global _verifier
    if _verifier is None:
        if settings.identity_provider == "jwt":
            _verifier = JWTIdentityVerifier(settings.jwt_secret)
        else:
            _verifier = FirebaseIdentityVerifier(settings.firebase_project_id)
    return _verifier
