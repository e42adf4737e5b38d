from __future__ import annotations
from datetime import datetime
from app.schemas.common import CamelModel

class ParticipationCreate(CamelModel):
    # Presence is checked by the service so a missing key is a 400 with a stable message
    contest_id: str | None = None
    user_email: str | None = None
    registered_at: datetime | None = None

class RegistrationStatus(CamelModel):
    already_registered: bool
