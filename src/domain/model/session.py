from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SessionClaims:
    """Decoded payload of a session token."""
    user_id: str
    email: str | None
    expires_at: datetime
