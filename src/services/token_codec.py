"""Stateless session tokens (HS256 JWT).

Validity depends only on the signature and the embedded expiry; there is
no server-side revocation. Rotating the secret invalidates every
outstanding token.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from jose import JWTError, jwt

from domain.model.errors import ExpiredTokenError, InvalidSignatureError, MalformedTokenError
from domain.model.session import SessionClaims

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
SESSION_TTL = timedelta(minutes=15)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionTokenCodec:
    def __init__(
        self,
        secret: str,
        ttl: timedelta = SESSION_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret:
            raise ValueError("secret must not be empty")
        self._secret = secret
        self.ttl = ttl
        self._clock = clock

    def issue(self, user_id: str, email: str | None) -> str:
        """Create a signed token for the user, expiring after the TTL."""
        now = self._clock()
        payload = {
            "sub": user_id,
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> SessionClaims:
        """Verify a token and return its claims.

        Raises:
            MalformedTokenError: token cannot be decoded or lacks required claims
            InvalidSignatureError: signature does not match the secret
            ExpiredTokenError: current time is at or past the embedded expiry
        """
        try:
            unverified = jwt.get_unverified_claims(token)
        except JWTError as e:
            logger.debug(f"Malformed session token: {e}")
            raise MalformedTokenError()

        user_id = unverified.get("sub")
        exp = unverified.get("exp")
        if not isinstance(user_id, str) or not user_id or not isinstance(exp, int):
            raise MalformedTokenError()

        try:
            # Expiry is checked below against the injected clock
            jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as e:
            logger.debug(f"Session token signature check failed: {e}")
            raise InvalidSignatureError()

        expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
        if self._clock() >= expires_at:
            raise ExpiredTokenError()

        email = unverified.get("email")
        return SessionClaims(
            user_id=user_id,
            email=email if isinstance(email, str) else None,
            expires_at=expires_at,
        )
