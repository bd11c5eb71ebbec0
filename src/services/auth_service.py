"""Auth service — registration, authentication and session resolution.

Pure business logic with no HTTP dependencies.
Raises domain errors that the API layer maps to HTTP status codes.
"""

import logging
from datetime import datetime

from domain.model.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    MissingTokenError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from domain.model.user import User
from port.user_repository import UserRepository
from services.password_hasher import PasswordHasher
from services.token_codec import SessionTokenCodec

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def _validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"password must be at most {MAX_PASSWORD_BYTES} bytes", field="password"
        )


def register(
    repo: UserRepository,
    hasher: PasswordHasher,
    email: str,
    password: str,
    now: datetime | None = None,
) -> User:
    """Register a new user.

    Returns the created User domain object.

    Raises:
        ValidationError: password does not meet length requirements
        DuplicateEmailError: email already registered
        HashingError: bcrypt failed
        PersistenceError: storage failed
    """
    _validate_password(password)
    if repo.get_by_email(email):
        raise DuplicateEmailError(email)

    user = User.create(email=email, password_hash=hasher.hash(password), now=now)
    # The store enforces uniqueness again for signups racing past the check above
    repo.add(user)

    logger.info("User registered", extra={"userId": user.id})
    return user


def authenticate(
    repo: UserRepository,
    hasher: PasswordHasher,
    email: str,
    password: str,
    now: datetime | None = None,
) -> User:
    """Authenticate a user by email and password.

    Advances last_seen_at on success. A failure to persist that timestamp
    is logged and does not fail the login.

    Raises:
        InvalidCredentialsError: unknown email or wrong password (deliberately vague)
    """
    user = repo.get_by_email(email)
    if not user or not hasher.verify(user.password_hash, password):
        raise InvalidCredentialsError()

    user.touch(now)
    try:
        repo.save(user)
    except PersistenceError:
        logger.warning("Failed to record login time", extra={"userId": user.id})
    return user


def create_session(
    repo: UserRepository,
    hasher: PasswordHasher,
    codec: SessionTokenCodec,
    email: str,
    password: str,
) -> str:
    """Authenticate and issue a session token."""
    user = authenticate(repo, hasher, email, password)
    token = codec.issue(user.id, user.email)
    logger.info("Session created", extra={"userId": user.id})
    return token


def resolve_session_user(
    repo: UserRepository,
    codec: SessionTokenCodec,
    token: str | None,
    now: datetime | None = None,
) -> User:
    """Resolve a bearer token into the loaded User aggregate.

    Advances last_seen_at and saves the aggregate before returning.

    Raises:
        MissingTokenError: no token supplied
        TokenError: token malformed, badly signed or expired
        NotFoundError: token is valid but its user no longer exists
        PersistenceError: last_seen_at could not be saved
    """
    if not token:
        raise MissingTokenError()

    claims = codec.verify(token)

    user = repo.get_by_id(claims.user_id)
    if not user:
        raise NotFoundError("User not found")

    user.touch(now)
    repo.save(user)
    return user
