"""Domain-level exceptions.

Services raise these errors to express business rule violations.
Exception handlers in the API layer map them to HTTP status codes.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class ValidationError(DomainError):
    """Input violates a business validation rule."""


class InvalidCredentialsError(ValidationError):
    """Email/password pair does not match a stored user (deliberately vague)."""

    def __init__(self):
        super().__init__("incorrect credentials")


class AuthError(DomainError):
    """Caller is not authenticated."""


class MissingTokenError(AuthError):
    def __init__(self):
        super().__init__("Not authorized")


class TokenError(AuthError):
    """Session token failed verification."""


class InvalidSignatureError(TokenError):
    def __init__(self):
        super().__init__("token signature is invalid")


class MalformedTokenError(TokenError):
    def __init__(self):
        super().__init__("token is malformed")


class ExpiredTokenError(TokenError):
    def __init__(self):
        super().__init__("token is expired")


class NotFoundError(DomainError):
    """Requested entity does not exist."""


class ConflictError(DomainError):
    """Entity with the same unique key already exists."""


class DuplicateEmailError(ConflictError):

    def __init__(self, email: str | None = None):
        self.email = email
        super().__init__("email already in use", field="email")


class RateLimitedError(DomainError):
    """Too many requests for the guarded endpoint class."""

    def __init__(self, retry_after: float = 0.0):
        self.retry_after = retry_after
        super().__init__("Too many requests... Slow down")


class InternalError(DomainError):
    """Unexpected failure inside the service; details are never shown to clients."""


class HashingError(InternalError):
    """Password hashing failed."""


class PersistenceError(InternalError):
    """Storage operation failed."""


class ConfigError(Exception):
    """Invalid or missing configuration, raised at startup."""
