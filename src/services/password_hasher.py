"""Password hashing with bcrypt.

bcrypt salts every hash and compares in constant time.
"""

import bcrypt

from domain.model.errors import HashingError

# 12 rounds (2^12 iterations): roughly a quarter second per verify
BCRYPT_ROUNDS = 12


class PasswordHasher:
    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a plaintext password. Raises HashingError if bcrypt fails."""
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")
        except ValueError as e:
            raise HashingError("Failed to hash password") from e

    def verify(self, password_hash: str | None, password: str) -> bool:
        """Check a plaintext password against a stored hash.

        A missing or malformed hash is a mismatch, never an exception.
        """
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False
