from typing import Protocol
from domain.model.user import User


class UserRepository(Protocol):
    """Protocol defining the interface for user aggregate storage.

    The User aggregate (user + nested todos) is the unit of storage:
    there is no per-todo persistence path.
    """
    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        ...

    def add(self, user: User) -> None:
        """Insert a new user. Raise DuplicateEmailError if the email is taken."""
        ...

    def save(self, user: User) -> None:
        """Persist the entire aggregate, todos included. Raise PersistenceError on failure."""
        ...
