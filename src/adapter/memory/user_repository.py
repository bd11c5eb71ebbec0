"""In-memory implementation of UserRepository.

Used for the `memory` storage backend and in tests.
"""

import copy
import threading

from domain.model.errors import DuplicateEmailError
from domain.model.user import User


class InMemoryUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}
        self._lock = threading.Lock()

    # ── write operations ─────────────────────────────────────

    def add(self, user: User) -> None:
        with self._lock:
            if user.email is not None and self._find_by_email(user.email):
                raise DuplicateEmailError(user.email)
            self.store[user.id] = copy.deepcopy(user)

    def save(self, user: User) -> None:
        with self._lock:
            self.store[user.id] = copy.deepcopy(user)

    # ── read operations ──────────────────────────────────────

    def get_by_email(self, email: str) -> User | None:
        with self._lock:
            user = self._find_by_email(email)
            return copy.deepcopy(user) if user else None

    def get_by_id(self, user_id: str) -> User | None:
        with self._lock:
            user = self.store.get(user_id)
            return copy.deepcopy(user) if user else None

    def _find_by_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return user
        return None
