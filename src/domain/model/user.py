import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Todo:
    """A single todo item. Only reachable through its owning User."""
    id: str
    title: str
    description: str
    completed: bool
    created_at: datetime
    updated_at: datetime


@dataclass
class User:
    """User aggregate: the user and the full ordered collection of their todos."""
    id: str
    created_at: datetime
    last_seen_at: datetime
    email: str | None = None
    password_hash: str | None = None
    todos: list[Todo] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        email: str | None,
        password_hash: str | None,
        now: datetime | None = None,
    ) -> 'User':
        now = now or datetime.now(timezone.utc)
        return cls(
            id=new_id(),
            created_at=now,
            last_seen_at=now,
            email=email,
            password_hash=password_hash,
        )

    def touch(self, now: datetime | None = None) -> None:
        """Advance last_seen_at; never moves it backwards."""
        now = now or datetime.now(timezone.utc)
        if now > self.last_seen_at:
            self.last_seen_at = now

    def index_of_todo(self, todo_id: str) -> int:
        for i, todo in enumerate(self.todos):
            if todo.id == todo_id:
                return i
        return -1

    def find_todo(self, todo_id: str) -> Todo | None:
        index = self.index_of_todo(todo_id)
        if index == -1:
            return None
        return self.todos[index]
