"""Todo service — CRUD over the todos owned by one User aggregate.

Every operation works on an already-loaded User. Mutations change the
in-memory collection and then persist the entire aggregate with a single
repo.save(user); there is no per-todo write. If the save fails, the
in-memory collection is restored so no partial change survives.

Concurrent requests for the same user are last-writer-wins: the later
save replaces the whole aggregate, including todos it never saw.
"""

import copy
import logging
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

from domain.model.errors import NotFoundError
from domain.model.user import Todo, User, new_id
from port.user_repository import UserRepository

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _advance(previous: datetime, now: datetime) -> datetime:
    """Return a timestamp strictly after `previous`."""
    if now > previous:
        return now
    return previous + timedelta(microseconds=1)


@contextmanager
def _saved(repo: UserRepository, user: User):
    """Apply the block's mutation to user.todos, then save the aggregate.

    Restores the previous collection if the block or the save raises.
    """
    snapshot = copy.deepcopy(user.todos)
    try:
        yield
        repo.save(user)
    except Exception:
        user.todos = snapshot
        raise


def list_todos(user: User) -> list[Todo]:
    """Return a copy of the user's todos in insertion order."""
    return copy.deepcopy(user.todos)


def create_todo(
    repo: UserRepository,
    user: User,
    title: str,
    description: str,
    completed: bool = False,
    now: datetime | None = None,
) -> Todo:
    now = now or _now()
    todo = Todo(
        id=new_id(),
        title=title,
        description=description,
        completed=completed,
        created_at=now,
        updated_at=now,
    )
    with _saved(repo, user):
        user.todos.append(todo)

    logger.info("Todo created", extra={"userId": user.id, "todoId": todo.id})
    return copy.deepcopy(todo)


def update_todo(
    repo: UserRepository,
    user: User,
    todo_id: str,
    title: str,
    description: str,
    completed: bool,
    now: datetime | None = None,
) -> Todo:
    """Replace all mutable fields of a todo (full replace, not a patch).

    Raises:
        NotFoundError: no todo with this id in the user's collection
    """
    todo = user.find_todo(todo_id)
    if todo is None:
        raise NotFoundError("Todo not found")

    with _saved(repo, user):
        todo.title = title
        todo.description = description
        todo.completed = completed
        todo.updated_at = _advance(todo.updated_at, now or _now())

    logger.info("Todo updated", extra={"userId": user.id, "todoId": todo_id})
    return copy.deepcopy(todo)


def delete_todo(repo: UserRepository, user: User, todo_id: str) -> None:
    """Remove a todo, keeping the order of the rest.

    Raises:
        NotFoundError: no todo with this id in the user's collection
    """
    index = user.index_of_todo(todo_id)
    if index == -1:
        raise NotFoundError("Todo not found")

    with _saved(repo, user):
        del user.todos[index]

    logger.info("Todo deleted", extra={"userId": user.id, "todoId": todo_id})
