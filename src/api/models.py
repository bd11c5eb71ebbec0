"""Pydantic models for API request/response."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from domain.model.user import Todo, User


class RequestModel(BaseModel):
    """Strict request body: unknown fields and type coercion are rejected."""
    model_config = ConfigDict(extra="forbid", strict=True)


class ResponseModel(BaseModel):
    """Response body serialized with camelCase field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── requests ─────────────────────────────────────────────

class CreateUserRequest(RequestModel):
    """Request model for account creation."""
    email: EmailStr
    password: str


class CreateSessionRequest(RequestModel):
    """Request model for session creation (login).

    Normalized the same way as at signup, so the lookup matches the stored address.
    """
    email: EmailStr
    password: str


class CreateTodoRequest(RequestModel):
    title: str
    description: str = ""
    completed: bool = False


class UpdateTodoRequest(RequestModel):
    """Full replacement of a todo's mutable fields; all three are required."""
    title: str
    description: str
    completed: bool


# ── responses ────────────────────────────────────────────

class TodoResponse(ResponseModel):
    id: str
    title: str
    description: str
    completed: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, todo: Todo) -> 'TodoResponse':
        return cls(
            id=todo.id,
            title=todo.title,
            description=todo.description,
            completed=todo.completed,
            created_at=todo.created_at,
            updated_at=todo.updated_at,
        )


class UserResponse(ResponseModel):
    """Public view of a user; the password hash is never included."""
    id: str
    email: Optional[str] = None
    created_at: datetime
    last_seen_at: datetime
    todos: list[TodoResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, user: User) -> 'UserResponse':
        return cls(
            id=user.id,
            email=user.email,
            created_at=user.created_at,
            last_seen_at=user.last_seen_at,
            todos=[TodoResponse.from_domain(t) for t in user.todos],
        )


class SessionResponse(ResponseModel):
    token: str


class StatusResponse(ResponseModel):
    status: str
    marker: str
    timestamp: str


class ErrorDetail(BaseModel):
    message: str
    field: str = ""


class ErrorResponse(BaseModel):
    """Uniform error envelope."""
    errors: list[ErrorDetail]
