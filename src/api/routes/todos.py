"""Todo routes.

Every route resolves the caller through get_current_user_required and
works only on that user's own collection.

Endpoints:
- GET /todos: List the caller's todos
- POST /todos: Create a todo
- PUT /todos/{todo_id}: Replace a todo's title, description and completed flag
- DELETE /todos/{todo_id}: Delete a todo
"""

from fastapi import APIRouter, Depends, status

from api.dependencies import get_user_repo
from api.middleware.rate_limit import enforce_todo_creation_rate_limit
from api.models import CreateTodoRequest, TodoResponse, UpdateTodoRequest
from api.security import get_current_user_required
from domain.model.user import User
from port.user_repository import UserRepository
from services import todo_service

router = APIRouter(prefix="/todos", tags=["todos"])


@router.get("", response_model=list[TodoResponse])
def list_todos(current_user: User = Depends(get_current_user_required)):
    return [TodoResponse.from_domain(t) for t in todo_service.list_todos(current_user)]


@router.post(
    "",
    response_model=TodoResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_todo_creation_rate_limit)],
)
def create_todo(
    request: CreateTodoRequest,
    current_user: User = Depends(get_current_user_required),
    repo: UserRepository = Depends(get_user_repo),
):
    todo = todo_service.create_todo(
        repo, current_user, request.title, request.description, request.completed,
    )
    return TodoResponse.from_domain(todo)


@router.put("/{todo_id}", response_model=TodoResponse)
def update_todo(
    todo_id: str,
    request: UpdateTodoRequest,
    current_user: User = Depends(get_current_user_required),
    repo: UserRepository = Depends(get_user_repo),
):
    todo = todo_service.update_todo(
        repo, current_user, todo_id, request.title, request.description, request.completed,
    )
    return TodoResponse.from_domain(todo)


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_todo(
    todo_id: str,
    current_user: User = Depends(get_current_user_required),
    repo: UserRepository = Depends(get_user_repo),
):
    todo_service.delete_todo(repo, current_user, todo_id)
