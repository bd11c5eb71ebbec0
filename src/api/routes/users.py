"""User routes (account creation)."""

from fastapi import APIRouter, Depends, status

from api.dependencies import get_password_hasher, get_user_repo
from api.middleware.rate_limit import enforce_user_creation_rate_limit
from api.models import CreateUserRequest, UserResponse
from port.user_repository import UserRepository
from services import auth_service
from services.password_hasher import PasswordHasher

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_user_creation_rate_limit)],
)
def create_user(
    request: CreateUserRequest,
    repo: UserRepository = Depends(get_user_repo),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    """Register a new user.

    Raises:
        ValidationError: 400 if the password is too short or too long
        DuplicateEmailError: 409 if the email is already registered
    """
    user = auth_service.register(repo, hasher, request.email, request.password)
    return UserResponse.from_domain(user)
