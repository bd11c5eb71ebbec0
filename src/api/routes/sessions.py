"""Session routes (login)."""

from fastapi import APIRouter, Depends

from api.dependencies import get_password_hasher, get_token_codec, get_user_repo
from api.middleware.rate_limit import enforce_sign_in_rate_limit
from api.models import CreateSessionRequest, SessionResponse
from port.user_repository import UserRepository
from services import auth_service
from services.password_hasher import PasswordHasher
from services.token_codec import SessionTokenCodec

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post(
    "",
    response_model=SessionResponse,
    dependencies=[Depends(enforce_sign_in_rate_limit)],
)
def create_session(
    request: CreateSessionRequest,
    repo: UserRepository = Depends(get_user_repo),
    hasher: PasswordHasher = Depends(get_password_hasher),
    codec: SessionTokenCodec = Depends(get_token_codec),
):
    """Exchange email and password for a session token.

    Raises:
        InvalidCredentialsError: 400 for an unknown email or a wrong password
    """
    token = auth_service.create_session(repo, hasher, codec, request.email, request.password)
    return SessionResponse(token=token)
