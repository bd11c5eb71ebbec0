"""Bearer-token authentication dependency.

Sole gate in front of every todo route: resolves the Authorization header
into the loaded User aggregate and forwards it to the handler.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from api.dependencies import get_token_codec, get_user_repo
from domain.model.user import User
from port.user_repository import UserRepository
from services import auth_service
from services.token_codec import SessionTokenCodec

security = HTTPBearer(auto_error=False)


def get_current_user_required(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    repo: UserRepository = Depends(get_user_repo),
    codec: SessionTokenCodec = Depends(get_token_codec),
) -> User:
    """Get current authenticated user (required).

    Raises:
        AuthError: 401 if the token is missing, malformed, badly signed or expired
        NotFoundError: 404 if the token's user no longer exists
        PersistenceError: 500 if last_seen_at could not be saved
    """
    token = credentials.credentials if credentials else None
    return auth_service.resolve_session_user(repo, codec, token)
