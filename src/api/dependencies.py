"""Composition root: builds each collaborator once and hands it to routes.

Routes and services never reach for module-level state; they receive
these objects through FastAPI's Depends, which tests swap out with
app.dependency_overrides.
"""

import threading
from functools import lru_cache
from typing import Callable, Hashable, TypeVar

from fastapi import Depends, HTTPException

from adapter.memory.rate_limiter import FixedWindowRateLimiter
from adapter.memory.user_repository import InMemoryUserRepository
from adapter.mongodb.connection import get_mongodb_client
from adapter.mongodb.user_repository import MongoUserRepository
from api.config import GLOBAL, SIGN_IN, TODO_CREATION, USER_CREATION, Settings, load_settings
from domain.model.rate_limit import RateLimitPolicy
from port.rate_limiter import RateLimiter
from port.user_repository import UserRepository
from services.password_hasher import PasswordHasher
from services.token_codec import SessionTokenCodec


@lru_cache
def get_settings() -> Settings:
    return load_settings()


T = TypeVar("T")

# Stateful collaborators: exactly one per key, even under concurrent first use
_instances: dict = {}
_instances_lock = threading.Lock()


def _shared(key: Hashable, factory: Callable[[], T]) -> T:
    with _instances_lock:
        if key not in _instances:
            _instances[key] = factory()
        return _instances[key]


def _memory_user_repo() -> InMemoryUserRepository:
    return _shared("memory_user_repo", InMemoryUserRepository)


@lru_cache
def _token_codec(secret: str) -> SessionTokenCodec:
    return SessionTokenCodec(secret)


def _limiter(name: str, policy: RateLimitPolicy) -> FixedWindowRateLimiter:
    return _shared(("limiter", name, policy), lambda: FixedWindowRateLimiter(policy))


def _get_db(settings: Settings):
    """Get MongoDB database, raising 503 if unavailable."""
    client = get_mongodb_client(settings.mongo_url)
    if client is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return client[settings.mongodb_database]


def get_user_repo(settings: Settings = Depends(get_settings)) -> UserRepository:
    if settings.storage_backend == "memory":
        return _memory_user_repo()
    return MongoUserRepository(_get_db(settings))


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


def get_token_codec(settings: Settings = Depends(get_settings)) -> SessionTokenCodec:
    return _token_codec(settings.jwt_secret)


def get_global_limiter(settings: Settings = Depends(get_settings)) -> RateLimiter:
    return _limiter(GLOBAL, settings.rate_limits[GLOBAL])


def get_sign_in_limiter(settings: Settings = Depends(get_settings)) -> RateLimiter:
    return _limiter(SIGN_IN, settings.rate_limits[SIGN_IN])


def get_user_creation_limiter(settings: Settings = Depends(get_settings)) -> RateLimiter:
    return _limiter(USER_CREATION, settings.rate_limits[USER_CREATION])


def get_todo_creation_limiter(settings: Settings = Depends(get_settings)) -> RateLimiter:
    return _limiter(TODO_CREATION, settings.rate_limits[TODO_CREATION])


def reset_dependencies() -> None:
    """Drop every cached collaborator (settings, store, codec, limiters)."""
    for cached in (get_settings, _token_codec, get_password_hasher):
        cached.cache_clear()
    with _instances_lock:
        _instances.clear()
