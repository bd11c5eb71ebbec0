"""Environment-driven settings.

Read once at startup (after load_dotenv) and passed to the components that
need them through api.dependencies.
"""

import os
from dataclasses import dataclass
from datetime import timedelta

from domain.model.errors import ConfigError
from domain.model.rate_limit import RateLimitPolicy

DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "min": timedelta(minutes=1),
    "hr": timedelta(hours=1),
}

# Endpoint classes guarded by their own limiter
GLOBAL = "GLOBAL"
SIGN_IN = "SIGN_IN"
USER_CREATION = "USER_CREATION"
TODO_CREATION = "TODO_CREATION"

DEFAULT_RATE_LIMITS = {
    GLOBAL: RateLimitPolicy(period=timedelta(seconds=1), limit=2),
    SIGN_IN: RateLimitPolicy(period=timedelta(minutes=5), limit=20),
    USER_CREATION: RateLimitPolicy(period=timedelta(hours=1), limit=5),
    TODO_CREATION: RateLimitPolicy(period=timedelta(hours=1), limit=100),
}

STORAGE_BACKENDS = ("mongodb", "memory")


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    storage_backend: str
    mongo_url: str | None
    mongodb_database: str
    trust_proxy_headers: bool
    rate_limits: dict[str, RateLimitPolicy]


def _positive_int(key: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}")
    if value < 1:
        raise ConfigError(f"{key} must be positive, got {value}")
    return value


def load_rate_limit_policy(name: str, default: RateLimitPolicy) -> RateLimitPolicy:
    """Read {name}_REQUEST_LIMITER_{UNITS,QUANTITY,LIMIT}; all three or none."""
    units_key = f"{name}_REQUEST_LIMITER_UNITS"
    quantity_key = f"{name}_REQUEST_LIMITER_QUANTITY"
    limit_key = f"{name}_REQUEST_LIMITER_LIMIT"
    keys = (units_key, quantity_key, limit_key)

    present = [key for key in keys if key in os.environ]
    if not present:
        return default
    if len(present) != len(keys):
        raise ConfigError(f"must either specify all or none of envs: {','.join(keys)}")

    units = os.environ[units_key]
    if units not in DURATION_UNITS:
        raise ConfigError(f"invalid units {units} for key {units_key}")
    quantity = _positive_int(quantity_key, os.environ[quantity_key])
    limit = _positive_int(limit_key, os.environ[limit_key])
    return RateLimitPolicy(period=DURATION_UNITS[units] * quantity, limit=limit)


def load_settings() -> Settings:
    """Build Settings from the environment. Raises ConfigError when invalid."""
    jwt_secret = os.getenv("JWT_SECRET")
    if not jwt_secret:
        raise ConfigError(
            "JWT_SECRET environment variable is required. "
            "Generate a secure key with: openssl rand -hex 32"
        )

    storage_backend = os.getenv("STORAGE_BACKEND", "mongodb").lower()
    if storage_backend not in STORAGE_BACKENDS:
        raise ConfigError(
            f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {storage_backend!r}"
        )

    return Settings(
        jwt_secret=jwt_secret,
        storage_backend=storage_backend,
        mongo_url=os.getenv("MONGO_URL"),
        mongodb_database=os.getenv("MONGODB_DATABASE", "todos"),
        trust_proxy_headers=os.getenv("TRUST_PROXY_HEADERS", "false").lower() in ("1", "true", "yes"),
        rate_limits={
            name: load_rate_limit_policy(name, default)
            for name, default in DEFAULT_RATE_LIMITS.items()
        },
    )
