"""FastAPI application entry point."""

import os
import logging
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Must run before anything reads the environment
load_dotenv()

from adapter.mongodb.connection import get_mongodb_client
from adapter.mongodb.indexes import ensure_all_indexes
from api.dependencies import get_settings
from api.error_handlers import register_error_handlers
from api.middleware.rate_limit import enforce_global_rate_limit
from api.middleware.request_context import RequestContextMiddleware
from api.routes import health, sessions, todos, users
from utils.logging import setup_structured_logging

setup_structured_logging()

logger = logging.getLogger(__name__)

# Read version from pyproject.toml (single source of truth)
_project_root = Path(__file__).parent.parent.parent
with open(_project_root / "pyproject.toml", "rb") as f:
    VERSION = tomllib.load(f)["project"]["version"]

SERVICE_NAME = "Todos API"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: validate settings and prepare storage."""
    # Fail fast on a missing JWT_SECRET or a bad rate-limit override
    settings = get_settings()
    logger.info("Settings loaded", extra={
        "storage_backend": settings.storage_backend,
        "rate_limits": {
            name: {"period_seconds": p.period.total_seconds(), "limit": p.limit}
            for name, p in settings.rate_limits.items()
        },
    })

    if settings.storage_backend == "mongodb":
        client = get_mongodb_client(settings.mongo_url)
        if client:
            if ensure_all_indexes(client[settings.mongodb_database]):
                logger.info("MongoDB indexes verified/created successfully")
            else:
                logger.warning("Failed to create some MongoDB indexes")
        else:
            logger.warning("MongoDB unavailable, skipping index creation")

    yield


app = FastAPI(
    title=SERVICE_NAME,
    description="Multi-tenant todo lists behind stateless session tokens",
    version=VERSION,
    lifespan=lifespan,
    dependencies=[Depends(enforce_global_rate_limit)],
)

register_error_handlers(app)

# CORS configuration for cross-origin requests
# - If CORS_ORIGINS="*": allow_credentials must be False (browsers don't support credentials with wildcard)
# - If CORS_ORIGINS is a specific list: allow_credentials can be True
cors_origins_env = os.getenv("CORS_ORIGINS", "*")

if cors_origins_env == "*":
    cors_origins = ["*"]
    allow_credentials = False
else:
    cors_origins = [origin.strip() for origin in cors_origins_env.split(",")]
    allow_credentials = True
    logger.info(f"CORS configured with specific origins: {cors_origins}")

app.add_middleware(RequestContextMiddleware)
# Added last so it wraps everything, preflight requests included
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Accept", "Content-Type", "Content-Length", "Accept-Encoding",
        "X-CSRF-Token", "Authorization",
    ],
    expose_headers=[
        "X-Request-ID", "X-RateLimit-Limit", "X-RateLimit-Remaining",
        "X-RateLimit-Reset", "Retry-After",
    ],
)

app.include_router(health.router)
app.include_router(sessions.router)
app.include_router(users.router)
app.include_router(todos.router)


if __name__ == "__main__":
    import uvicorn
    # Requests are logged by RequestContextMiddleware
    uvicorn.run(
        app,
        host=os.getenv("HOST") or "0.0.0.0",
        port=int(os.getenv("PORT", 4000)),
        access_log=False,
    )
