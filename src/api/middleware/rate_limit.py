"""Rate-limit dependencies.

Each guarded endpoint class has its own limiter. A denied hit raises
RateLimitedError before the handler (or authentication) runs.
"""

import logging
import time
from typing import Callable

from fastapi import Depends, Request, Response

from api.config import Settings
from api.dependencies import (
    get_global_limiter,
    get_settings,
    get_sign_in_limiter,
    get_todo_creation_limiter,
    get_user_creation_limiter,
)
from domain.model.errors import RateLimitedError
from port.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


def client_ip(request: Request, trust_proxy_headers: bool = False) -> str:
    """Limiter key for the caller. Proxy headers are honoured only when trusted."""
    if trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()
    if request.client:
        return request.client.host
    return "unknown"


def rate_limit(limiter_dependency: Callable[..., RateLimiter], name: str) -> Callable[..., None]:
    """Build a dependency that admits or rejects the request with the given limiter."""

    def enforce(
        request: Request,
        response: Response,
        limiter: RateLimiter = Depends(limiter_dependency),
        settings: Settings = Depends(get_settings),
    ) -> None:
        key = client_ip(request, settings.trust_proxy_headers)
        decision = limiter.admit(key)
        if not decision:
            logger.warning("Rate limit exceeded", extra={
                "limiter": name,
                "client_ip": key,
                "path": request.url.path,
            })
            raise RateLimitedError(retry_after=decision.reset_after)

        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        response.headers["X-RateLimit-Reset"] = str(int(time.time() + decision.reset_after))

    enforce.__name__ = f"enforce_{name}_rate_limit"
    return enforce


enforce_global_rate_limit = rate_limit(get_global_limiter, "global")
enforce_sign_in_rate_limit = rate_limit(get_sign_in_limiter, "sign_in")
enforce_user_creation_rate_limit = rate_limit(get_user_creation_limiter, "user_creation")
enforce_todo_creation_rate_limit = rate_limit(get_todo_creation_limiter, "todo_creation")
