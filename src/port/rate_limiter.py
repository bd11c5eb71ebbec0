"""Port definition for request rate limiting."""

from typing import Protocol

from domain.model.rate_limit import RateLimitDecision


class RateLimiter(Protocol):
    def admit(self, key: str) -> RateLimitDecision: ...
