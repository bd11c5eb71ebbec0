from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class RateLimitPolicy:
    """At most `limit` hits per `period` for one limiter key."""
    period: timedelta
    limit: int

    def __post_init__(self):
        if self.period <= timedelta(0):
            raise ValueError("period must be positive")
        if self.limit < 1:
            raise ValueError("limit must be at least 1")


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one admit check. Truthy when the hit is allowed."""
    allowed: bool
    limit: int
    remaining: int
    reset_after: float  # seconds until the current window closes

    def __bool__(self) -> bool:
        return self.allowed
