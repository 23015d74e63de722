"""Rate limiting adapters.

The HTTP layer depends on ``AbstractRateLimiter`` only, so the in-memory
limiter can be replaced by a shared store when the API runs as several
processes.
"""

from story_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from story_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

__all__ = ["AbstractRateLimiter", "InMemoryFixedWindowRateLimiter", "RateLimitResult"]
