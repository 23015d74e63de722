"""Rate limiting middleware for the HTTP layer.

Wires the limiter adapter into the HTTP layer. The limiter instance is built
by the app factory and kept on ``app.state.rate_limiter``, so every app has
its own counters and tests never share state.

Strategy: fixed-window limit per client address, enforced in an HTTP
middleware ahead of routing. This is spam mitigation, not access control.
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

from story_api.adapters.rate_limit.base import AbstractRateLimiter
from story_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from story_api.core.config import AppSettings

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


def build_rate_limiter(app_settings: AppSettings) -> AbstractRateLimiter:
    """Create the process-wide limiter from configuration."""

    return InMemoryFixedWindowRateLimiter(
        limit=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window_seconds,
    )


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    return request.app.state.rate_limiter


def client_key(request: Request) -> str:
    """Build the limiter key for the current request.

    Returns:
        str: Namespaced key, ``ip:<address>``.
    """

    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


def _hash_key(key: str) -> str:
    """Hash the limiter key so addresses never reach the logs."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


async def rate_limit_middleware(request: Request, call_next) -> Response:
    """HTTP middleware enforcing the per-address request budget.

    Runs ahead of routing and body parsing, so every request counts: unknown
    paths, the docs routes and malformed bodies included. Once the budget for
    the current window is spent, answers 429 until the window resets.

    Usage:
        app.middleware("http")(rate_limit_middleware)
    """

    app_settings: AppSettings = request.app.state.settings.app
    if not app_settings.rate_limit_enabled:
        return await call_next(request)

    key = client_key(request)
    result = get_rate_limiter(request).consume(key)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "key_hash": _hash_key(key),
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return await call_next(request)

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": _hash_key(key),
            "limit": result.limit,
            "window_s": app_settings.rate_limit_window_seconds,
            "retry_after_s": retry_after,
            "path": request.url.path,
        },
    )

    headers: dict[str, str] = {}
    if app_settings.rate_limit_include_headers:
        headers["Retry-After"] = str(retry_after)
        headers["X-RateLimit-Limit"] = str(result.limit)
        headers["X-RateLimit-Remaining"] = str(result.remaining)
        headers["X-RateLimit-Reset"] = str(result.reset_at)

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": RATE_LIMIT_MESSAGE},
        headers=headers or None,
    )
