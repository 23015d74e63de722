"""Unit tests for the in-memory rate limiter adapter."""

from unittest.mock import Mock

import pytest

from story_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter


def test_allows_up_to_limit_in_same_window() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=3, window_seconds=60, clock=clock)

    assert limiter.consume("k").allowed is True
    assert limiter.consume("k").allowed is True
    result = limiter.consume("k")
    assert result.allowed is True
    assert result.remaining == 0
    assert result.retry_after_seconds is None


def test_twenty_first_request_is_blocked_with_defaults() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=20, window_seconds=60, clock=clock)

    results = [limiter.consume("ip:1.2.3.4") for _ in range(21)]

    assert all(r.allowed for r in results[:20])
    assert results[20].allowed is False


def test_blocked_result_reports_retry_after() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    limiter.consume("k")
    blocked = limiter.consume("k")

    # Window [960, 1020) -> 20 seconds left
    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.reset_at == 1020
    assert blocked.retry_after_seconds == 20


def test_blocked_requests_are_not_counted() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=10, clock=clock)

    limiter.consume("k")
    for _ in range(5):
        assert limiter.consume("k").allowed is False

    clock.return_value = 1010.0
    assert limiter.consume("k").remaining == 0


def test_resets_on_new_window() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=10, clock=clock)

    assert limiter.consume("k").allowed is True
    assert limiter.consume("k").allowed is False

    clock.return_value = 1010.0
    assert limiter.consume("k").allowed is True


def test_isolated_by_key() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    assert limiter.consume("k1").allowed is True
    assert limiter.consume("k1").allowed is False

    assert limiter.consume("k2").allowed is True


def test_stale_windows_are_pruned() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=5, window_seconds=10, clock=clock)

    for i in range(10):
        limiter.consume(f"ip:{i}")
    assert limiter.tracked_keys() == 10

    clock.return_value = 1020.0
    limiter.consume("ip:new")
    assert limiter.tracked_keys() == 1


def test_reset_forgets_counters() -> None:
    limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=60, clock=lambda: 1000.0)

    limiter.consume("k")
    limiter.reset()

    assert limiter.consume("k").allowed is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_seconds": 60},
        {"limit": 1, "window_seconds": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryFixedWindowRateLimiter(**kwargs)


def test_invalid_consume_args() -> None:
    limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=60)

    with pytest.raises(ValueError):
        limiter.consume("")

    with pytest.raises(ValueError):
        limiter.consume("k", cost=0)
