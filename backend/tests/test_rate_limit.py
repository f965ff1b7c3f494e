"""Tests for the login rate limiter."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from aliasvault.services.rate_limit import LoginRateLimiter, RateConfig


class _Clock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def test_five_failures_then_blocked_until_window_rolls_over() -> None:
    clock = _Clock()
    limiter = LoginRateLimiter(RateConfig(), clock=clock)

    for _ in range(5):
        assert limiter.check_allowed("1.2.3.4")
        limiter.record_failure("1.2.3.4")

    assert not limiter.check_allowed("1.2.3.4")
    assert not limiter.check_allowed("1.2.3.4")

    clock.now += 15 * 60 + 1
    assert limiter.check_allowed("1.2.3.4")
    entry = limiter.get_entry("1.2.3.4")
    assert entry is not None
    assert entry.failure_count == 0
    assert entry.window_reset_at == clock.now + 15 * 60


def test_window_boundary_is_still_inside_window() -> None:
    clock = _Clock()
    limiter = LoginRateLimiter(RateConfig(window_seconds=60, max_attempts=1), clock=clock)

    assert limiter.check_allowed("client")
    limiter.record_failure("client")

    clock.now += 60
    assert not limiter.check_allowed("client")
    clock.now += 0.5
    assert limiter.check_allowed("client")


def test_clients_have_independent_budgets() -> None:
    limiter = LoginRateLimiter(RateConfig(max_attempts=2), clock=_Clock())
    for _ in range(2):
        assert limiter.check_allowed("a")
        limiter.record_failure("a")

    assert not limiter.check_allowed("a")
    assert limiter.check_allowed("b")


def test_success_does_not_reset_failures() -> None:
    limiter = LoginRateLimiter(RateConfig(), clock=_Clock())
    assert limiter.check_allowed("a")
    limiter.record_failure("a")
    # A successful login records nothing; the count stays until the window ends
    assert limiter.check_allowed("a")
    assert limiter.get_entry("a").failure_count == 1  # type: ignore[union-attr]


def test_record_failure_without_entry_is_noop() -> None:
    limiter = LoginRateLimiter(RateConfig(), clock=_Clock())
    limiter.record_failure("ghost")
    assert limiter.get_entry("ghost") is None
    assert limiter.check_allowed("ghost")
    assert limiter.get_entry("ghost").failure_count == 0  # type: ignore[union-attr]


def test_concurrent_failures_are_all_counted() -> None:
    limiter = LoginRateLimiter(RateConfig(max_attempts=10_000), clock=_Clock())
    assert limiter.check_allowed("busy")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda _: limiter.record_failure("busy"), range(400)))

    assert limiter.get_entry("busy").failure_count == 400  # type: ignore[union-attr]
