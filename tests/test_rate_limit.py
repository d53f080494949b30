"""
tests.test_rate_limit

Sliding-window limiter behavior with a controllable clock.
"""

from __future__ import annotations

import threading

import pytest

from gallery_access.ratelimit.limiter import (
    FALLBACK_CLIENT_ID,
    RateLimitConfig,
    RateLimiter,
    client_fingerprint,
    default_rate_limits,
)

AUTH = RateLimitConfig(window_ms=60_000, max_requests=5)


class FakeClock:
    def __init__(self, now: int = 1_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> RateLimiter:
    # Sampler pinned above the sweep probability: no random sweeps during tests.
    return RateLimiter(clock=clock, sampler=lambda: 1.0)


def test_default_policies() -> None:
    assert default_rate_limits() == {
        "auth": RateLimitConfig(60_000, 5),
        "profile": RateLimitConfig(60_000, 10),
        "upload": RateLimitConfig(60_000, 20),
        "api": RateLimitConfig(60_000, 30),
        "delete": RateLimitConfig(3_600_000, 3),
    }


def test_window_sequence_and_expiry(limiter: RateLimiter, clock: FakeClock) -> None:
    results = [limiter.check("auth", "1.2.3.4", AUTH) for _ in range(5)]
    assert [r.allowed for r in results] == [True] * 5
    assert [r.remaining for r in results] == [4, 3, 2, 1, 0]

    sixth = limiter.check("auth", "1.2.3.4", AUTH)
    assert (sixth.allowed, sixth.remaining) == (False, 0)

    clock.advance(60_001)
    after = limiter.check("auth", "1.2.3.4", AUTH)
    assert (after.allowed, after.remaining) == (True, 4)


def test_window_boundary_is_inclusive(limiter: RateLimiter, clock: FakeClock) -> None:
    for _ in range(5):
        limiter.check("auth", "c", AUTH)
    clock.advance(60_000)
    # Exactly one window later is still inside the window.
    assert limiter.check("auth", "c", AUTH).allowed is False


def test_rejections_do_not_consume_budget(limiter: RateLimiter) -> None:
    for _ in range(5):
        limiter.check("auth", "c", AUTH)
    for _ in range(10):
        limiter.check("auth", "c", AUTH)
    assert limiter.status("auth", "c", AUTH).count == 5


def test_reset_restores_fresh_sequence(limiter: RateLimiter) -> None:
    for _ in range(6):
        limiter.check("auth", "c", AUTH)
    limiter.reset("auth", "c")
    remaining = [limiter.check("auth", "c", AUTH).remaining for _ in range(5)]
    assert remaining == [4, 3, 2, 1, 0]
    assert limiter.check("auth", "c", AUTH).allowed is False


def test_upload_policy_twenty_then_denied(limiter: RateLimiter) -> None:
    cfg = RateLimitConfig(window_ms=60_000, max_requests=20)
    results = [limiter.check("upload", "c", cfg) for _ in range(20)]
    assert all(r.allowed for r in results)
    remaining = [r.remaining for r in results]
    assert remaining == sorted(remaining, reverse=True)
    assert len(set(remaining)) == 20
    assert remaining[-1] == 0
    assert limiter.check("upload", "c", cfg).allowed is False


def test_named_policy_used_when_config_omitted(limiter: RateLimiter) -> None:
    remaining = [limiter.check("delete", "c").remaining for _ in range(3)]
    assert remaining == [2, 1, 0]
    assert limiter.check("delete", "c").allowed is False
    # Unknown actions fall back to 10 per minute.
    assert limiter.check("something-else", "c").remaining == 9


def test_keys_are_isolated_by_action_and_client(limiter: RateLimiter) -> None:
    for _ in range(5):
        limiter.check("auth", "a", AUTH)
    assert limiter.check("auth", "b", AUTH).allowed is True
    assert limiter.check("profile", "a", AUTH).allowed is True


def test_status_is_read_only(limiter: RateLimiter, clock: FakeClock) -> None:
    fresh = limiter.status("auth", "c", AUTH)
    assert (fresh.count, fresh.remaining, fresh.reset_in_ms) == (0, 5, 0)
    assert len(limiter) == 0

    limiter.check("auth", "c", AUTH)
    limiter.check("auth", "c", AUTH)
    clock.advance(10_000)
    st = limiter.status("auth", "c", AUTH)
    assert (st.count, st.remaining, st.reset_in_ms) == (2, 3, 50_000)

    clock.advance(60_000)
    expired = limiter.status("auth", "c", AUTH)
    assert (expired.count, expired.remaining) == (0, 5)
    # Inspecting an expired window does not reset it; the next check does.
    assert len(limiter) == 1


def test_sweep_drops_only_records_past_retention(clock: FakeClock) -> None:
    limiter = RateLimiter(clock=clock, sampler=lambda: 1.0)
    limiter.check("auth", "old", AUTH)
    clock.advance(3_600_001)
    limiter.check("auth", "new", AUTH)
    assert limiter.sweep() == 1
    assert len(limiter) == 1
    assert limiter.status("auth", "new", AUTH).count == 1


def test_sweep_runs_on_sampled_checks(clock: FakeClock) -> None:
    samples = iter([1.0, 0.0])
    limiter = RateLimiter(clock=clock, sampler=lambda: next(samples))
    limiter.check("auth", "old", AUTH)
    clock.advance(3_600_001)
    limiter.check("auth", "new", AUTH)
    assert len(limiter) == 1


def test_retention_outlives_longest_window(clock: FakeClock) -> None:
    long_window = {"archive": RateLimitConfig(window_ms=7_200_000, max_requests=1)}
    limiter = RateLimiter(long_window, clock=clock, sampler=lambda: 1.0)
    limiter.check("archive", "c")
    clock.advance(3_600_001)
    assert limiter.sweep() == 0
    assert limiter.check("archive", "c").allowed is False


def test_sweep_keeps_live_records_of_adhoc_configs(clock: FakeClock) -> None:
    limiter = RateLimiter(clock=clock, sampler=lambda: 1.0)
    daily = RateLimitConfig(window_ms=86_400_000, max_requests=1)
    assert limiter.check("export", "c", daily).allowed is True
    clock.advance(3_600_001)
    assert limiter.sweep() == 0
    assert limiter.check("export", "c", daily).allowed is False

    clock.advance(86_400_000)
    assert limiter.sweep() == 1


def test_concurrent_checks_do_not_lose_updates() -> None:
    limiter = RateLimiter(sampler=lambda: 1.0)
    cfg = RateLimitConfig(window_ms=60_000, max_requests=50)
    allowed: list[bool] = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(20):
            result = limiter.check("api", "shared", cfg)
            with lock:
                allowed.append(result.allowed)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert allowed.count(True) == 50
    assert limiter.status("api", "shared", cfg).count == 50


@pytest.mark.parametrize(
    ("headers", "expected"),
    [
        ({"x-forwarded-for": "203.0.113.7, 10.0.0.1"}, "203.0.113.7"),
        ({"x-forwarded-for": " 203.0.113.7 "}, "203.0.113.7"),
        ({"x-real-ip": "198.51.100.2"}, "198.51.100.2"),
        ({"x-forwarded-for": "203.0.113.7", "x-real-ip": "198.51.100.2"}, "203.0.113.7"),
        ({}, FALLBACK_CLIENT_ID),
    ],
)
def test_client_fingerprint(headers: dict[str, str], expected: str) -> None:
    assert client_fingerprint(headers) == expected
