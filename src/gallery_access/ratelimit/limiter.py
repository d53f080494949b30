"""
gallery_access.ratelimit.limiter

Sliding-window rate limiter held in process memory.

Responsibilities:
- Bound the call rate of a named action per client fingerprint.
- Report remaining budget without mutating state (`status`).
- Amortize cleanup of stale records over regular checks.

State is ephemeral and local to one process: it is not durable and not shared
across instances, so a multi-instance deployment enforces each limit per
instance.
"""

from __future__ import annotations

import random
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from gallery_access.observability.logging import get_logger

log = get_logger(__name__)

FALLBACK_CLIENT_ID = "local"
DEFAULT_SWEEP_PROBABILITY = 0.01
MIN_RETENTION_MS = 3_600_000


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    window_ms: int
    max_requests: int


DEFAULT_CONFIG = RateLimitConfig(window_ms=60_000, max_requests=10)


def default_rate_limits() -> dict[str, RateLimitConfig]:
    return {
        "auth": RateLimitConfig(window_ms=60_000, max_requests=5),
        "profile": RateLimitConfig(window_ms=60_000, max_requests=10),
        "upload": RateLimitConfig(window_ms=60_000, max_requests=20),
        "api": RateLimitConfig(window_ms=60_000, max_requests=30),
        "delete": RateLimitConfig(window_ms=3_600_000, max_requests=3),
    }


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    allowed: bool
    remaining: int


@dataclass(frozen=True, slots=True)
class RateLimitStatus:
    count: int
    remaining: int
    reset_in_ms: int


@dataclass(slots=True)
class _Record:
    count: int
    window_start: int
    window_ms: int


def client_fingerprint(headers: Mapping[str, str]) -> str:
    """
    Identify the caller: first hop of `x-forwarded-for`, then `x-real-ip`,
    then a fixed fallback for direct/local traffic.
    """

    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return FALLBACK_CLIENT_ID


def _now_ms() -> int:
    return int(time.time() * 1000)


class RateLimiter:
    def __init__(
        self,
        policies: Mapping[str, RateLimitConfig] | None = None,
        *,
        clock: Callable[[], int] = _now_ms,
        sampler: Callable[[], float] = random.random,
        sweep_probability: float = DEFAULT_SWEEP_PROBABILITY,
        retention_ms: int | None = None,
    ) -> None:
        self._policies = dict(policies if policies is not None else default_rate_limits())
        self._clock = clock
        self._sampler = sampler
        self._sweep_probability = sweep_probability
        longest = max((p.window_ms for p in self._policies.values()), default=0)
        # Retention must outlive every window, otherwise a sweep could drop a live record.
        self._retention_ms = retention_ms or max(MIN_RETENTION_MS, longest)
        self._lock = threading.Lock()
        self._records: dict[str, _Record] = {}

    def policy_for(self, action: str) -> RateLimitConfig:
        return self._policies.get(action, DEFAULT_CONFIG)

    def check(
        self, action: str, client_id: str, config: RateLimitConfig | None = None
    ) -> RateLimitResult:
        cfg = config or self.policy_for(action)
        key = _key(action, client_id)
        now = self._clock()

        if self._sampler() < self._sweep_probability:
            self.sweep()

        with self._lock:
            record = self._records.get(key)
            if record is None or now - record.window_start > cfg.window_ms:
                self._records[key] = _Record(count=1, window_start=now, window_ms=cfg.window_ms)
                return RateLimitResult(allowed=True, remaining=cfg.max_requests - 1)

            # Rejections do not consume budget.
            if record.count >= cfg.max_requests:
                return RateLimitResult(allowed=False, remaining=0)

            record.count += 1
            return RateLimitResult(allowed=True, remaining=cfg.max_requests - record.count)

    def status(
        self, action: str, client_id: str, config: RateLimitConfig | None = None
    ) -> RateLimitStatus:
        cfg = config or self.policy_for(action)
        now = self._clock()
        with self._lock:
            record = self._records.get(_key(action, client_id))
            if record is None:
                return RateLimitStatus(count=0, remaining=cfg.max_requests, reset_in_ms=0)
            elapsed = now - record.window_start
            if elapsed > cfg.window_ms:
                return RateLimitStatus(count=0, remaining=cfg.max_requests, reset_in_ms=0)
            return RateLimitStatus(
                count=record.count,
                remaining=max(0, cfg.max_requests - record.count),
                reset_in_ms=cfg.window_ms - elapsed,
            )

    def reset(self, action: str, client_id: str) -> None:
        with self._lock:
            self._records.pop(_key(action, client_id), None)

    def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            stale = [
                key
                for key, record in self._records.items()
                # Ad-hoc configs may use windows longer than the retention period.
                if now - record.window_start > max(self._retention_ms, record.window_ms)
            ]
            for key in stale:
                del self._records[key]
        if stale:
            log.debug("rate_limit_sweep", removed=len(stale))
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def _key(action: str, client_id: str) -> str:
    return f"{action}:{client_id}"


# --- Module Notes -----------------------------------------------------------
# The limiter is constructed once by the composition root (`api.app.create_app`)
# and reached through `app.state`; tests build their own instance with a fake clock.
