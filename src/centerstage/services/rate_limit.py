"""Fixed-window rate limiting for public submissions.

Counters live in a process-local store, so each running instance enforces its
own limit. A fixed window lets up to twice the limit through across a window
boundary.
"""

import asyncio
import logging
import math
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

_logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


@dataclass
class RateLimitEntry:
    """Request count for one client within the current window."""

    count: int
    reset_time: int


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate limit check."""

    allowed: bool
    remaining: int
    reset_time: int


class RateLimitStore(Protocol):
    """Storage interface for rate limit counters."""

    def get(self, key: str) -> RateLimitEntry | None:
        """Return the entry for a client, if present."""

    def set(self, key: str, entry: RateLimitEntry) -> None:
        """Store the entry for a client."""

    def sweep(self, now_ms: int) -> int:
        """Drop entries whose window has ended and return how many."""


@dataclass
class InMemoryRateLimitStore(RateLimitStore):
    """Process-local rate limit storage."""

    _entries: dict[str, RateLimitEntry]

    def __init__(self) -> None:
        self._entries = {}

    def get(self, key: str) -> RateLimitEntry | None:
        """Return the entry for a client, if present."""
        return self._entries.get(key)

    def set(self, key: str, entry: RateLimitEntry) -> None:
        """Store the entry for a client."""
        self._entries[key] = entry

    def sweep(self, now_ms: int) -> int:
        """Drop entries whose window has ended."""
        expired = [
            key for key, entry in self._entries.items() if now_ms > entry.reset_time
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class RateLimiter:
    """Fixed-window request counter keyed by client identifier."""

    store: RateLimitStore
    limit: int = 5
    window_ms: int = 60_000
    clock: Callable[[], int] = field(default=_now_ms)

    def check(
        self,
        identifier: str,
        limit: int | None = None,
        window_ms: int | None = None,
    ) -> RateLimitResult:
        """Count a request and report whether it may proceed.

        A denied request is not counted.
        """
        limit = self.limit if limit is None else limit
        window_ms = self.window_ms if window_ms is None else window_ms
        now = self.clock()
        entry = self.store.get(identifier)

        if entry is None or now > entry.reset_time:
            reset_time = now + window_ms
            self.store.set(identifier, RateLimitEntry(count=1, reset_time=reset_time))
            return RateLimitResult(
                allowed=True, remaining=limit - 1, reset_time=reset_time
            )

        if entry.count < limit:
            entry.count += 1
            self.store.set(identifier, entry)
            return RateLimitResult(
                allowed=True,
                remaining=limit - entry.count,
                reset_time=entry.reset_time,
            )

        return RateLimitResult(allowed=False, remaining=0, reset_time=entry.reset_time)

    def retry_after_seconds(self, result: RateLimitResult) -> int:
        """Return whole seconds until the result's window resets."""
        return retry_after_seconds(result.reset_time, self.clock())

    def sweep(self) -> int:
        """Drop expired counters from the store."""
        removed = self.store.sweep(self.clock())
        if removed:
            _logger.debug("Rate limit sweep removed %s entries", removed)
        return removed

    async def run_sweeper(self, interval_seconds: float = 300) -> None:
        """Sweep expired counters forever; cancel the task to stop."""
        while True:
            await asyncio.sleep(interval_seconds)
            self.sweep()


def retry_after_seconds(reset_time_ms: int, now_ms: int) -> int:
    """Return ``ceil((reset_time - now) / 1000)`` seconds."""
    return math.ceil((reset_time_ms - now_ms) / 1000)


def client_identifier(headers: Mapping[str, str]) -> str:
    """Derive the client key from proxy headers.

    Uses the first X-Forwarded-For entry, then X-Real-IP, then
    CF-Connecting-IP. Clients without any of these share one bucket.
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    forwarded = lowered.get("x-forwarded-for", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = lowered.get(header, "").strip()
        if value:
            return value
    return UNKNOWN_CLIENT
