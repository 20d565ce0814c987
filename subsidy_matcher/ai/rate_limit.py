"""Prozessweiter Rate-Limiter pro Provider-Account.

Enforces, for every caller sharing one provider account:
- a minimum delay between two calls (burst protection)
- the tier's requests-per-minute ceiling
- the tier's tokens-per-minute ceiling

Slots are reserved under a thread lock and waited for outside of it, so
concurrent callers get consecutive, non-overlapping slots.
"""

import asyncio
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional, Tuple

from subsidy_matcher.core.exceptions import RateLimitExceeded
from subsidy_matcher.core.logging import get_logger
from subsidy_matcher.settings import Settings, settings as default_settings

logger = get_logger("ai.rate_limit")

WINDOW_SECONDS = 60.0


class RateLimiter:
    """Sliding-window limiter for one provider account."""

    def __init__(
        self,
        requests_per_minute: int,
        tokens_per_minute: int,
        min_delay_seconds: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
        window_seconds: float = WINDOW_SECONDS,
    ):
        self.requests_per_minute = requests_per_minute
        self.tokens_per_minute = tokens_per_minute
        self.min_delay_seconds = min_delay_seconds
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._calls: Deque[Tuple[float, int]] = deque()
        self._last_call: Optional[float] = None
        self._blocked_until = 0.0

    def _prune(self, now: float) -> None:
        while self._calls and self._calls[0][0] + self.window_seconds <= now:
            self._calls.popleft()

    def _earliest_start(self, now: float, tokens: int) -> float:
        start = max(now, self._blocked_until)

        if self._last_call is not None:
            start = max(start, self._last_call + self.min_delay_seconds)

        calls = list(self._calls)
        if len(calls) >= self.requests_per_minute:
            start = max(start, calls[-self.requests_per_minute][0] + self.window_seconds)

        total = sum(t for _, t in calls)
        for timestamp, used in calls:
            if total + tokens <= self.tokens_per_minute:
                break
            total -= used
            start = max(start, timestamp + self.window_seconds)

        return start

    def reserve(self, tokens: int, max_wait: float) -> float:
        """Reserve the next slot for a call of `tokens` estimated tokens.

        Returns:
            Seconds to wait before the call may be sent

        Raises:
            RateLimitExceeded: If the slot is further away than max_wait
        """
        if tokens > self.tokens_per_minute:
            raise RateLimitExceeded(
                f"Call of {tokens} tokens exceeds {self.tokens_per_minute} tokens/min",
                wait_seconds=float("inf"),
            )

        with self._lock:
            now = self._clock()
            self._prune(now)
            start = self._earliest_start(now, tokens)
            wait = start - now
            if wait > max_wait:
                raise RateLimitExceeded(
                    f"Rate limit slot in {wait:.1f}s exceeds max wait {max_wait:.1f}s",
                    wait_seconds=wait,
                )
            self._calls.append((start, tokens))
            self._last_call = start
            return wait

    async def acquire(self, tokens: int, max_wait: float) -> float:
        """Reserve a slot and sleep until it starts."""
        wait = self.reserve(tokens, max_wait)
        if wait > 0:
            logger.debug("Rate limiter: waiting %.2fs", wait)
            await asyncio.sleep(wait)
        return wait

    def block_for(self, seconds: float) -> None:
        """Refuse new slots for a while (after a provider 429)."""
        with self._lock:
            self._blocked_until = max(self._blocked_until, self._clock() + seconds)

    def usage(self) -> Tuple[int, int]:
        """Requests and tokens inside the current window."""
        with self._lock:
            self._prune(self._clock())
            return len(self._calls), sum(t for _, t in self._calls)


_limiters: Dict[str, RateLimiter] = {}
_registry_lock = threading.Lock()


def get_rate_limiter(account_key: str, config: Optional[Settings] = None) -> RateLimiter:
    """Shared limiter for a provider account (created on first use)."""
    config = config or default_settings
    with _registry_lock:
        limiter = _limiters.get(account_key)
        if limiter is None:
            tier = config.provider_tier
            limiter = RateLimiter(
                requests_per_minute=tier.requests_per_minute,
                tokens_per_minute=tier.tokens_per_minute,
                min_delay_seconds=config.ai_min_delay_seconds,
            )
            _limiters[account_key] = limiter
            logger.debug(
                "Rate limiter for %s: %d req/min, %d tokens/min, %.1fs min delay",
                account_key,
                tier.requests_per_minute,
                tier.tokens_per_minute,
                config.ai_min_delay_seconds,
            )
        return limiter


def reset_rate_limiters() -> None:
    """Forget all limiters (tests, tier changes)."""
    with _registry_lock:
        _limiters.clear()
