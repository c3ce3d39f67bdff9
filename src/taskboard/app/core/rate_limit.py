"""Per-user fixed-window rate limiting on top of ``limits``.

The limiter is handed its storage, so the same code counts in process
memory for a single instance and in Redis when several instances share
one budget. The storage is picked from a ``limits`` URI such as
``async+memory://`` or ``async+redis://host:6379/0``.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable

from limits import RateLimitItemPerSecond
from limits.aio.storage import Storage
from limits.aio.strategies import FixedWindowRateLimiter
from limits.storage import storage_from_string

from .config import Settings

logger = logging.getLogger(__name__)

NAMESPACE = "taskboard"


@dataclass(slots=True, frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: float

    @property
    def retry_after(self) -> int:
        return max(math.ceil(self.reset_after), 1)


class RateLimiter:
    """Allow at most ``max_requests`` per identifier in each window."""

    def __init__(
        self,
        storage: Storage,
        *,
        max_requests: int = 60,
        window_seconds: int = 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._strategy = FixedWindowRateLimiter(storage)
        self._item = RateLimitItemPerSecond(max_requests, window_seconds, namespace=NAMESPACE)
        self._clock = clock
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    @property
    def storage(self) -> Storage:
        return self._storage

    async def hit(self, identifier: str) -> RateLimitDecision:
        allowed = await self._strategy.hit(self._item, identifier)
        stats = await self._strategy.get_window_stats(self._item, identifier)
        if not allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={"identifier": identifier, "limit": self.max_requests},
            )
        return RateLimitDecision(
            allowed=allowed,
            limit=self.max_requests,
            remaining=stats.remaining,
            reset_after=max(stats.reset_time - self._clock(), 0.0),
        )

    async def reset(self, identifier: str) -> None:
        await self._strategy.clear(self._item, identifier)

    async def close(self) -> None:
        # Memory counters die with the process; Redis counters expire on their own.
        logger.debug("Rate limiter closed", extra={"storage": type(self._storage).__name__})


def build_rate_limiter(settings: Settings) -> RateLimiter:
    """Create the limiter configured by ``settings``."""

    storage = storage_from_string(settings.rate_limit_storage_uri)
    return RateLimiter(
        storage,  # type: ignore[arg-type]
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )


__all__ = ["NAMESPACE", "RateLimitDecision", "RateLimiter", "build_rate_limiter"]
