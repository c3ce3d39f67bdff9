"""Keyed query cache with freshness windows, coalescing and optimistic writes.

Cached values are treated as immutable: updaters return new collections
instead of mutating the ones they are handed. Rollback restores a deep copy
taken just before the optimistic write, so a rolled back entry compares
equal to the pre-write state even if an updater misbehaves.
"""

from __future__ import annotations

import asyncio
import contextlib
import copy
import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .transport import ApiRequestError

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
Updater = Callable[[Any], Any]

MAX_BACKOFF_SECONDS = 30.0


class QueryStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


def is_auth_denied(error: BaseException) -> bool:
    return isinstance(error, ApiRequestError) and error.is_auth_denied


def exponential_backoff(attempt: int) -> float:
    """Delay before retry ``attempt`` (0-based): 1s, 2s, 4s ... capped at 30s."""
    return min(2.0**attempt, MAX_BACKOFF_SECONDS)


@dataclass(slots=True)
class RetryPolicy:
    """Retry budget shared by queries and mutations; auth denials never retry."""

    max_retries: int = 3
    backoff: Callable[[int], float] = exponential_backoff

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        return attempt < self.max_retries and not is_auth_denied(error)


@dataclass(slots=True)
class QueryEntry:
    data: Any = None
    updated_at: float | None = None
    status: QueryStatus = QueryStatus.IDLE
    error: BaseException | None = None
    fetcher: Fetcher | None = None
    version: int = 0
    stale: bool = field(default=True)


class RollbackHandle:
    """Phase one of a two-phase update; settle it with ``rollback`` or ``discard``."""

    def __init__(self, cache: "QueryCache", key: Hashable, snapshot: Any) -> None:
        self._cache = cache
        self._key = key
        self._snapshot = snapshot
        self._settled = False

    @property
    def key(self) -> Hashable:
        return self._key

    @property
    def snapshot(self) -> Any:
        return self._snapshot

    @property
    def settled(self) -> bool:
        return self._settled

    def rollback(self) -> None:
        if self._settled:
            return
        self._settled = True
        self._cache._restore(self._key, self._snapshot)
        logger.info("Optimistic update rolled back", extra={"cache_key": str(self._key)})

    def discard(self) -> None:
        if self._settled:
            return
        self._settled = True
        self._snapshot = None


class QueryCache:
    """In-memory source of truth for fetched collections."""

    def __init__(
        self,
        *,
        retry_policy: RetryPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._entries: dict[Hashable, QueryEntry] = {}
        self._inflight: dict[Hashable, asyncio.Task[Any]] = {}
        self._retry_policy = retry_policy or RetryPolicy()
        self._clock = clock
        self._sleep = sleep

    def entry(self, key: Hashable) -> QueryEntry:
        return self._entries.setdefault(key, QueryEntry())

    def get_data(self, key: Hashable) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def set_data(self, key: Hashable, data: Any) -> None:
        entry = self.entry(key)
        entry.data = data
        entry.version += 1

    def is_fresh(self, key: Hashable, stale_time: float) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.stale or entry.updated_at is None:
            return False
        return entry.status is QueryStatus.SUCCESS and self._clock() - entry.updated_at < stale_time

    async def fetch(self, key: Hashable, fetcher: Fetcher, *, stale_time: float = 0.0) -> Any:
        """Return cached data while fresh, otherwise load it.

        Concurrent calls for a key share one in-flight load. When the retry
        budget is spent the entry is left in the ``error`` state and the last
        error propagates.
        """
        entry = self.entry(key)
        entry.fetcher = fetcher
        if self.is_fresh(key, stale_time):
            return entry.data
        return await self._ensure_load(key, fetcher)

    async def refetch(self, key: Hashable) -> Any:
        """Reload ``key`` with its last fetcher, the retry action for errors."""
        entry = self._entries.get(key)
        if entry is None or entry.fetcher is None:
            raise KeyError(key)
        return await self._ensure_load(key, entry.fetcher)

    def mark_stale(self, key: Hashable) -> None:
        """Force the next ``fetch`` of ``key`` to reload, whatever its age."""
        entry = self._entries.get(key)
        if entry is not None:
            entry.stale = True

    async def invalidate(self, key: Hashable, *, refetch: bool = True) -> None:
        """Mark ``key`` stale and optionally reload it; load failures stay in the entry."""
        entry = self._entries.get(key)
        if entry is None:
            return
        self.mark_stale(key)
        if not refetch or entry.fetcher is None:
            return
        pending = self._inflight.get(key)
        if pending is not None:
            # A load started before the invalidation cannot observe it.
            with contextlib.suppress(Exception):
                await asyncio.shield(pending)
        try:
            await self._ensure_load(key, entry.fetcher)
        except Exception:
            logger.warning("Refetch after invalidation failed", extra={"cache_key": str(key)})

    def apply_optimistic(self, key: Hashable, updater: Updater) -> RollbackHandle:
        """Write ``updater(current)`` to the entry and return the rollback handle."""
        entry = self.entry(key)
        snapshot = copy.deepcopy(entry.data)
        self.set_data(key, updater(entry.data))
        return RollbackHandle(self, key, snapshot)

    def _restore(self, key: Hashable, snapshot: Any) -> None:
        self.set_data(key, snapshot)

    async def _ensure_load(self, key: Hashable, fetcher: Fetcher) -> Any:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key, fetcher))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        return await asyncio.shield(task)

    def _forget(self, key: Hashable, task: asyncio.Future[Any]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _load(self, key: Hashable, fetcher: Fetcher) -> Any:
        entry = self.entry(key)
        entry.status = QueryStatus.LOADING
        started_version = entry.version
        attempt = 0
        while True:
            try:
                data = await fetcher()
            except Exception as exc:
                if not self._retry_policy.should_retry(exc, attempt):
                    entry.status = QueryStatus.ERROR
                    entry.error = exc
                    logger.warning(
                        "Query failed",
                        extra={"cache_key": str(key), "attempts": attempt + 1, "error": str(exc)},
                    )
                    raise
                delay = self._retry_policy.backoff(attempt)
                attempt += 1
                logger.info(
                    "Retrying query",
                    extra={"cache_key": str(key), "attempt": attempt, "delay_seconds": delay},
                )
                await self._sleep(delay)
                continue
            break

        entry.status = QueryStatus.SUCCESS
        entry.error = None
        if entry.version != started_version:
            # A local write landed while loading; keep it and stay stale.
            entry.stale = True
            return data
        entry.data = data
        entry.updated_at = self._clock()
        entry.stale = False
        return data


__all__ = [
    "MAX_BACKOFF_SECONDS",
    "QueryCache",
    "QueryEntry",
    "QueryStatus",
    "RetryPolicy",
    "RollbackHandle",
    "exponential_backoff",
    "is_auth_denied",
]
