"""Mutation runner: optimistic apply, retry, settle, and re-sync."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable, Hashable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from .cache import QueryCache, RetryPolicy, RollbackHandle, Updater

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


class Notifier(Protocol):
    """Surface mutation outcomes to the user."""

    def success(self, title: str, message: str | None = None) -> None:
        ...

    def error(self, title: str, message: str | None = None) -> None:
        ...


class LoggingNotifier:
    """Notifier that writes outcomes to the ``taskboard.notifications`` logger."""

    def __init__(self, logger_name: str = "taskboard.notifications") -> None:
        self._logger = logging.getLogger(logger_name)

    def success(self, title: str, message: str | None = None) -> None:
        self._logger.info(title, extra={"detail": message})

    def error(self, title: str, message: str | None = None) -> None:
        self._logger.error(title, extra={"detail": message})


@dataclass(slots=True)
class MutationResult(Generic[ResultT]):
    ok: bool
    value: ResultT | None = None
    error: BaseException | None = None
    superseded: bool = False


class MutationRunner:
    """Run a request with an optional optimistic write and fenced settle.

    ``fence`` names the entity a mutation targets. Every run bumps that
    entity's generation; when a request settles after a newer run on the
    same fence has started, its settle logic is skipped and the newer run
    owns rollback and re-sync.
    """

    def __init__(
        self,
        cache: QueryCache,
        notifier: Notifier | None = None,
        *,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._cache = cache
        self._notifier = notifier or LoggingNotifier()
        self._retry_policy = retry_policy or RetryPolicy(max_retries=1)
        self._sleep = sleep
        self._generations: defaultdict[Hashable, int] = defaultdict(int)

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    def generation(self, fence: Hashable) -> int:
        return self._generations[fence]

    async def run(
        self,
        request: Callable[[], Awaitable[ResultT]],
        *,
        optimistic: tuple[Hashable, Updater] | None = None,
        invalidate: Sequence[Hashable] = (),
        fence: Hashable | None = None,
        on_success: Callable[[ResultT], None] | None = None,
        success_message: str | None = None,
        error_title: str = "Request failed",
    ) -> MutationResult[ResultT]:
        generation = None
        if fence is not None:
            self._generations[fence] += 1
            generation = self._generations[fence]

        handle: RollbackHandle | None = None
        if optimistic is not None:
            key, updater = optimistic
            handle = self._cache.apply_optimistic(key, updater)

        value: Any = None
        error: BaseException | None = None
        try:
            value = await self._call_with_retry(request)
        except Exception as exc:
            error = exc
        except BaseException:
            self._abandon(handle, invalidate, fence, generation)
            raise

        if fence is not None and generation != self._generations[fence]:
            if handle is not None:
                handle.discard()
            logger.info(
                "Superseded mutation settle skipped",
                extra={"fence": str(fence), "generation": generation, "failed": error is not None},
            )
            return MutationResult(ok=error is None, value=value, error=error, superseded=True)

        if error is not None:
            if handle is not None:
                handle.rollback()
            self._notifier.error(error_title, str(error))
        else:
            if handle is not None:
                handle.discard()
            if on_success is not None:
                on_success(value)
            if success_message:
                self._notifier.success(success_message)

        for key in invalidate:
            await self._cache.invalidate(key)
        return MutationResult(ok=error is None, value=value, error=error)

    def _abandon(
        self,
        handle: RollbackHandle | None,
        invalidate: Sequence[Hashable],
        fence: Hashable | None,
        generation: int | None,
    ) -> None:
        """Settle a run whose request was cancelled before it finished.

        Nothing may be awaited here, so the listed keys are only marked stale
        and reload on their next read.
        """
        superseded = fence is not None and generation != self._generations[fence]
        if handle is not None:
            if superseded:
                handle.discard()
            else:
                handle.rollback()
        stale = [*invalidate, handle.key] if handle is not None else list(invalidate)
        for key in stale:
            self._cache.mark_stale(key)
        logger.warning(
            "Mutation cancelled before it settled",
            extra={"fence": str(fence), "superseded": superseded},
        )

    async def _call_with_retry(self, request: Callable[[], Awaitable[ResultT]]) -> ResultT:
        attempt = 0
        while True:
            try:
                return await request()
            except Exception as exc:
                if not self._retry_policy.should_retry(exc, attempt):
                    raise
                delay = self._retry_policy.backoff(attempt)
                attempt += 1
                logger.info(
                    "Retrying mutation",
                    extra={"attempt": attempt, "delay_seconds": delay, "error": str(exc)},
                )
                await self._sleep(delay)


__all__ = ["LoggingNotifier", "MutationResult", "MutationRunner", "Notifier"]
