# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Bounded concurrency primitive for batched asynchronous work."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import TypeVar

from ..errors import ConcurrencyTimeoutError

LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")
_R = TypeVar("_R")


@dataclass(frozen=True, slots=True)
class ExecutorStats:
    """Point-in-time counters describing a :class:`BoundedExecutor`."""

    in_flight: int
    queued: int
    limit: int


class BoundedExecutor:
    """Run awaitables with at most ``limit`` of them in flight.

    Work submitted beyond the limit waits in FIFO order. When ``timeout`` is
    set and ``reject_on_timeout`` is enabled, a task that runs longer than
    ``timeout`` seconds is cancelled and :class:`ConcurrencyTimeoutError` is
    raised to its caller. Without rejection the timeout is only reported.
    """

    def __init__(self, limit: int, *, timeout: float | None = None, reject_on_timeout: bool = False) -> None:
        """Initialise the executor.

        Args:
            limit: Maximum number of concurrently running tasks.
            timeout: Optional per-task timeout in seconds.
            reject_on_timeout: Raise :class:`ConcurrencyTimeoutError` on timeout.

        Raises:
            ValueError: If ``limit`` is lower than one.
        """

        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.timeout = timeout
        self.reject_on_timeout = reject_on_timeout
        self._semaphore = asyncio.Semaphore(limit)
        self._in_flight = 0
        self._queued = 0
        self._idle = asyncio.Event()
        self._idle.set()

    async def run(self, fn: Callable[[], Awaitable[_T]]) -> _T:
        """Execute ``fn`` once a slot is available and return its result.

        Args:
            fn: Zero-argument callable producing the awaitable to run.

        Returns:
            _T: Result produced by ``fn``.

        Raises:
            ConcurrencyTimeoutError: If the task exceeds ``timeout`` and
                rejection is enabled.
        """

        self._idle.clear()
        self._queued += 1
        try:
            await self._semaphore.acquire()
        finally:
            self._queued -= 1
        self._in_flight += 1
        try:
            return await self._execute(fn)
        finally:
            self._in_flight -= 1
            self._semaphore.release()
            if self._in_flight == 0 and self._queued == 0:
                self._idle.set()

    async def _execute(self, fn: Callable[[], Awaitable[_T]]) -> _T:
        if self.timeout is None:
            return await fn()
        task = asyncio.ensure_future(fn())
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=self.timeout)
        except TimeoutError as exc:
            if self.reject_on_timeout:
                task.cancel()
                raise ConcurrencyTimeoutError(f"Operation timed out after {self.timeout}s") from exc
            LOGGER.warning("Bounded task exceeded %ss; waiting for completion", self.timeout)
            return await task

    async def map(self, items: Iterable[_T], fn: Callable[[_T], Awaitable[_R]]) -> list[_R]:
        """Apply ``fn`` to every item with bounded concurrency.

        Args:
            items: Inputs to process.
            fn: Asynchronous callable applied to each input.

        Returns:
            list[_R]: Results in the same order as ``items``.
        """

        return list(await asyncio.gather(*(self.run(_bind(fn, item)) for item in items)))

    def stats(self) -> ExecutorStats:
        """Return the current executor counters."""

        return ExecutorStats(in_flight=self._in_flight, queued=self._queued, limit=self.limit)

    async def drain(self) -> None:
        """Wait until no task is running or queued."""

        await self._idle.wait()


def _bind(fn: Callable[[_T], Awaitable[_R]], item: _T) -> Callable[[], Awaitable[_R]]:
    def call() -> Awaitable[_R]:
        return fn(item)

    return call


__all__ = ["BoundedExecutor", "ExecutorStats"]
