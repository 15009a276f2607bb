"""Concurrency support for issuegraph.

The only fan-out in a run is issue normalization: every issue performs its own
state/relation lookups, so a fixed-width pool bounds how many of those are in
flight against the Linear API at once.
"""

from __future__ import annotations

import asyncio
import functools
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from typing import Any, TypeVar

from .config import DEFAULT_CONCURRENCY
from .logging import get_logger

T = TypeVar('T')
R = TypeVar('R')


class ConcurrencyConfig:
    """Configuration for concurrency settings."""

    def __init__(self, max_workers: int = DEFAULT_CONCURRENCY):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers


async def run_blocking(func: Callable[..., R], *args: Any, **kwargs: Any) -> R:
    """Run a blocking call (e.g. a requests round-trip) in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


async def async_pool(
    limit: int,
    items: Iterable[T],
    func: Callable[[T], Awaitable[R]],
) -> AsyncIterator[R]:
    """Yield ``func(item)`` results in completion order with at most ``limit`` in flight.

    The first failure propagates; tasks still pending are cancelled.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    iterator = iter(items)
    pending: set[asyncio.Future[R]] = set()
    done: set[asyncio.Future[R]] = set()

    def _fill() -> None:
        while len(pending) < limit:
            try:
                item = next(iterator)
            except StopIteration:
                return
            pending.add(asyncio.ensure_future(func(item)))

    _fill()
    try:
        while pending:
            done, _ = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                pending.discard(task)
            # Refill before yielding so the pool stays busy while the consumer works
            _fill()
            for task in done:
                yield task.result()
    finally:
        # a batch can hold several failures; only the first one is raised
        for task in done:
            if not task.cancelled():
                task.exception()
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


class ConcurrentProcessor:
    """Runs an async function over a collection through a bounded pool."""

    def __init__(self, concurrency_config: ConcurrencyConfig):
        self.config = concurrency_config
        self.logger = get_logger()

    async def process(
        self,
        items: list[T],
        processor_func: Callable[[T], Awaitable[R | None]],
    ) -> list[R]:
        """Collect non-None results in completion order."""
        self.logger.debug(
            "concurrent processing start",
            operation="concurrent_processing_start",
            item_count=len(items),
            max_workers=self.config.max_workers,
        )
        start_time = time.perf_counter()
        results: list[R] = []
        async for value in async_pool(self.config.max_workers, items, processor_func):
            if value is not None:
                results.append(value)

        duration_ms = (time.perf_counter() - start_time) * 1000
        self.logger.debug(
            f"Performance: concurrent_processing completed in {duration_ms:.2f}ms",
            operation="concurrent_processing",
            duration_ms=round(duration_ms, 2),
            item_count=len(items),
            results_count=len(results),
        )
        return results


def create_concurrent_processor(config: ConcurrencyConfig | None = None) -> ConcurrentProcessor:
    """Factory function to create concurrent processor."""
    return ConcurrentProcessor(config or ConcurrencyConfig())


__all__ = [
    "ConcurrencyConfig",
    "ConcurrentProcessor",
    "async_pool",
    "create_concurrent_processor",
    "run_blocking",
]
