"""
Internal utility functions for smhiobs.
"""

import asyncio
from typing import (
    Any,
    Awaitable,
    Callable,
    List,
    Sequence,
    TypeVar,
)

from .config import SMHI_API_CONCURRENCY

R = TypeVar("R")


def add_sync_version(
    async_fn: Callable[..., Awaitable[R]],
) -> Callable[..., Awaitable[R]]:
    """
    A decorator that adds a .sync attribute to an async function, allowing it
    to be called synchronously.

    The .sync version runs the async function in a new asyncio event loop.

    Example:
        >>> @add_sync_version
        ... async def my_async_func(x):
        ...     return x * 2

        >>> # Async usage
        >>> result = await my_async_func(5)

        >>> # Sync usage
        >>> result = my_async_func.sync(5)
    """
    # Import here to avoid circular imports
    from .sync import AsyncSyncBridge

    def sync_wrapper(*args: Any, **kwargs: Any) -> R:
        """Synchronous wrapper for the async function."""
        return AsyncSyncBridge.run_async(async_fn, args=args, kwargs=kwargs)

    # Attach the synchronous wrapper to the async function
    async_fn.sync = sync_wrapper  # type: ignore
    return async_fn


async def run_with_concurrency(
    factories: Sequence[Callable[[], Awaitable[R]]],
    concurrency: int = SMHI_API_CONCURRENCY,
) -> List[R]:
    """
    Run coroutine factories in fixed-size batches.

    Each batch is awaited fully before the next one starts, so at most
    `concurrency` upstream requests are in flight. Results keep the order of
    `factories`. With 6 factories and a concurrency of 2, three batches of
    two calls run one after the other.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    results: List[R] = []
    for i in range(0, len(factories), concurrency):
        batch = factories[i : i + concurrency]
        results.extend(await asyncio.gather(*(factory() for factory in batch)))
    return results
