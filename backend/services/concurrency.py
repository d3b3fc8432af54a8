"""Bounded-concurrency task runner

Runs an async worker over a list of items with at most N workers in flight.
A slot frees up as soon as any worker settles, so the cap holds at all times
rather than per batch.

Usage:
    results = await run_with_concurrency(urls, fetch_and_encode, 5)
    for url, result in zip(urls, results):
        if isinstance(result, TaskFailure):
            ...

results[i] always belongs to items[i], whatever order the workers finish in.
A worker that raises does not fail the run; its slot holds a TaskFailure.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Sequence, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class TaskFailure:
    """Marker stored in a result slot whose worker raised."""
    index: int
    error: BaseException


async def run_with_concurrency(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[U]],
    concurrency: int,
) -> List[Union[U, TaskFailure]]:
    """Run worker over items, at most `concurrency` at a time, keeping input order."""
    if concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")

    results: List[Any] = [None] * len(items)
    semaphore = asyncio.Semaphore(concurrency)

    async def _run_bounded(index: int, item: T) -> None:
        async with semaphore:
            try:
                results[index] = await worker(item)
            except Exception as e:
                logger.warning(f"Error processing item at index {index}: {e}")
                results[index] = TaskFailure(index=index, error=e)

    await asyncio.gather(*[_run_bounded(i, item) for i, item in enumerate(items)])
    return results
