"""AsyncIO processor - runs one pipeline stage over a batch concurrently."""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class ItemResult(Generic[T, R]):
    """Settlement of one item: either a value or the error it raised."""

    index: int
    item: T
    value: Optional[R] = None
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        return self.error is None


async def process_batch_async(
    batch: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    on_settled: Optional[Callable[[ItemResult[T, R], int], None]] = None,
) -> List[ItemResult[T, R]]:
    """
    Run ``worker`` over every item concurrently and wait for all to settle.

    A failing item does not abort its siblings. ``on_settled`` is called with
    each result and the number of items settled so far, in completion order.

    Returns:
        Results in submission order
    """
    settled = 0

    async def run(index: int, item: T) -> ItemResult[T, R]:
        nonlocal settled
        try:
            result = ItemResult(index=index, item=item, value=await worker(item))
        except Exception as e:
            result = ItemResult(index=index, item=item, error=e)
        settled += 1
        if on_settled is not None:
            on_settled(result, settled)
        return result

    return list(await asyncio.gather(*(run(i, item) for i, item in enumerate(batch))))


def process_batch(
    batch: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    on_settled: Optional[Callable[[ItemResult[T, R], int], None]] = None,
) -> List[ItemResult[T, R]]:
    """
    Synchronous wrapper that runs :func:`process_batch_async` in a new event loop.
    """
    return asyncio.run(process_batch_async(batch, worker, on_settled))
