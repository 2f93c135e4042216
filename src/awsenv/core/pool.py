"""
Bounded worker pool for remote store calls.

At most POOL_WIDTH calls are in flight at once. Tasks are admitted in input
order; every task after the first waits STAGGER_SECONDS after taking its
permit before it starts, which spreads request bursts. A FatalError raised by
any task stops every task that has not started its call yet, and is re-raised
once the in-flight tasks have settled.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from .errors import FatalError


POOL_WIDTH = 3
STAGGER_SECONDS = 0.05

T = TypeVar("T")
R = TypeVar("R")


class BoundedPool:
    """Semaphore-guarded task runner with a fixed dispatch stagger."""

    def __init__(self, width: int = POOL_WIDTH, stagger: float = STAGGER_SECONDS):
        if width < 1:
            raise ValueError("pool width must be at least 1")
        self.width = width
        self.stagger = stagger

    async def run(
        self,
        items: Sequence[T],
        worker: Callable[[T], Awaitable[R]],
    ) -> List[R]:
        """
        Run worker over items.

        Args:
            items: Inputs, dispatched in order
            worker: Coroutine function called once per item; it should turn
                ordinary failures into results and raise FatalError only when
                the whole batch must stop

        Returns:
            Worker results, positionally aligned with items

        Raises:
            FatalError: The first fatal error raised by any worker
        """
        semaphore = asyncio.Semaphore(self.width)
        aborted = asyncio.Event()
        fatal: List[FatalError] = []

        async def dispatch(index: int, item: T) -> Optional[R]:
            async with semaphore:
                if aborted.is_set():
                    return None
                if index > 0:
                    await asyncio.sleep(self.stagger)
                    if aborted.is_set():
                        return None
                try:
                    return await worker(item)
                except FatalError as e:
                    if not fatal:
                        fatal.append(e)
                    aborted.set()
                    return None

        results = await asyncio.gather(
            *(dispatch(index, item) for index, item in enumerate(items))
        )

        if fatal:
            raise fatal[0]

        return list(results)
