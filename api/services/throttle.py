"""
Pacing for sequential batches of image requests
"""
import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class SequentialThrottle:
    """
    Spaces out calls in a sequential batch.

    The first acquire() returns immediately; every later one waits `interval`
    seconds first. Use one instance per batch.
    """

    def __init__(self, interval: float, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.interval = interval
        self._sleep = sleep
        self.calls = 0

    async def acquire(self):
        if self.calls > 0 and self.interval > 0:
            logger.debug(f"Throttling next request by {self.interval:.1f}s")
            await self._sleep(self.interval)
        self.calls += 1
