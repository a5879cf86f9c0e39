"""Rate limiting for hosted scraping APIs."""

import asyncio
from collections import deque
from time import monotonic


class RateLimiter:
    """Rolling-window rate limiter.

    Allows at most ``max_calls`` acquisitions in any ``period_seconds``
    window. Callers that would exceed the budget sleep until the oldest
    call in the window expires.
    """

    def __init__(self, max_calls: int = 100, period_seconds: float = 60.0):
        self.max_calls = max_calls
        self.period_seconds = period_seconds
        self._calls: deque[float] = deque()
        self._lock = asyncio.Lock()
        self.wait_count: int = 0

    async def acquire(self) -> None:
        """Wait for a free slot in the current window, then claim it."""
        async with self._lock:
            while True:
                now = monotonic()
                while self._calls and now - self._calls[0] >= self.period_seconds:
                    self._calls.popleft()

                if len(self._calls) < self.max_calls:
                    self._calls.append(now)
                    return

                wait_time = self.period_seconds - (now - self._calls[0])
                self.wait_count += 1
                await asyncio.sleep(wait_time)

    async def __aenter__(self):
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None
