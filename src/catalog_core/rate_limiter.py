import asyncio
import time


class RateLimiter:
    """
    Spaces outbound requests at least `1 / requests_per_second` apart.
    Shared by every call a client makes, so concurrent enrichment fetches
    queue up behind the lock instead of bursting past the upstream limit.
    """

    def __init__(self, requests_per_second: float = 4.0):
        self.interval = 1.0 / requests_per_second if requests_per_second > 0 else 0.0
        self.last_request = 0.0
        self._lock = asyncio.Lock()

    async def wait(self):
        async with self._lock:
            remaining = self.interval - (time.monotonic() - self.last_request)
            if remaining > 0:
                await asyncio.sleep(remaining)
            self.last_request = time.monotonic()

    async def __aenter__(self):
        await self.wait()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False
