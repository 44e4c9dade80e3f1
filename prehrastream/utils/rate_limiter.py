import asyncio
import time
from typing import Optional

from prehrastream.config.settings import settings

# ===========================
# Request Pacing
# ===========================
# Minimum interval between requests toward one origin; non-positive disables pacing
class RateLimiter:

    def __init__(self, min_interval: float = settings.SCRAPE_REQUEST_DELAY):
        self.min_interval = min_interval
        self._last_request: Optional[float] = None
        self._lock: Optional[asyncio.Lock] = None

    async def wait(self):
        if self.min_interval <= 0:
            return

        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            now = time.monotonic()
            if self._last_request is not None:
                remaining = self.min_interval - (now - self._last_request)
                if remaining > 0:
                    await asyncio.sleep(remaining)
            self._last_request = time.monotonic()


# ===========================
# Shared Limiter For The Scraped Origin
# ===========================
prehrajto_limiter = RateLimiter()
