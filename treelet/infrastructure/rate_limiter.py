"""
Rate limiter driven by GitLab's ``RateLimit-*`` response headers.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from .logger import logger


@dataclass
class RateLimitInfo:
    """Last known rate limit window as reported by the server."""

    limit: int = 0
    remaining: int = 0
    observed: int = 0
    reset_time: Optional[datetime] = None

    # Requests kept in reserve before we start waiting for the reset
    threshold: int = 10

    @property
    def is_known(self) -> bool:
        return self.limit > 0

    @property
    def is_exhausted(self) -> bool:
        return self.is_known and self.remaining <= self.threshold

    @property
    def reset_in_seconds(self) -> float:
        if not self.reset_time:
            return 0.0
        return max(0.0, (self.reset_time - datetime.now()).total_seconds())


class RateLimiter:
    """
    Throttles outgoing requests so a wide traversal does not burn through
    the GitLab rate limit window.

    ``acquire`` is awaited before every request and
    ``update_rate_limit_info`` is fed the headers of every response.
    """

    def __init__(
        self,
        default_delay: float = 0.0,
        max_delay: float = 60.0,
        adaptive: bool = True
    ):
        self.default_delay = default_delay
        self.max_delay = max_delay
        self.adaptive = adaptive
        self.rate_limit_info = RateLimitInfo()
        self._lock = asyncio.Lock()
        self._last_request = 0.0
        self._consecutive_limits = 0

    async def update_rate_limit_info(self, headers: Mapping[str, str]) -> None:
        """Parse rate limit headers from a response."""

        normalized = {key.lower(): value for key, value in headers.items()}
        if "ratelimit-remaining" not in normalized:
            return

        async with self._lock:
            info = RateLimitInfo(threshold=self.rate_limit_info.threshold)
            try:
                info.limit = int(normalized.get("ratelimit-limit", 0))
                info.remaining = int(normalized["ratelimit-remaining"])
                info.observed = int(normalized.get("ratelimit-observed", 0))
                if "ratelimit-reset" in normalized:
                    info.reset_time = datetime.fromtimestamp(
                        int(normalized["ratelimit-reset"])
                    )
            except ValueError:
                logger.debug(f"Ignoring malformed rate limit headers: {normalized}")
                return

            self.rate_limit_info = info
            if info.is_exhausted:
                self._consecutive_limits += 1
            else:
                self._consecutive_limits = 0

    def _calculate_delay(self, now: float) -> float:
        delay = 0.0
        if self.default_delay > 0:
            delay = max(0.0, self.default_delay - (now - self._last_request))
        if self.adaptive and self._consecutive_limits > 0:
            delay = max(delay, float(2 ** self._consecutive_limits))
        return min(delay, self.max_delay)

    async def acquire(self) -> None:
        """Wait, if needed, before issuing the next request."""

        now = time.time()
        info = self.rate_limit_info

        if info.is_exhausted:
            wait = min(info.reset_in_seconds, self.max_delay)
            if wait > 0:
                logger.warning(
                    f"Rate limit nearly exhausted ({info.remaining} left), "
                    f"waiting {wait:.1f}s for reset"
                )
                await asyncio.sleep(wait)

        delay = self._calculate_delay(now)
        if delay > 0:
            await asyncio.sleep(delay)

        self._last_request = time.time()


__all__ = ["RateLimitInfo", "RateLimiter"]
