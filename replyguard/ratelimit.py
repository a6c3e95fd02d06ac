"""
Per-address sliding window rate limiting.

State is in-memory and per app instance; it resets on restart and is not
shared between processes.
"""

import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, List

from fastapi import Request
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

from replyguard.logger import root_logger
from replyguard.settings import MAX_REQUESTS_PER_WINDOW, RATE_LIMIT_WINDOW


@dataclass
class RateLimitResult:
    allowed: bool
    count: int
    retry_after: int = 0


class RateLimiter:
    """Allows at most `limit` requests per address in any trailing `window` seconds."""

    def __init__(
        self,
        limit: int = MAX_REQUESTS_PER_WINDOW,
        window: float = RATE_LIMIT_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window = window
        self._clock = clock
        self._requests: Dict[str, List[float]] = {}

    def __len__(self) -> int:
        return len(self._requests)

    def _prune(self, window_start: float) -> None:
        for address in list(self._requests):
            recent = [ts for ts in self._requests[address] if ts > window_start]
            if recent:
                self._requests[address] = recent
            else:
                del self._requests[address]

    def check(self, address: str) -> RateLimitResult:
        """Count a request from address unless it is over the limit."""
        now = self._clock()
        window_start = now - self.window
        # No await between read and write, safe on a single event loop
        self._prune(window_start)

        timestamps = self._requests.get(address, [])
        if len(timestamps) >= self.limit:
            retry_after = max(1, math.ceil(timestamps[0] + self.window - now))
            return RateLimitResult(allowed=False, count=len(timestamps), retry_after=retry_after)

        timestamps.append(now)
        self._requests[address] = timestamps
        return RateLimitResult(allowed=True, count=len(timestamps))


def get_client_ip(request: Request) -> str:
    """Client address, preferring proxy headers over the socket peer."""
    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip.strip()
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Answers 429 with Retry-After once an address exceeds its quota."""

    def __init__(self, app, limiter: RateLimiter) -> None:
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next):
        client_ip = get_client_ip(request)
        result = self.limiter.check(client_ip)
        if not result.allowed:
            root_logger.warning(f"🚫 Rate limit exceeded for IP: {client_ip}")
            return PlainTextResponse(
                "Rate limit exceeded",
                status_code=429,
                headers={"Retry-After": str(result.retry_after)},
            )
        return await call_next(request)
