"""
Fixed-window rate limiting for the HTTP surface.

Each client gets ``max_requests`` per window. Counters live in a store owned
by the limiter; a background task started with the app purges expired
windows so the store stays bounded.
"""

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass
from typing import AsyncIterator, Callable

from aiohttp import web

from datagate.core.exceptions import RateLimitError

logger = logging.getLogger(__name__)

SWEEP_INTERVAL = 300  # 5 minutes


@dataclass
class RateLimitEntry:
    """Request count for one client within its current window."""

    count: int
    reset_at: float


class RateLimiter:
    """Per-client fixed-window request counter."""

    def __init__(
        self,
        max_requests: int = 60,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the rate limiter.

        Args:
            max_requests: Requests allowed per client per window.
            window_seconds: Window length in seconds.
            clock: Monotonic time source, replaceable in tests.
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def hit(self, client: str) -> None:
        """Record a request from ``client``.

        Raises:
            RateLimitError: If the client has exhausted its window.
        """
        now = self._clock()
        entry = self._entries.get(client)

        if entry is None or entry.reset_at < now:
            self._entries[client] = RateLimitEntry(count=1, reset_at=now + self.window_seconds)
            return

        entry.count += 1
        if entry.count > self.max_requests:
            raise RateLimitError(client, reset_in=entry.reset_at - now)

    def sweep(self) -> int:
        """Remove expired windows.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        expired = [client for client, entry in self._entries.items() if entry.reset_at < now]
        for client in expired:
            del self._entries[client]
        return len(expired)


def client_key(request: web.Request) -> str:
    """Identify the caller, preferring proxy headers over the peer address."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or request.remote or "unknown"


def rate_limit_middleware(limiter: RateLimiter):
    """Build a middleware rejecting clients over their budget with 429."""

    @web.middleware
    async def middleware(request: web.Request, handler):
        try:
            limiter.hit(client_key(request))
        except RateLimitError as e:
            logger.warning("%s", e)
            return web.json_response({"error": "Too many requests"}, status=429)
        return await handler(request)

    return middleware


def sweeper(limiter: RateLimiter, interval: float = SWEEP_INTERVAL):
    """Build a cleanup context running ``limiter.sweep`` periodically.

    The task is cancelled when the application shuts down.
    """

    async def run() -> None:
        while True:
            await asyncio.sleep(interval)
            removed = limiter.sweep()
            if removed:
                logger.debug("Swept %d expired rate-limit entries", removed)

    async def context(app: web.Application) -> AsyncIterator[None]:
        task = asyncio.create_task(run())
        yield
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    return context
