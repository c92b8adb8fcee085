"""Per-client request throttling built on pyrate-limiter buckets."""

from fastapi import Request
from pyrate_limiter import BucketFullException, Duration, Limiter, RequestRate

from savings.core.errors import RateLimitedError
from savings.core.logging import get_logger

log = get_logger("rate_limit")


class ClientRateLimiter:
    """FastAPI dependency allowing ``limit`` calls per client per window.

    Each client address gets its own bucket inside this scope, so the sync and
    read limiters never share counts.
    """

    def __init__(self, scope: str, limit: int, window_seconds: int = 60):
        self.scope = scope
        self.limit = limit
        self.window_seconds = window_seconds
        # One in-memory bucket per scope:client, never evicted: memory grows with
        # the number of distinct client addresses seen.
        self._limiter = Limiter(RequestRate(limit, Duration.SECOND * window_seconds))

    def __call__(self, request: Request) -> None:
        client = request.client.host if request.client else "unknown"
        try:
            self._limiter.try_acquire(f"{self.scope}:{client}")
        except BucketFullException as exc:
            log.warning(f"Rate limit hit | scope={self.scope} client={client} limit={self.limit}/{self.window_seconds}s")
            raise RateLimitedError(
                f"Too many {self.scope} requests, please try again later.",
                details=exc.meta_info,
            ) from exc
