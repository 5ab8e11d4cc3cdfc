"""
Rate limiting for storefront endpoints

Sliding window over request timestamps, kept in process memory. Applied per
endpoint through the `chat_rate_limit` dependency to keep model usage
bounded on the shopping assistant.
"""
import time
from collections import deque
from typing import Deque, Dict, Tuple

from fastapi import HTTPException, Request, status

from app.core.config import settings


class RateLimiter:
    """
    Per-client sliding window limiter.

    Each client keeps a deque of the timestamps it was allowed in; entries
    older than the window are dropped on every check, and clients with no
    recent requests are forgotten by a periodic sweep. State is local to the
    process, so several workers each enforce their own limit.
    """

    def __init__(self, cleanup_interval: int = 60):
        self._hits: Dict[str, Deque[float]] = {}
        self._max_window = 0
        self._last_cleanup = time.time()
        self._cleanup_interval = cleanup_interval

    def _cleanup_old_entries(self, now: float):
        """Drop expired timestamps for every client and forget clients left empty"""
        if now - self._last_cleanup < self._cleanup_interval:
            return

        cutoff = now - self._max_window
        for identifier in list(self._hits):
            hits = self._hits[identifier]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._hits[identifier]

        self._last_cleanup = now

    def is_allowed(
        self,
        identifier: str,
        max_requests: int,
        window_seconds: int = 60
    ) -> Tuple[bool, int, int]:
        """
        Record a request for `identifier` if it fits in the window.

        Returns:
            Tuple of (is_allowed, remaining_requests, retry_after_seconds)
        """
        now = time.time()
        self._max_window = max(self._max_window, window_seconds)
        self._cleanup_old_entries(now)

        hits = self._hits.get(identifier, deque())
        while hits and hits[0] <= now - window_seconds:
            hits.popleft()

        if len(hits) >= max_requests:
            if not hits:
                self._hits.pop(identifier, None)
                return False, 0, 1
            retry_after = int(hits[0] + window_seconds - now) + 1
            return False, 0, max(retry_after, 1)

        hits.append(now)
        self._hits[identifier] = hits
        return True, max_requests - len(hits), 0

    def reset(self):
        self._hits.clear()


# Shared by every request handled in this process
rate_limiter = RateLimiter()


def get_client_ip(request: Request) -> str:
    """First address in X-Forwarded-For when behind a proxy, else the peer address"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def rate_limit_check(request: Request, max_requests: int, window_seconds: int = 60):
    """
    Apply a per-endpoint limit keyed by the customer token, or the client IP
    for anonymous shoppers.

    Raises:
        HTTPException 429 with Retry-After when the limit is exceeded
    """
    auth_header = request.headers.get("Authorization") or ""
    if auth_header.startswith("Bearer "):
        client_key = f"token:{hash(auth_header)}"
    else:
        client_key = f"ip:{get_client_ip(request)}"

    allowed, _, retry_after = rate_limiter.is_allowed(
        identifier=f"{request.url.path}:{client_key}",
        max_requests=max_requests,
        window_seconds=window_seconds
    )

    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many requests. Try again in {retry_after} seconds.",
            headers={
                "X-RateLimit-Limit": str(max_requests),
                "Retry-After": str(retry_after),
            }
        )


async def chat_rate_limit(request: Request):
    """
    Dependency for the shopping assistant endpoint.

    Usage:
        @router.post("/chat", dependencies=[Depends(chat_rate_limit)])
    """
    rate_limit_check(request, max_requests=settings.CHAT_RATE_LIMIT_PER_MINUTE)
