from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Callable
from threading import Lock
import time

from fastapi import HTTPException, Request, status


class SlidingWindowLimiter:
    def __init__(self) -> None:
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._lock = Lock()

    def hit(self, key: str, *, limit: int, window_seconds: int) -> int | None:
        """Record a hit; return seconds to wait when ``key`` is over its limit."""
        now = time.monotonic()
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= now - window_seconds:
                hits.popleft()
            if len(hits) >= limit:
                return max(1, int(hits[0] + window_seconds - now))
            hits.append(now)
        return None

    def clear(self) -> None:
        with self._lock:
            self._hits.clear()


_limiter = SlidingWindowLimiter()


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limited(scope: str, *, limit: Callable[[], int], window_seconds: Callable[[], int]) -> Callable[[Request], None]:
    """Route dependency that throttles ``scope`` per client address."""

    def dependency(request: Request) -> None:
        retry_after = _limiter.hit(
            f"{scope}|{client_address(request)}",
            limit=limit(),
            window_seconds=window_seconds(),
        )
        if retry_after is None:
            return
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many requests for {scope}. Try again in {retry_after} second(s).",
            headers={"Retry-After": str(retry_after)},
        )

    return dependency


def clear_rate_limiter() -> None:
    _limiter.clear()
