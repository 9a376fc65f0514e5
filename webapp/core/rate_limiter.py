"""Per-client fixed-window throttling for the public write endpoints."""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Tuple

from fastapi import HTTPException, Request

from webapp.core.config import get_settings

logger = logging.getLogger(__name__)

# windows are swept for expired keys once the table holds this many
SWEEP_THRESHOLD = 1024


class WindowRateLimiter:
    """Count hits per key inside a fixed window; expired windows are dropped."""

    def __init__(self, clock: Callable[[], float] = time.monotonic, sweep_threshold: int = SWEEP_THRESHOLD) -> None:
        self._clock = clock
        self._sweep_threshold = sweep_threshold
        self._windows: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._windows)

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, (_, reset_at) in self._windows.items() if reset_at <= now]
        for key in expired:
            del self._windows[key]
        if expired:
            logger.debug("Evicted %d expired rate-limit windows", len(expired))

    def hit(self, key: str, limit: int, window_seconds: int) -> bool:
        """Record a hit for ``key``; False once the window holds more than ``limit``."""
        now = self._clock()
        with self._lock:
            if len(self._windows) >= self._sweep_threshold:
                self._evict_expired(now)
            count, reset_at = self._windows.get(key, (0, now + window_seconds))
            if reset_at <= now:
                count, reset_at = 0, now + window_seconds
            count += 1
            self._windows[key] = (count, reset_at)
            return count <= limit

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


_limiter = WindowRateLimiter()


def client_ip(request: Request, trust_forwarded_for: bool = False) -> str:
    """Peer address; X-Forwarded-For only counts behind a trusted proxy."""
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded and forwarded.split(",")[0].strip():
            return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit_ip(request: Request, scope: str, *, limit: int, window_seconds: int) -> None:
    settings = get_settings()
    if not settings.rate_limit_enabled:
        return
    ip = client_ip(request, settings.trust_forwarded_for)
    if not _limiter.hit(f"{scope}:{ip}", limit, window_seconds):
        logger.warning("Rate limit exceeded for %s on %s", ip, scope, extra={"path": request.url.path})
        raise HTTPException(429, "Too many requests. Try again shortly.")


def reset_rate_limits() -> None:
    _limiter.reset()
