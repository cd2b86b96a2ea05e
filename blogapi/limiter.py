"""
Request rate limiting.

``limiter`` is the slowapi decorator limiter used on individual routes (login
redirects). ``FixedWindowRateLimiter`` is the per-IP budget applied to every
request by ``RateLimitMiddleware``.
"""
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)


@dataclass
class _Visitor:
    count: int
    reset_at: float
    last_seen: float


class FixedWindowRateLimiter:
    """
    Allow ``limit`` requests per client in windows of ``window_seconds``.

    A window opens on a client's first request and resets wholesale once it
    has passed; nothing slides.
    """

    def __init__(self, limit: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._visitors: Dict[str, _Visitor] = {}

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            visitor = self._visitors.get(key)
            if visitor is None or now > visitor.reset_at:
                self._visitors[key] = _Visitor(count=1, reset_at=now + self.window_seconds, last_seen=now)
                return True

            visitor.count += 1
            visitor.last_seen = now
            return visitor.count <= self.limit

    def purge_stale(self) -> int:
        """Forget clients not seen for two windows. Returns how many were dropped."""
        cutoff = self._clock() - 2 * self.window_seconds
        with self._lock:
            stale = [key for key, v in self._visitors.items() if v.last_seen < cutoff]
            for key in stale:
                del self._visitors[key]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._visitors)
