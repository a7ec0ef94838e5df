"""Rate limiting for provider calls issued from concurrent worker threads.

Responsibilities:
- Provide a single hook to enforce provider request pacing.
- Stay safe when several extraction tasks share one limiter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from time import monotonic, sleep
from typing import Callable


@dataclass(slots=True)
class RateLimiter:
    """Per-key minimum-interval limiter used around provider requests."""

    min_interval_seconds: float = 0.05
    clock: Callable[[], float] = monotonic
    sleeper: Callable[[float], None] = sleep
    _next_allowed_at: dict[str, float] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def acquire(self, key: str) -> None:
        """Block until request key is allowed under the minimum-interval policy.

        Callers sharing a key are serialized through the lock, so waiting
        threads are released one interval apart.
        """

        if self.min_interval_seconds <= 0.0:
            return
        with self._lock:
            now = self.clock()
            wait_seconds = self._next_allowed_at.get(key, 0.0) - now
            if wait_seconds > 0.0:
                self.sleeper(wait_seconds)
                now = self.clock()
            self._next_allowed_at[key] = now + self.min_interval_seconds
