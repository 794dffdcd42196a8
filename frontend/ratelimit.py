"""
Per-client sliding-window rate limiter for the chat endpoint.
Requests over the limit are rejected at once, never queued.
"""

import math
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict


class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` per client within ``window`` seconds."""

    def __init__(
        self,
        window: float = 60.0,
        max_requests: int = 20,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window = window
        self.max_requests = max_requests
        self._clock = clock
        self._requests: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def allow(self, client_id: str) -> bool:
        """Record a request and return False if the client is over the limit."""
        now = self._clock()
        window_start = now - self.window

        with self._lock:
            if now - self._last_sweep >= self.window:
                self._forget_idle_clients(window_start)
                self._last_sweep = now

            timestamps = self._requests.get(client_id)
            if timestamps is None:
                timestamps = self._requests[client_id] = deque()
            while timestamps and timestamps[0] <= window_start:
                timestamps.popleft()

            if len(timestamps) >= self.max_requests:
                return False

            timestamps.append(now)
            return True

    def _forget_idle_clients(self, window_start: float) -> None:
        # Every timestamp of an idle client is at or before window_start.
        idle = [cid for cid, ts in self._requests.items() if not ts or ts[-1] <= window_start]
        for client_id in idle:
            del self._requests[client_id]

    @property
    def tracked_clients(self) -> int:
        return len(self._requests)

    @property
    def retry_after(self) -> int:
        return math.ceil(self.window)
