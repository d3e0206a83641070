"""Per-platform request throttling with a moving time window."""

from __future__ import annotations

import asyncio
import time
from typing import Any

# Slack added after a computed wait so the next call lands outside the window
WINDOW_EDGE_BUFFER = 0.01


class EnhancedRateLimiter:
    """Moving-window rate limiter shared by every request to one platform.

    At most ``requests_per_window`` calls are admitted inside any span of
    ``window_seconds``. Callers that would exceed the budget sleep until the
    oldest call leaves the window.

    Attributes:
        requests_per_window: Maximum number of calls in the window
        window_seconds: Window size in seconds
        call_times: Monotonic timestamps of calls still inside the window
        lock: Serializes admission so concurrent queries cannot overshoot

    """

    def __init__(self, requests_per_window: int, window_seconds: float) -> None:
        """Initialize the limiter.

        Raises:
            ValueError: If either parameter is not positive

        """
        if requests_per_window <= 0:
            msg = "requests_per_window must be a positive integer"
            raise ValueError(msg)
        if window_seconds <= 0:
            msg = "window_seconds must be a positive number"
            raise ValueError(msg)

        self.requests_per_window = requests_per_window
        self.window_seconds = window_seconds
        self.call_times: list[float] = []
        self.lock = asyncio.Lock()
        self.total_requests = 0
        self.total_wait_time = 0.0

    async def acquire(self) -> float:
        """Wait for a free slot and record the call.

        Returns:
            Seconds spent waiting (0.0 when a slot was free)

        """
        async with self.lock:
            wait_time = await self._wait_for_slot()
            self.call_times.append(time.monotonic())
            self.total_requests += 1
            self.total_wait_time += wait_time
            return wait_time

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        self.call_times = [stamp for stamp in self.call_times if stamp > cutoff]

    async def _wait_for_slot(self) -> float:
        now = time.monotonic()
        self._prune(now)

        if len(self.call_times) < self.requests_per_window:
            return 0.0

        wait_time = max(0.0, self.call_times[0] + self.window_seconds - now)
        if wait_time > 0:
            wait_time += WINDOW_EDGE_BUFFER
            await asyncio.sleep(wait_time)
            self._prune(time.monotonic())
        return wait_time

    def get_stats(self) -> dict[str, Any]:
        """Snapshot of configuration, current window usage and lifetime totals."""
        now = time.monotonic()
        in_window = sum(1 for stamp in self.call_times if stamp > now - self.window_seconds)

        return {
            "requests_per_window": self.requests_per_window,
            "window_seconds": self.window_seconds,
            "current_calls_in_window": in_window,
            "available_capacity": max(0, self.requests_per_window - in_window),
            "total_requests": self.total_requests,
            "avg_wait_time": self.total_wait_time / max(1, self.total_requests),
        }
