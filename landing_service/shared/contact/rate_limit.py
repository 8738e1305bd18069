"""In-memory sliding-window rate limiting for contact form submissions."""

import asyncio
import logging
import time
from collections import deque
from threading import Lock
from typing import Callable, Deque, Dict

logger = logging.getLogger(__name__)

RATE_LIMIT_MAX_REQUESTS = 3  # Max 3 messages per window
RATE_LIMIT_WINDOW_SECONDS = 15 * 60
RATE_LIMIT_SWEEP_SECONDS = 60 * 60


class RateLimitLedger:
    """
    Per-client request timestamps within a trailing window.

    Memory-only: the ledger resets when the process restarts. Each instance
    owns its state, so tests can build one per case and drive the clock.
    """

    def __init__(
        self,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._store: Dict[str, Deque[float]] = {}
        self._lock = Lock()

    def _prune(self, identifier: str, now: float) -> Deque[float]:
        request_times = self._store.get(identifier)
        if request_times is None:
            return deque()
        while request_times and request_times[0] <= now - self.window_seconds:
            request_times.popleft()
        if not request_times:
            del self._store[identifier]
        return request_times

    def check_and_record(self, identifier: str) -> bool:
        """
        Record a request for identifier if it is under the limit.

        Returns:
            True if accepted (timestamp recorded), False if rejected (nothing recorded)
        """
        now = self._clock()
        with self._lock:
            request_times = self._prune(identifier, now)
            if len(request_times) >= self.max_requests:
                return False
            self._store.setdefault(identifier, request_times).append(now)
            return True

    def retry_after(self, identifier: str) -> int:
        """Seconds until identifier may submit again (at least 1)."""
        now = self._clock()
        with self._lock:
            request_times = self._prune(identifier, now)
            if len(request_times) < self.max_requests:
                return 1
            return max(int(request_times[0] + self.window_seconds - now) + 1, 1)

    def sweep(self) -> int:
        """Prune every identifier and drop the empty ones. Returns how many were dropped."""
        now = self._clock()
        with self._lock:
            before = len(self._store)
            for identifier in list(self._store):
                self._prune(identifier, now)
            return before - len(self._store)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, identifier: str) -> bool:
        with self._lock:
            return identifier in self._store


async def run_periodic_sweep(ledger: RateLimitLedger, interval_seconds: float = RATE_LIMIT_SWEEP_SECONDS) -> None:
    """Sweep the ledger forever on a fixed interval. Cancel the task to stop it."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = ledger.sweep()
            logger.debug(f"Rate limit sweep removed {removed} idle clients, {len(ledger)} tracked")
        except Exception as e:
            logger.error(f"Rate limit sweep failed: {str(e)}", exc_info=True)
