"""
Sliding-window admission control.

Tracks admission timestamps in a rolling window (60 seconds for the Graph
API) and suspends callers until one more request fits under the
requests-per-minute capacity. A server-reported cooldown (Retry-After) can
push admissions further out than the local estimate.
"""

import asyncio
import logging
import time
from collections import deque
from typing import Awaitable, Callable, Deque, Optional

from ..config.constants import RATE_WINDOW_SECONDS
from ..errors import DispatchTimeoutError

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Rolling-window rate limiter shared by every task dispatching through it.

    Each acquisition reserves its admission time in one step with no await
    in between, so callers get slots in arrival order (FIFO) and a caller
    with a deadline knows at once whether its slot falls within it, however
    many callers are queued ahead. Reserved slots are kept in ascending
    order; a slot never precedes one reserved earlier.

    A task cancelled while waiting gives its slot back. An admission that
    already happened stays counted.
    """

    def __init__(
        self,
        max_requests_per_minute: int,
        window_seconds: float = RATE_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Args:
            max_requests_per_minute: Capacity of the window
            window_seconds: Window length in seconds
            clock: Monotonic time source
            sleep: Coroutine used to suspend waiting tasks
        """
        if max_requests_per_minute <= 0:
            raise ValueError("max_requests_per_minute must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.capacity = max_requests_per_minute
        self.window_seconds = window_seconds
        self._clock = clock
        self._sleep = sleep
        # Past admissions and reserved future slots, ascending
        self._timestamps: Deque[float] = deque()
        self._cooldown_until = 0.0

    async def acquire(self, deadline: Optional[float] = None) -> float:
        """
        Wait until admitting one more request stays within capacity, then record it.

        Args:
            deadline: Optional clock value; if the reserved slot would fall
                after it, raise instead of waiting

        Returns:
            Seconds spent waiting for admission

        Raises:
            DispatchTimeoutError: If ``deadline`` would be exceeded
        """
        waited = 0.0
        while True:
            now = self._clock()
            slot = self._next_slot(now)

            if deadline is not None and slot > deadline:
                raise DispatchTimeoutError(
                    f"Admission would take {slot - now:.2f}s, past the dispatch deadline"
                )

            self._timestamps.append(slot)
            if slot <= now:
                return waited

            wait = slot - now
            logger.debug(
                f"Rate limit reached ({len(self._timestamps) - 1}/{self.capacity}). "
                f"Waiting {wait:.2f} seconds."
            )
            try:
                await self._sleep(wait)
            except asyncio.CancelledError:
                self._release(slot)
                raise
            waited += wait

            if self._cooldown_until <= self._clock():
                return waited

            # A server cooldown was noted while waiting; queue again behind it
            self._release(slot)

    def note_server_throttle(self, retry_after: float) -> None:
        """
        Record a server-reported cooldown.

        Later admissions wait for the later of the local window and the
        server's cooldown. Callers already waiting re-queue behind it when
        they wake.
        """
        if retry_after is None or retry_after <= 0:
            return
        until = self._clock() + retry_after
        if until > self._cooldown_until:
            self._cooldown_until = until
            logger.info(f"Server throttle noted; admissions paused for {retry_after:.2f} seconds")

    def get_wait_time(self) -> float:
        """Seconds the next acquisition would wait right now (nothing recorded)."""
        now = self._clock()
        return max(0.0, self._next_slot(now) - now)

    @property
    def in_window(self) -> int:
        """Admissions counted in the trailing window, reserved slots included."""
        self._prune(self._clock())
        return len(self._timestamps)

    def _next_slot(self, now: float) -> float:
        self._prune(now)
        slot = max(now, self._cooldown_until)
        if self._timestamps:
            slot = max(slot, self._timestamps[-1])
        if len(self._timestamps) >= self.capacity:
            # The capacity-th most recent slot must leave the window first
            slot = max(slot, self._timestamps[-self.capacity] + self.window_seconds)
        return slot

    def _release(self, slot: float) -> None:
        if slot in self._timestamps:
            self._timestamps.remove(slot)

    def _prune(self, now: float) -> None:
        """Drop timestamps that have left the trailing window."""
        while self._timestamps and now - self._timestamps[0] >= self.window_seconds:
            self._timestamps.popleft()
