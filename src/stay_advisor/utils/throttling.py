"""Request pacing for outbound provider calls."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RateGate:
    """Enforce a minimum interval between consecutive calls.

    One gate belongs to one adapter instance. The last-call marker is private
    to the gate, so sibling adapters never wait on each other.
    """

    def __init__(
        self,
        min_interval_s: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        label: str = "",
    ) -> None:
        self.min_interval_s = max(0.0, float(min_interval_s))
        self._clock = clock
        self._last_call: Optional[float] = None
        self._label = label

    @property
    def last_call(self) -> Optional[float]:
        return self._last_call

    def remaining(self) -> float:
        """Seconds left before the next call may go out."""
        if self._last_call is None or self.min_interval_s <= 0:
            return 0.0
        elapsed = self._clock() - self._last_call
        return max(0.0, self.min_interval_s - elapsed)

    async def wait(self) -> float:
        """Delay until the interval has elapsed since the previous call.

        The slot is reserved before sleeping so that overlapping callers on
        the same gate queue up one interval apart. Returns the seconds waited.
        """
        now = self._clock()
        if self._last_call is None:
            scheduled = now
        else:
            scheduled = max(now, self._last_call + self.min_interval_s)
        self._last_call = scheduled
        delay = scheduled - now
        if delay > 0:
            logger.debug("Rate gate %s delaying %.3fs", self._label or "-", delay)
            await asyncio.sleep(delay)
        return delay


__all__ = ["RateGate"]
