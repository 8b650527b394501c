"""
Time sources for the simulation engine.

The engine never reads the wall clock directly. It asks its clock for the
current time and tells it to wait until the next event is due, so tests can
use a virtual clock that jumps forward instantly.
"""

import time
from typing import Callable


class Clock:
    """Base class for simulation time sources (times in ms)"""

    def now(self) -> float:
        raise NotImplementedError

    def wait_until(self, timestamp: float) -> None:
        """Block until ``timestamp`` and make it the current time"""
        raise NotImplementedError


class VirtualClock(Clock):
    """Virtual time that advances instantly to each event"""

    def __init__(self, start: float = 0.0):
        self._now = start

    def now(self) -> float:
        return self._now

    def wait_until(self, timestamp: float) -> None:
        # Never move backwards
        if timestamp > self._now:
            self._now = timestamp


class RealTimeClock(Clock):
    """
    Paces the simulation against the wall clock.

    Args:
        scale: Wall-clock milliseconds per simulated millisecond;
            1.0 replays in real time, 0.1 ten times faster.
        sleep: Sleep function (seconds)
        monotonic: Monotonic time source (seconds)
    """

    def __init__(
        self,
        scale: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        self.scale = scale
        self._sleep = sleep
        self._monotonic = monotonic
        self._origin = monotonic()
        self._now = 0.0

    def now(self) -> float:
        return self._now

    def wait_until(self, timestamp: float) -> None:
        if timestamp <= self._now:
            return
        due = self._origin + timestamp * self.scale / 1000.0
        remaining = due - self._monotonic()
        if remaining > 0:
            self._sleep(remaining)
        self._now = timestamp
