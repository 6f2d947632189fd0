"""
Timeout utilities for the browser test driver.
Provides the run timeout error and a monotonic deadline used by the poll loop.
"""

import time
from typing import Callable, Optional


class TimeoutError(Exception):
    """Raised when the page does not signal completion before the deadline."""

    def __init__(self, seconds: float, elapsed: Optional[float] = None):
        self.seconds = seconds
        self.elapsed = elapsed
        message = f"Tests did not finish within {seconds:g}s"
        if elapsed is not None:
            message += f" (waited {elapsed:.1f}s)"
        super().__init__(message)


class Deadline:
    """
    Wall-clock budget measured from construction.

    Args:
        seconds: Budget in seconds
        clock: Monotonic clock, injectable for tests

    Usage:
        deadline = Deadline(600)
        while not done():
            if deadline.expired():
                raise TimeoutError(deadline.seconds, deadline.elapsed())
    """

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        if seconds <= 0:
            raise ValueError(f"Deadline must be positive, got {seconds}")
        self.seconds = seconds
        self._clock = clock
        self.started_at = clock()

    def elapsed(self) -> float:
        return self._clock() - self.started_at

    def remaining(self) -> float:
        return max(0.0, self.seconds - self.elapsed())

    def expired(self) -> bool:
        return self.elapsed() >= self.seconds
