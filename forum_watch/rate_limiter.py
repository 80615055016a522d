from __future__ import annotations

import random
import time
from typing import Callable

from .config import RateLimitConfig


class RateLimiter:
    """Jittered delay inserted between successive board fetches.

    Calling delay() blocks the current thread for a duration drawn uniformly
    from [min_seconds, max_seconds]. With min == max the delay is fixed. The
    caller decides where to place it; the first fetch of a run is never
    delayed."""

    def __init__(
        self,
        min_seconds: float,
        max_seconds: float,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_seconds < 0 or max_seconds < min_seconds:
            raise ValueError(f"Invalid delay range: {min_seconds}..{max_seconds}")
        self._min = min_seconds
        self._max = max_seconds
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: RateLimitConfig, sleep: Callable[[float], None] = time.sleep) -> "RateLimiter":
        if config.mode == "fixed":
            return cls(config.fixed_seconds, config.fixed_seconds, sleep=sleep)
        return cls(config.min_seconds, config.max_seconds, sleep=sleep)

    def delay(self) -> float:
        """Sleep for one jittered interval and return the seconds slept."""
        seconds = random.uniform(self._min, self._max) if self._max > self._min else self._min
        if seconds > 0:
            self._sleep(seconds)
        return seconds
