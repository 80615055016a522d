from __future__ import annotations

import logging
import random
import time
from typing import Callable, Optional

from .config import ObstacleConfig

logger = logging.getLogger(__name__)


class BackoffStrategy:
    """Exponential backoff with jitter between challenge-page retries.

    The pause before retry ``attempt`` is base * 2^(attempt-1), capped at
    max_seconds, plus up to 10% jitter. The thresholds are tunable defaults."""

    def __init__(
        self,
        base_seconds: float = 2.0,
        max_seconds: float = 10.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._base = base_seconds
        self._max = max_seconds
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: ObstacleConfig, sleep: Callable[[float], None] = time.sleep) -> "BackoffStrategy":
        return cls(config.backoff_base_seconds, config.backoff_max_seconds, sleep=sleep)

    def get_sleep(self, attempt: int) -> float:
        """Return the pause in seconds before retry number ``attempt`` (1-based)."""
        capped = min(self._max, self._base * (2 ** max(attempt - 1, 0)))
        return capped + random.uniform(0, capped * 0.1)

    def wait(self, attempt: int, reason: Optional[str] = None) -> float:
        seconds = self.get_sleep(attempt)
        logger.info("Backing off %.1fs before retry %d (%s)", seconds, attempt, reason or "retry")
        self._sleep(seconds)
        return seconds
