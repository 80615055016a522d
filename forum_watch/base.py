from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from .backoff import BackoffStrategy
from .errors import ObstacleError
from .metrics import MetricsCollector
from .models import ScrapeOutcome
from .obstacles import ObstacleHandler, Outcome

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseScraper(ABC, Generic[T]):
    """Abstract base class defining the per-target scraping pipeline.

    navigate -> clear obstacles (retrying challenge pages with backoff) ->
    wait for content -> parse the rendered HTML.

    Any exception raised along the way is logged, recorded as a failed
    outcome, and replaced by ``fallback(target)``; a failing target never
    affects the next one.
    """

    def __init__(
        self,
        obstacles: ObstacleHandler,
        backoff: BackoffStrategy,
        max_challenge_retries: int = 2,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self._obstacles = obstacles
        self._backoff = backoff
        self._max_challenge_retries = max_challenge_retries
        self._metrics = metrics

    def run(self, page: Any, target: str) -> T:
        start_ms = self._now_ms()
        try:
            self.validate(target)
            self._open(page, target)
            self.wait_for_content(page, target)
            result = self.parse(page.content(), target)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Scraping %s failed: %s", self.describe(target), exc)
            self._record(target, start_ms, success=False, item_count=0, error_type=type(exc).__name__)
            return self.fallback(target)

        self._record(target, start_ms, success=True, item_count=self.count(result), error_type=None)
        return result

    def validate(self, target: str) -> None:
        if target is None:
            raise ValueError("target is required")

    def _open(self, page: Any, target: str) -> None:
        attempt = 0
        while True:
            self.navigate(page, target)
            if self._obstacles.clear(page) != Outcome.FAILED:
                return
            attempt += 1
            if attempt > self._max_challenge_retries:
                raise ObstacleError(f"Challenge page not cleared for {self.describe(target)}")
            self._backoff.wait(attempt, reason="challenge page")

    @abstractmethod
    def navigate(self, page: Any, target: str) -> None:
        ...

    @abstractmethod
    def wait_for_content(self, page: Any, target: str) -> None:
        ...

    @abstractmethod
    def parse(self, html: str, target: str) -> T:
        ...

    @abstractmethod
    def fallback(self, target: str) -> T:
        ...

    @abstractmethod
    def count(self, result: T) -> int:
        ...

    def describe(self, target: str) -> str:
        return target

    def _record(self, target: str, start_ms: int, success: bool, item_count: int, error_type: Optional[str]) -> None:
        if self._metrics is None:
            return
        self._metrics.record(
            ScrapeOutcome(
                target=self.describe(target),
                success=success,
                latency_ms=self._now_ms() - start_ms,
                item_count=item_count,
                error_type=error_type,
            )
        )

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)
