"""Best-effort handling of consent walls and bot-challenge pages.

Each obstacle type is a strategy with ``detect`` and ``resolve``; the handler
tries them in order and resolves with the first one that detects something.
New obstacle types are added by appending a strategy, the scrape loop does
not change.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from .config import ObstacleConfig, Timeouts

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    CLEARED = "cleared"
    ABSENT = "absent"
    FAILED = "failed"


class ObstacleStrategy(ABC):
    """Abstract base class for one kind of obstacle."""

    @abstractmethod
    def detect(self, page: Any) -> bool:
        """Return True if this obstacle is present on the page."""
        raise NotImplementedError

    @abstractmethod
    def resolve(self, page: Any) -> Outcome:
        """Try to get past the obstacle."""
        raise NotImplementedError


class ChallengePageStrategy(ObstacleStrategy):
    """Detects automated-traffic challenge pages by their title.

    A challenge is never interacted with; it is reported as FAILED so the
    caller can back off and navigate again."""

    def __init__(self, title_signatures: Sequence[str]) -> None:
        self._signatures = tuple(title_signatures)

    def detect(self, page: Any) -> bool:
        title = page.title() or ""
        return any(sig in title for sig in self._signatures)

    def resolve(self, page: Any) -> Outcome:
        logger.warning("Challenge page detected: %r", page.title())
        return Outcome.FAILED


class ConsentGateStrategy(ObstacleStrategy):
    """Clicks through an age / consent gate and waits for the page to settle."""

    def __init__(self, selectors: Sequence[str], timeout_ms: int = 10_000) -> None:
        self._selectors = tuple(selectors)
        self._timeout_ms = timeout_ms
        self._matched: Optional[str] = None

    def detect(self, page: Any) -> bool:
        self._matched = None
        for selector in self._selectors:
            if page.query_selector(selector) is not None:
                self._matched = selector
                return True
        return False

    def resolve(self, page: Any) -> Outcome:
        if self._matched is None:
            return Outcome.ABSENT
        logger.info("Consent gate found (%s), confirming", self._matched)
        page.click(self._matched, timeout=self._timeout_ms)
        page.wait_for_load_state("domcontentloaded", timeout=self._timeout_ms)
        return Outcome.CLEARED


class ObstacleHandler:
    """Runs obstacle strategies in priority order before content extraction."""

    def __init__(self, strategies: Iterable[ObstacleStrategy]) -> None:
        self._strategies = list(strategies)

    @classmethod
    def from_config(cls, config: ObstacleConfig, timeouts: Timeouts) -> "ObstacleHandler":
        return cls(
            [
                ChallengePageStrategy(config.challenge_titles),
                ConsentGateStrategy(config.consent_selectors, timeout_ms=timeouts.consent_ms),
            ]
        )

    def clear(self, page: Any) -> Outcome:
        """Return CLEARED, ABSENT or FAILED. Never raises."""
        for strategy in self._strategies:
            name = strategy.__class__.__name__
            try:
                if not strategy.detect(page):
                    continue
                outcome = strategy.resolve(page)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Obstacle strategy %s raised %s: %s", name, type(exc).__name__, exc)
                return Outcome.ABSENT
            logger.debug("Obstacle strategy %s -> %s", name, outcome.value)
            return outcome
        return Outcome.ABSENT
