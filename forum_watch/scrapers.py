from __future__ import annotations

import logging
from typing import Any, List, Optional

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .backoff import BackoffStrategy
from .base import BaseScraper
from .config import WatchConfig
from .extraction import extract_board, extract_headlines
from .metrics import MetricsCollector
from .models import BoardResult, HeadlineItem
from .obstacles import ObstacleHandler

logger = logging.getLogger(__name__)


class HeadlineScraper(BaseScraper[List[HeadlineItem]]):
    """Scrapes the portal headline carousel. Returns [] on any failure."""

    def __init__(
        self,
        config: WatchConfig,
        obstacles: ObstacleHandler,
        backoff: BackoffStrategy,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        super().__init__(
            obstacles,
            backoff,
            max_challenge_retries=config.obstacles.max_challenge_retries,
            metrics=metrics,
        )
        self._config = config

    def scrape(self, page: Any) -> List[HeadlineItem]:
        return self.run(page, self._config.base_url)

    def navigate(self, page: Any, target: str) -> None:
        page.goto(target, wait_until="networkidle", timeout=self._config.timeouts.page_load_ms)

    def wait_for_content(self, page: Any, target: str) -> None:
        # The carousel is optional on the portal page.
        try:
            page.wait_for_selector(
                self._config.selectors.headline_wrapper,
                timeout=self._config.timeouts.selector_wait_ms,
            )
        except PlaywrightTimeoutError:
            logger.info("Headline wrapper not found on %s", target)

    def parse(self, html: str, target: str) -> List[HeadlineItem]:
        return extract_headlines(html, base_url=target, selectors=self._config.selectors)

    def fallback(self, target: str) -> List[HeadlineItem]:
        return []

    def count(self, result: List[HeadlineItem]) -> int:
        return len(result)

    def describe(self, target: str) -> str:
        return "headlines"


class BoardScraper(BaseScraper[BoardResult]):
    """Scrapes one forum board. Returns the error placeholder on any failure."""

    def __init__(
        self,
        config: WatchConfig,
        obstacles: ObstacleHandler,
        backoff: BackoffStrategy,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        super().__init__(
            obstacles,
            backoff,
            max_challenge_retries=config.obstacles.max_challenge_retries,
            metrics=metrics,
        )
        self._config = config

    def scrape(self, page: Any, board_id: str) -> BoardResult:
        return self.run(page, board_id)

    def validate(self, target: str) -> None:
        if not target:
            raise ValueError("board id is required")

    def navigate(self, page: Any, target: str) -> None:
        logger.info("Scraping board %s", target)
        page.goto(
            self._config.board_url(target),
            wait_until="domcontentloaded",
            timeout=self._config.timeouts.board_load_ms,
        )

    def wait_for_content(self, page: Any, target: str) -> None:
        page.wait_for_selector(self._config.selectors.board_row, timeout=self._config.timeouts.selector_wait_ms)

    def parse(self, html: str, target: str) -> BoardResult:
        return extract_board(
            html,
            board_id=target,
            limit=self._config.fetch_limit_per_board,
            exclude_keywords=self._config.exclude_keywords,
            freshness_keywords=self._config.freshness_keywords,
            selectors=self._config.selectors,
            label=self._config.board_label,
        )

    def fallback(self, target: str) -> BoardResult:
        return BoardResult.error(self._config.board_label, target)

    def count(self, result: BoardResult) -> int:
        return len(result.posts)

    def describe(self, target: str) -> str:
        return f"board {target}"
