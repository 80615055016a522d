from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo

from .backoff import BackoffStrategy
from .browser import BrowserSession
from .config import WatchConfig
from .errors import BrowserLaunchError, StateStoreError
from .factory import ScraperFactory
from .metrics import MetricsCollector
from .models import BoardResult, CrawlResponse, CrawlResult, StateSnapshot
from .obstacles import ObstacleHandler
from .rate_limiter import RateLimiter
from .reconciler import reconcile
from .storage import StateStore

logger = logging.getLogger(__name__)

GENERATED_AT_FORMAT = "%Y/%m/%d %H:%M:%S"


class Orchestrator:
    """Drives one full crawl run.

    acquire session -> headlines -> each watched board in config order, with a
    rate-limit delay between boards -> load state snapshot -> reconcile ->
    stamp generatedAt -> release session.

    A failed session acquisition, or an unexpected error after it, yields
    ``success=False``; board failures show up as error placeholders inside a
    successful result. With ``store=None`` reconciliation is skipped (offline
    snapshot job).
    """

    def __init__(
        self,
        config: WatchConfig,
        store: Optional[StateStore],
        session: Optional[BrowserSession] = None,
        rate_limiter: Optional[RateLimiter] = None,
        obstacles: Optional[ObstacleHandler] = None,
        backoff: Optional[BackoffStrategy] = None,
        metrics: Optional[MetricsCollector] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._config = config
        self._store = store
        self._session = session or BrowserSession(config.browser)
        self._rate_limiter = rate_limiter or RateLimiter.from_config(config.rate_limit)
        self._metrics = metrics or MetricsCollector()
        self._clock = clock or (lambda: datetime.now(ZoneInfo(config.timezone)))
        self._factory = ScraperFactory(
            config,
            metrics=self._metrics,
            obstacles=obstacles or ObstacleHandler.from_config(config.obstacles, config.timeouts),
            backoff=backoff or BackoffStrategy.from_config(config.obstacles),
        )

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    def run(self) -> CrawlResponse:
        logger.info("Starting crawl (%s mode, %d boards)", self._config.browser.mode, len(self._config.watched_board_ids))
        try:
            handle = self._session.acquire()
        except BrowserLaunchError as exc:
            logger.exception("Crawler critical error: %s", exc)
            return CrawlResponse.failure(str(exc))

        try:
            headlines = self._factory.create_scraper("headlines").scrape(handle.page)
            boards = self._scrape_boards(handle.page)
            if self._store is not None:
                boards = reconcile(boards, self._load_snapshot())
            result = CrawlResult(
                headlines=tuple(headlines),
                boards=tuple(boards),
                generated_at=self._clock().strftime(GENERATED_AT_FORMAT),
            )
        except Exception as exc:
            logger.exception("Crawl aborted: %s", exc)
            return CrawlResponse.failure(str(exc) or type(exc).__name__)
        finally:
            self._session.release(handle)

        stats = self._metrics.snapshot()
        logger.info(
            "Crawl finished: targets=%d ok=%d failed=%d items=%d avg_latency_ms=%.0f",
            stats.total_targets,
            stats.success_count,
            stats.failure_count,
            stats.item_count,
            stats.avg_latency_ms,
        )
        if stats.failed_targets:
            logger.warning("Failed targets: %s", ", ".join(stats.failed_targets))
        logger.debug("Scrape outcomes: %s", self._metrics.export_json())
        return CrawlResponse.ok(result)

    def _scrape_boards(self, page) -> List[BoardResult]:
        scraper = self._factory.create_scraper("board")
        board_ids = self._config.watched_board_ids
        boards: List[BoardResult] = []
        for index, board_id in enumerate(board_ids):
            boards.append(scraper.scrape(page, board_id))
            if index < len(board_ids) - 1:
                self._rate_limiter.delay()
        return boards

    def _load_snapshot(self) -> StateSnapshot:
        try:
            return self._store.snapshot()
        except (StateStoreError, OSError, ValueError) as exc:
            logger.error("Could not load state snapshot, continuing without it: %s", exc)
            return StateSnapshot.empty()
