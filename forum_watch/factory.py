from __future__ import annotations

from typing import Dict

from .backoff import BackoffStrategy
from .base import BaseScraper
from .config import WatchConfig
from .metrics import MetricsCollector
from .obstacles import ObstacleHandler
from .scrapers import BoardScraper, HeadlineScraper
from .storage import FileStateStore, RemoteStateStore, StateStore


class ScraperFactory:
    """Creates scrapers for a crawl run; all share one obstacle handler,
    backoff policy and metrics collector.

    Scrapers hold no per-target state, so one instance per kind is cached."""

    def __init__(
        self,
        config: WatchConfig,
        metrics: MetricsCollector,
        obstacles: ObstacleHandler,
        backoff: BackoffStrategy,
    ) -> None:
        self._config = config
        self._metrics = metrics
        self._obstacles = obstacles
        self._backoff = backoff
        self._cache: Dict[str, BaseScraper] = {}

    def create_scraper(self, kind: str) -> BaseScraper:
        if kind in self._cache:
            return self._cache[kind]

        if kind == "headlines":
            scraper: BaseScraper = HeadlineScraper(
                self._config, obstacles=self._obstacles, backoff=self._backoff, metrics=self._metrics
            )
        elif kind == "board":
            scraper = BoardScraper(
                self._config, obstacles=self._obstacles, backoff=self._backoff, metrics=self._metrics
            )
        else:
            raise ValueError(f"Unknown scraper kind: {kind}")

        self._cache[kind] = scraper
        return scraper


def create_state_store(config: WatchConfig) -> StateStore:
    """Build the state store backend selected by ``config.state.backend``."""
    state = config.state
    if state.backend == "file":
        return FileStateStore(
            read_path=state.read_file,
            delete_path=state.delete_file,
            read_ttl=config.read_ttl,
            delete_ttl=config.delete_ttl,
        )
    if state.backend == "remote":
        return RemoteStateStore(
            base_url=state.remote_url,
            api_key=state.remote_key,
            read_ttl=config.read_ttl,
            delete_ttl=config.delete_ttl,
            table=state.table,
            timeout=state.request_timeout,
        )
    raise ValueError(f"Unknown state backend: {state.backend}")
