"""Forum board watcher package.

Crawls a forum portal's headlines and a list of watched boards through a
Playwright browser session, filters posts by ban keywords and freshness, and
reconciles them with per-URL read / deleted markers.

Key modules:
    config          -- WatchConfig and load_config (YAML + .env)
    browser         -- BrowserSession acquire / release
    obstacles       -- ObstacleHandler and pluggable obstacle strategies
    extraction      -- extract_board, extract_headlines (pure HTML parsing)
    base            -- BaseScraper per-target pipeline
    scrapers        -- HeadlineScraper, BoardScraper
    factory         -- ScraperFactory and create_state_store
    rate_limiter    -- RateLimiter for inter-board delays
    backoff         -- BackoffStrategy for challenge-page retries
    storage         -- StateStore, FileStateStore, RemoteStateStore
    reconciler      -- reconcile scraped boards with a state snapshot
    orchestrator    -- Orchestrator for a full crawl run
    metrics         -- MetricsCollector for per-run statistics
    snapshot        -- offline snapshot file write / load
    api             -- FastAPI endpoints
    models          -- dataclasses shared by all of the above
"""
