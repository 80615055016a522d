"""YAML configuration loader for the forum crawler.

The whole configuration is an immutable tree of frozen dataclasses built once
by ``load_config`` and handed to the orchestrator, the scrapers, the state
stores and the API. A ``batch:`` section in the YAML file overrides the top
level when the ``batch`` profile is requested (the offline snapshot job).
"""
from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Tuple

import yaml
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

CONFIG_DIR = Path(__file__).parent / "configs"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "default.yaml"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/114.0.0.0 Safari/537.36"
)

PROFILES = ("live", "batch")


def _default_chrome_path() -> str:
    if sys.platform == "win32":
        return "C:\\Program Files\\Google\\Chrome\\Application\\chrome.exe"
    if sys.platform == "darwin":
        return "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome"
    return "/usr/bin/google-chrome"


@dataclass(frozen=True)
class Timeouts:
    """Per-operation timeouts in milliseconds."""

    page_load_ms: int = 30_000
    selector_wait_ms: int = 5_000
    board_load_ms: int = 30_000
    consent_ms: int = 10_000


@dataclass(frozen=True)
class RateLimitConfig:
    mode: str = "jitter"  # "fixed" or "jitter"
    fixed_seconds: float = 2.0
    min_seconds: float = 3.0
    max_seconds: float = 6.0

    def __post_init__(self) -> None:
        if self.mode not in ("fixed", "jitter"):
            raise ValueError(f"Invalid rate limit mode: {self.mode}. Must be 'fixed' or 'jitter'")
        if self.mode == "jitter" and self.min_seconds > self.max_seconds:
            raise ValueError(
                f"Rate limit min_seconds ({self.min_seconds}) exceeds max_seconds ({self.max_seconds})"
            )


@dataclass(frozen=True)
class BrowserConfig:
    mode: str = "hosted"  # "hosted" (bundled headless) or "local" (desktop Chrome)
    executable_path: str = field(default_factory=_default_chrome_path)
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1366
    viewport_height: int = 768
    locale: str = "zh-TW"
    extra_headers: Tuple[Tuple[str, str], ...] = (
        ("Accept-Language", "zh-TW,zh;q=0.9,en-US;q=0.8,en;q=0.7"),
    )
    blocked_resource_types: FrozenSet[str] = frozenset({"image", "stylesheet", "font", "media"})

    def __post_init__(self) -> None:
        if self.mode not in ("hosted", "local"):
            raise ValueError(f"Invalid browser mode: {self.mode}. Must be 'hosted' or 'local'")


@dataclass(frozen=True)
class ObstacleConfig:
    challenge_titles: Tuple[str, ...] = (
        "Just a moment",
        "Attention Required",
        "請稍候",
    )
    consent_selectors: Tuple[str, ...] = (
        "text=我已滿18歲",
        "a.agree-btn",
    )
    max_challenge_retries: int = 2
    backoff_base_seconds: float = 2.0
    backoff_max_seconds: float = 10.0


@dataclass(frozen=True)
class StateConfig:
    backend: str = "file"  # "file" or "remote"
    read_file: str = "read-history.json"
    delete_file: str = "delete-history.json"
    remote_url: str = ""
    remote_key: str = ""
    table: str = "crawler_state"
    request_timeout: float = 10.0

    def __post_init__(self) -> None:
        if self.backend not in ("file", "remote"):
            raise ValueError(f"Invalid state backend: {self.backend}. Must be 'file' or 'remote'")
        if self.backend == "remote" and not self.remote_url:
            raise ValueError("Remote state backend requires STATE_REMOTE_URL")


@dataclass(frozen=True)
class SelectorConfig:
    headline_wrapper: str = ".headline-news__wrapper"
    headline_item: str = ".headline-news__wrapper .swiper-slide"
    headline_title: str = ".headline-news__title"
    headline_link: str = "a.headline-news__content"
    board_name: str = 'a[data-gtm="選單-看板名稱"]'
    board_row: str = "tr.b-list__row"
    sticky_class: str = "b-list__row--sticky"
    post_title: str = ".b-list__main__title"
    post_time: str = ".b-list__time__edittime a"
    post_brief: str = ".b-list__brief"


@dataclass(frozen=True)
class WatchConfig:
    watched_board_ids: Tuple[str, ...]
    exclude_keywords: FrozenSet[str]
    freshness_keywords: FrozenSet[str]
    fetch_limit_per_board: int
    read_ttl: timedelta
    delete_ttl: timedelta
    base_url: str = "https://www.gamer.com.tw/"
    forum_base_url: str = "https://forum.gamer.com.tw/"
    board_label: str = "看板"
    timezone: str = "Asia/Taipei"
    timeouts: Timeouts = field(default_factory=Timeouts)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    obstacles: ObstacleConfig = field(default_factory=ObstacleConfig)
    state: StateConfig = field(default_factory=StateConfig)
    selectors: SelectorConfig = field(default_factory=SelectorConfig)

    def __post_init__(self) -> None:
        if not self.watched_board_ids:
            raise ValueError("At least one watched board id is required")
        if self.fetch_limit_per_board <= 0:
            raise ValueError(f"fetch_limit_per_board must be positive, got {self.fetch_limit_per_board}")

    def board_url(self, board_id: str) -> str:
        return f"{self.forum_base_url}B.php?bsn={board_id}"


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _split_list(raw: str) -> Tuple[str, ...]:
    return tuple(s.strip() for s in raw.split(",") if s.strip())


def _apply_env(data: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(data)
    browser = dict(data.get("browser") or {})
    state = dict(data.get("state") or {})

    if os.getenv("FORUM_WATCH_ENV") == "development":
        browser["mode"] = "local"
    if os.getenv("BASE_URL"):
        data["base_url"] = os.environ["BASE_URL"]
    if os.getenv("FORUM_BASE_URL"):
        data["forum_base_url"] = os.environ["FORUM_BASE_URL"]
    if os.getenv("BOARDS"):
        data["watched_boards"] = list(_split_list(os.environ["BOARDS"]))
    if os.getenv("STATE_BACKEND"):
        state["backend"] = os.environ["STATE_BACKEND"]
    if os.getenv("STATE_REMOTE_URL"):
        state["remote_url"] = os.environ["STATE_REMOTE_URL"]
    if os.getenv("STATE_REMOTE_KEY"):
        state["remote_key"] = os.environ["STATE_REMOTE_KEY"]

    data["browser"] = browser
    data["state"] = state
    return data


def _parse_browser(data: Dict[str, Any]) -> BrowserConfig:
    kwargs: Dict[str, Any] = {}
    for key in ("mode", "executable_path", "headless", "user_agent", "locale"):
        if data.get(key) is not None:
            kwargs[key] = data[key]
    viewport = data.get("viewport") or {}
    if "width" in viewport:
        kwargs["viewport_width"] = int(viewport["width"])
    if "height" in viewport:
        kwargs["viewport_height"] = int(viewport["height"])
    if data.get("extra_headers"):
        kwargs["extra_headers"] = tuple((str(k), str(v)) for k, v in data["extra_headers"].items())
    if data.get("blocked_resource_types") is not None:
        kwargs["blocked_resource_types"] = frozenset(data["blocked_resource_types"])
    return BrowserConfig(**kwargs)


def _parse_obstacles(data: Dict[str, Any]) -> ObstacleConfig:
    kwargs: Dict[str, Any] = {}
    for key in ("challenge_titles", "consent_selectors"):
        if data.get(key) is not None:
            kwargs[key] = tuple(data[key])
    for key in ("max_challenge_retries", "backoff_base_seconds", "backoff_max_seconds"):
        if data.get(key) is not None:
            kwargs[key] = data[key]
    return ObstacleConfig(**kwargs)


def config_from_dict(data: Dict[str, Any]) -> WatchConfig:
    """Build a WatchConfig from an already merged mapping."""
    timeouts = data.get("timeouts") or {}
    rate_limit = data.get("rate_limit") or {}
    state = data.get("state") or {}
    selectors = data.get("selectors") or {}

    optional: Dict[str, Any] = {}
    for key in ("base_url", "forum_base_url", "board_label", "timezone"):
        if data.get(key):
            optional[key] = data[key]

    return WatchConfig(
        watched_board_ids=tuple(str(b).strip() for b in data.get("watched_boards", []) if str(b).strip()),
        exclude_keywords=frozenset(data.get("exclude_keywords", [])),
        freshness_keywords=frozenset(data.get("freshness_keywords", [])),
        fetch_limit_per_board=int(data.get("fetch_limit", 20)),
        read_ttl=timedelta(days=float(data.get("read_ttl_days", 7))),
        delete_ttl=timedelta(days=float(data.get("delete_ttl_days", 30))),
        timeouts=Timeouts(**timeouts),
        rate_limit=RateLimitConfig(**rate_limit),
        browser=_parse_browser(data.get("browser") or {}),
        obstacles=_parse_obstacles(data.get("obstacles") or {}),
        state=StateConfig(**state),
        selectors=SelectorConfig(**selectors),
        **optional,
    )


def load_config(path: Optional[str] = None, profile: str = "live") -> WatchConfig:
    """Load the crawler config.

    Args:
        path: YAML file path; defaults to the packaged configs/default.yaml
        profile: "live" for the interactive crawl, "batch" for the snapshot job

    Returns:
        WatchConfig instance
    """
    if profile not in PROFILES:
        raise ValueError(f"Invalid profile: {profile}. Must be one of {list(PROFILES)}")

    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    overrides = data.pop("batch", None) or {}
    if profile == "batch":
        data = _merge(data, overrides)

    return config_from_dict(_apply_env(data))
