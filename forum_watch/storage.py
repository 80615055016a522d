from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Optional

import requests

from .errors import StateStoreError
from .models import StateRecord, StateSnapshot, Status

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def active_cutoff(now: datetime, ttl: timedelta) -> datetime:
    """Oldest instant (exclusive) at which a record still counts as live."""
    return now - ttl


def is_active(timestamp: datetime, now: datetime, ttl: timedelta) -> bool:
    """A record is live while it is strictly newer than ``now - ttl``."""
    return timestamp > active_cutoff(now, ttl)


def to_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def from_millis(value: float) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


class StateStore(ABC):
    """Per-URL read / deleted markers with TTL-windowed visibility."""

    def __init__(self, read_ttl: timedelta, delete_ttl: timedelta, clock: Clock = utcnow) -> None:
        self._ttls = {Status.READ: read_ttl, Status.DELETED: delete_ttl}
        self._clock = clock

    def ttl(self, status: Status) -> timedelta:
        return self._ttls[status]

    @abstractmethod
    def put(self, url: str, status: Status) -> None:
        """Upsert the (url, status) record with the current time."""

    @abstractmethod
    def snapshot(self, now: Optional[datetime] = None) -> StateSnapshot:
        """Return the urls with a live record of each status at ``now``."""


class FileStateStore(StateStore):
    """Stores one JSON object per status, mapping url -> epoch milliseconds.

    The file for a status is rewritten in full on every put, with entries
    outside that status's TTL dropped first. A failed write is logged and the
    mutation is lost."""

    def __init__(
        self,
        read_path: str,
        delete_path: str,
        read_ttl: timedelta,
        delete_ttl: timedelta,
        clock: Clock = utcnow,
    ) -> None:
        super().__init__(read_ttl, delete_ttl, clock=clock)
        self._paths = {Status.READ: Path(read_path), Status.DELETED: Path(delete_path)}

    def put(self, url: str, status: Status) -> None:
        if not url:
            raise ValueError("url is required")
        path = self._paths[status]
        now = self._clock()
        ttl = self.ttl(status)

        history = self._load(path)
        history[url] = now
        kept = {k: to_millis(ts) for k, ts in history.items() if is_active(ts, now, ttl)}

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(kept, f, ensure_ascii=False, indent=2)
        except OSError as exc:
            logger.error("Failed to write %s: %s", path, exc)

    def snapshot(self, now: Optional[datetime] = None) -> StateSnapshot:
        now = now or self._clock()
        return StateSnapshot(
            read_urls=self._live_urls(Status.READ, now),
            deleted_urls=self._live_urls(Status.DELETED, now),
        )

    def _live_urls(self, status: Status, now: datetime) -> FrozenSet[str]:
        ttl = self.ttl(status)
        history = self._load(self._paths[status])
        return frozenset(url for url, ts in history.items() if is_active(ts, now, ttl))

    @staticmethod
    def _load(path: Path) -> Dict[str, datetime]:
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read %s, treating it as empty: %s", path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Unexpected content in %s, treating it as empty", path)
            return {}
        history: Dict[str, datetime] = {}
        for url, ms in data.items():
            if isinstance(ms, bool) or not isinstance(ms, (int, float)):
                continue
            try:
                history[str(url)] = from_millis(ms)
            except (ValueError, OverflowError, OSError):
                logger.warning("Dropping invalid timestamp %r for %s in %s", ms, url, path)
        return history


class RemoteStateStore(StateStore):
    """Upsert-able record table behind a PostgREST endpoint (e.g. Supabase).

    Table layout: {url, status, created_at}, conflict target ``url``. Rows are
    never deleted; expiry is applied by the time-windowed query only. Any
    transport or HTTP failure raises StateStoreError."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        read_ttl: timedelta,
        delete_ttl: timedelta,
        table: str = "crawler_state",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        clock: Clock = utcnow,
    ) -> None:
        super().__init__(read_ttl, delete_ttl, clock=clock)
        self._endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    def put(self, url: str, status: Status) -> None:
        if not url:
            raise ValueError("url is required")
        record = StateRecord(url=url, status=status, timestamp=self._clock())
        try:
            response = self._session.post(
                self._endpoint,
                params={"on_conflict": "url"},
                json=record.to_row(),
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise StateStoreError(f"Failed to upsert state for {url}: {exc}") from exc

    def snapshot(self, now: Optional[datetime] = None) -> StateSnapshot:
        now = now or self._clock()
        return StateSnapshot(
            read_urls=self._live_urls(Status.READ, now),
            deleted_urls=self._live_urls(Status.DELETED, now),
        )

    def _live_urls(self, status: Status, now: datetime) -> FrozenSet[str]:
        cutoff = active_cutoff(now, self.ttl(status))
        try:
            response = self._session.get(
                self._endpoint,
                params={
                    "select": "url",
                    "status": f"eq.{status.value}",
                    "created_at": f"gt.{cutoff.isoformat()}",
                },
                timeout=self._timeout,
            )
            response.raise_for_status()
            rows = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise StateStoreError(f"Failed to load {status.value} state: {exc}") from exc
        return frozenset(row["url"] for row in rows if row.get("url"))
