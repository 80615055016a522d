from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


@dataclass(frozen=True)
class HeadlineItem:
    title: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "url": self.url}


@dataclass(frozen=True)
class Post:
    title: str
    url: str
    time: str
    brief: str = ""
    is_read: bool = False

    def mark(self, is_read: bool) -> "Post":
        return replace(self, is_read=is_read)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "time": self.time,
            "brief": self.brief,
            "isRead": self.is_read,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        return cls(
            title=data.get("title", ""),
            url=data.get("url", ""),
            time=data.get("time", ""),
            brief=data.get("brief") or "",
            is_read=bool(data.get("isRead", False)),
        )


@dataclass(frozen=True)
class BoardResult:
    name: str
    posts: Tuple[Post, ...] = ()

    @classmethod
    def placeholder_name(cls, label: str, board_id: str) -> str:
        return f"{label} {board_id}"

    @classmethod
    def error(cls, label: str, board_id: str) -> "BoardResult":
        """Result used when a board could not be scraped at all."""
        return cls(name=f"{cls.placeholder_name(label, board_id)} (Error)", posts=())

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "posts": [p.to_dict() for p in self.posts]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoardResult":
        return cls(
            name=data.get("name", ""),
            posts=tuple(Post.from_dict(p) for p in data.get("posts", [])),
        )


@dataclass(frozen=True)
class CrawlResult:
    headlines: Tuple[HeadlineItem, ...]
    boards: Tuple[BoardResult, ...]
    generated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "headlines": [h.to_dict() for h in self.headlines],
            "boards": [b.to_dict() for b in self.boards],
            "generatedAt": self.generated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CrawlResult":
        return cls(
            headlines=tuple(
                HeadlineItem(title=h.get("title", ""), url=h.get("url", ""))
                for h in data.get("headlines", [])
            ),
            boards=tuple(BoardResult.from_dict(b) for b in data.get("boards", [])),
            generated_at=data.get("generatedAt", ""),
        )


@dataclass(frozen=True)
class CrawlResponse:
    """Top-level envelope returned to callers of a crawl run."""

    success: bool
    data: Optional[CrawlResult] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: CrawlResult) -> "CrawlResponse":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: str) -> "CrawlResponse":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        if self.success and self.data is not None:
            return {"success": True, "data": self.data.to_dict()}
        return {"success": False, "error": self.error or "Crawler failed"}


class Status(str, Enum):
    READ = "read"
    DELETED = "deleted"

    @classmethod
    def from_action(cls, action: str) -> "Status":
        """Map a mark-state action ("read" / "delete") to a record status."""
        if action == "read":
            return cls.READ
        if action == "delete":
            return cls.DELETED
        raise ValueError(f"Unknown action: {action}")


@dataclass(frozen=True)
class StateRecord:
    url: str
    status: Status
    timestamp: datetime

    def to_row(self) -> Dict[str, Any]:
        """Row shape of the relational state table."""
        return {"url": self.url, "status": self.status.value, "created_at": self.timestamp.isoformat()}


@dataclass(frozen=True)
class StateSnapshot:
    read_urls: FrozenSet[str] = field(default_factory=frozenset)
    deleted_urls: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def empty(cls) -> "StateSnapshot":
        return cls()


@dataclass(frozen=True)
class ScrapeOutcome:
    target: str
    success: bool
    latency_ms: int
    item_count: int
    error_type: Optional[str]


@dataclass(frozen=True)
class RunStats:
    total_targets: int
    success_count: int
    failure_count: int
    timeout_count: int
    obstacle_count: int
    item_count: int
    avg_latency_ms: float
    failed_targets: List[str] = field(default_factory=list)
