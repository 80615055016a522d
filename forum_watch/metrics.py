from __future__ import annotations

from dataclasses import asdict
from typing import Dict, List

from .models import RunStats, ScrapeOutcome

TIMEOUT_ERRORS = ("TimeoutError", "Timeout")


class MetricsCollector:
    """Collects per-target scrape outcomes for one crawl run.

    Scrapers record one ScrapeOutcome per target; the orchestrator turns them
    into a RunStats summary at the end of the run."""

    def __init__(self) -> None:
        self._events: List[ScrapeOutcome] = []

    def record(self, outcome: ScrapeOutcome) -> None:
        self._events.append(outcome)

    def snapshot(self) -> RunStats:
        """Aggregate everything recorded so far."""
        events = list(self._events)
        total = len(events)
        success_count = sum(1 for e in events if e.success)
        return RunStats(
            total_targets=total,
            success_count=success_count,
            failure_count=total - success_count,
            timeout_count=sum(1 for e in events if e.error_type in TIMEOUT_ERRORS),
            obstacle_count=sum(1 for e in events if e.error_type == "ObstacleError"),
            item_count=sum(e.item_count for e in events),
            avg_latency_ms=(sum(e.latency_ms for e in events) / total) if total else 0.0,
            failed_targets=[e.target for e in events if not e.success],
        )

    def export_json(self) -> List[Dict]:
        """Export all recorded outcomes as a list of dictionaries."""
        return [asdict(e) for e in self._events]
