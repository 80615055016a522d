"""Offline snapshot file: written by the batch job, read when live crawling is unavailable."""
from __future__ import annotations

import json
import logging
from pathlib import Path

from .errors import StateStoreError
from .models import CrawlResult, StateSnapshot
from .reconciler import reconcile
from .storage import StateStore

logger = logging.getLogger(__name__)


def write_snapshot(result: CrawlResult, path: str) -> Path:
    """Write the crawl data (no envelope) as pretty-printed UTF-8 JSON."""
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)
    logger.info("Snapshot written to %s", output)
    return output


def load_snapshot(path: str, store: StateStore) -> CrawlResult:
    """Read a snapshot file and reconcile it against the state store.

    A store failure is logged and the snapshot is returned with no state
    applied, same as a live run.
    """
    with open(path, "r", encoding="utf-8") as f:
        result = CrawlResult.from_dict(json.load(f))

    try:
        state = store.snapshot()
    except (StateStoreError, OSError) as exc:
        logger.error("Could not load state snapshot for %s: %s", path, exc)
        state = StateSnapshot.empty()

    return CrawlResult(
        headlines=result.headlines,
        boards=tuple(reconcile(result.boards, state)),
        generated_at=result.generated_at,
    )
