"""HTTP endpoints: trigger a crawl and record read / delete actions."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from .config import WatchConfig
from .errors import StateStoreError
from .factory import create_state_store
from .models import Status
from .orchestrator import Orchestrator
from .storage import StateStore

logger = logging.getLogger(__name__)


def create_app(
    config: WatchConfig,
    store: Optional[StateStore] = None,
    orchestrator_factory: Optional[Callable[[WatchConfig, StateStore], Orchestrator]] = None,
) -> FastAPI:
    """Build the API app around one config and one state store."""
    store = store or create_state_store(config)
    make_orchestrator = orchestrator_factory or (lambda cfg, st: Orchestrator(cfg, st))

    app = FastAPI(title="forum-watch")

    @app.get("/api/crawl")
    def trigger_crawl():
        response = make_orchestrator(config, store).run()
        return JSONResponse(response.to_dict(), status_code=200 if response.success else 500)

    @app.post("/api/crawl")
    async def mark_state(request: Request):
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"success": False, "error": "Invalid JSON"}, status_code=400)
        if not isinstance(body, dict):
            return JSONResponse({"success": False, "error": "Invalid JSON"}, status_code=400)

        url = body.get("url")
        if not url:
            return JSONResponse({"success": False, "error": "URL required"}, status_code=400)

        try:
            status = Status.from_action(body.get("action") or "read")
        except ValueError as exc:
            return JSONResponse({"success": False, "error": str(exc)}, status_code=400)

        try:
            await run_in_threadpool(store.put, url, status)
        except StateStoreError as exc:
            logger.error("Update state failed: %s", exc)
            return JSONResponse({"success": False, "error": "Server Error"}, status_code=500)

        return {"success": True}

    return app
