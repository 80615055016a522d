from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional

from forum_watch.config import load_config
from forum_watch.factory import create_state_store
from forum_watch.models import Status
from forum_watch.orchestrator import Orchestrator
from forum_watch.snapshot import load_snapshot, write_snapshot

DEFAULT_SNAPSHOT_PATH = "public/daily-news.json"


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def run_crawl(config_path: Optional[str]) -> int:
    config = load_config(config_path, profile="live")
    response = Orchestrator(config, create_state_store(config)).run()
    _print_json(response.to_dict())
    return 0 if response.success else 1


def run_snapshot(config_path: Optional[str], output: str) -> int:
    config = load_config(config_path, profile="batch")
    response = Orchestrator(config, store=None).run()
    if not response.success:
        logging.error("Snapshot job failed: %s", response.error)
        return 1
    write_snapshot(response.data, output)
    return 0


def run_load_snapshot(config_path: Optional[str], path: str) -> int:
    config = load_config(config_path, profile="live")
    result = load_snapshot(path, create_state_store(config))
    _print_json({"success": True, "data": result.to_dict()})
    return 0


def run_mark(config_path: Optional[str], url: str, action: str) -> int:
    config = load_config(config_path, profile="live")
    create_state_store(config).put(url, Status.from_action(action))
    _print_json({"success": True})
    return 0


def run_serve(config_path: Optional[str], host: str, port: int) -> int:
    import uvicorn

    from forum_watch.api import create_app

    uvicorn.run(create_app(load_config(config_path, profile="live")), host=host, port=port)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Forum board watcher")
    parser.add_argument("--config", default=None, help="Path to YAML config (default: packaged forum_watch/configs/default.yaml)")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("crawl", help="Run one live crawl and print the result envelope")

    snap = sub.add_parser("snapshot", help="Run the batch crawl and write the offline snapshot file")
    snap.add_argument("--output", default=DEFAULT_SNAPSHOT_PATH, help="Snapshot JSON output path")

    load = sub.add_parser("load-snapshot", help="Print a snapshot file reconciled against the state store")
    load.add_argument("path", help="Snapshot JSON path")

    mark = sub.add_parser("mark", help="Record a read / delete action for a post url")
    mark.add_argument("url")
    mark.add_argument("--action", choices=["read", "delete"], default="read")

    serve = sub.add_parser("serve", help="Serve the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "crawl":
        return run_crawl(args.config)
    if args.command == "snapshot":
        return run_snapshot(args.config, args.output)
    if args.command == "load-snapshot":
        return run_load_snapshot(args.config, args.path)
    if args.command == "mark":
        return run_mark(args.config, args.url, args.action)
    return run_serve(args.config, args.host, args.port)


if __name__ == "__main__":
    sys.exit(main())
