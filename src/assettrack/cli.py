"""Command-line access to a file-backed store.

Usage
-----
::

    assettrack import sample.json            # reconcile a saved payload
    cat payload.json | assettrack import -   # ... or one read from stdin
    assettrack dashboard                     # assets with tracker + position
    assettrack history T1                    # position log, newest first

The store file defaults to ``ASSETTRACK_STORE_PATH`` (or
``assettrack.json``) and can be overridden with ``--store``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from assettrack.config import TrackerConfig
from assettrack.dashboard import build_dashboard_rows, tracking_log
from assettrack.exceptions import AssetTrackError
from assettrack.ingestion.webhook import WebhookReconciler
from assettrack.state.store import JsonFileStore

_logger = logging.getLogger(__name__)


def _read_payload(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _emit(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _cmd_import(args: argparse.Namespace, config: TrackerConfig, store: JsonFileStore) -> int:
    reconciler = WebhookReconciler(store, config=config)
    exit_code = 0
    for source in args.payloads:
        try:
            text = _read_payload(source)
        except OSError as exc:
            _logger.error("Cannot read payload %s: %s", source, exc)
            exit_code = 1
            continue
        result = reconciler.reconcile(text)
        _emit({"source": source, **result.model_dump(mode="json")})
        if not result.ok:
            exit_code = 1
    return exit_code


def _cmd_dashboard(args: argparse.Namespace, config: TrackerConfig, store: JsonFileStore) -> int:
    rows = build_dashboard_rows(store)
    _emit([row.model_dump(mode="json", by_alias=True) for row in rows])
    return 0


def _cmd_history(args: argparse.Namespace, config: TrackerConfig, store: JsonFileStore) -> int:
    entries = tracking_log(store, args.tracker_id, tracker_name=args.name)
    _emit([entry.to_store() for entry in entries])
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assettrack",
        description="Reconcile tracker webhook payloads into a JSON store and inspect the result",
    )
    parser.add_argument("--store", help="Store file (default: ASSETTRACK_STORE_PATH or assettrack.json)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    import_parser = sub.add_parser("import", help="Reconcile one or more payload files ('-' for stdin)")
    import_parser.add_argument("payloads", nargs="+", metavar="FILE")
    import_parser.set_defaults(handler=_cmd_import)

    dashboard_parser = sub.add_parser("dashboard", help="Print assets joined with tracker, link and position")
    dashboard_parser.set_defaults(handler=_cmd_dashboard)

    history_parser = sub.add_parser("history", help="Print a tracker's position log, newest first")
    history_parser.add_argument("tracker_id")
    history_parser.add_argument("--name", help="Tracker name to fall back on when no log exists for the id")
    history_parser.set_defaults(handler=_cmd_history)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        overrides = {"store_path": args.store} if args.store else {}
        config = TrackerConfig.from_env(**overrides)
        store = JsonFileStore(config.store_path)
        return int(args.handler(args, config, store))
    except AssetTrackError as exc:
        _logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
