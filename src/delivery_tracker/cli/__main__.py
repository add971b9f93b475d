from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import ConfigError, TrackerConfig, default_config, load_config
from ..logging.init import log_summary, set_debug, setup_logging
from ..logging.issue_log import IssueLogBuffer
from ..models.delivery import Region
from ..services.orchestrator import ProcessingError, run_import, run_mark, run_status, scan_spreadsheets
from ..services.summary import render_summary_line
from ..services.views import delivery_band, filter_by_region, route_band, route_number, sort_records
from ..store.json_store import JsonRecordStore

"""CLI entrypoint.

    delivery-tracker import FILE_OR_DIR...        route / fleet exports -> store
    delivery-tracker status FILE_OR_DIR...        status sheets -> store
    delivery-tracker show [--region R] [--sort asc|desc|alpha]
    delivery-tracker mark RECORD_ID CODE success|unsuccessful
    delivery-tracker clear

Config resolution: --config, then $TRACKER_CONFIG, then config/tracker.yml when
present, else the packaged defaults. Store path: --store, then
$TRACKER_STORE_PATH, then the config's store_path. `.env` is loaded first.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

DEFAULT_CONFIG_PATH = Path("config/tracker.yml")


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; values override the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="delivery-tracker", description="Courier delivery route tracker")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    p.add_argument("--store", type=Path, default=None, help="JSON record store file")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Import route-export or fleet-management spreadsheets")
    imp.add_argument("paths", nargs="+", type=Path)

    st = sub.add_parser("status", help="Apply status spreadsheets to stored records")
    st.add_argument("paths", nargs="+", type=Path)
    st.add_argument(
        "--keyed-by", choices=["header", "letter"], default="header",
        help="Read columns by header name (default) or by column letter",
    )

    show = sub.add_parser("show", help="Print stored records")
    show.add_argument("--region", choices=[r.value for r in Region if r is not Region.UNCLASSIFIED], default=None)
    show.add_argument("--sort", choices=["asc", "desc", "alpha"], default="asc")

    mark = sub.add_parser("mark", help="Manually mark one service code of a record")
    mark.add_argument("record_id")
    mark.add_argument("code")
    mark.add_argument("outcome", choices=["success", "unsuccessful"])

    sub.add_parser("clear", help="Remove all stored records")
    return p.parse_args(argv)


def _resolve_config(explicit: Path | None) -> TrackerConfig:
    env_path = os.getenv("TRACKER_CONFIG")
    if explicit is not None:
        return load_config(explicit)
    if env_path:
        return load_config(Path(env_path))
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


def _show(store: JsonRecordStore, region: str | None, order: str) -> int:
    records = store.load()
    if not records:
        print("no records")
        return EXIT_SUCCESS_ALL
    selected = filter_by_region(records, Region.from_label(region) if region else None)
    for r in sort_records(selected, order):  # type: ignore[arg-type]
        print(
            f"{r.id}  {r.driver[:30]:<30}  {r.region.value:<14}  "
            f"route#{route_number(records, r)}  total={r.total_orders} "
            f"delivered={r.delivered} unsuccessful={r.unsuccessful} pending={r.pending}  "
            f"delivery={r.delivery_percentage}%({delivery_band(r.delivery_percentage)}) "
            f"route={r.route_percentage}%({route_band(r.route_percentage)})"
        )
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only -> read sys.argv; an explicit [] must not pick up pytest's arguments
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug()

    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    issue_log = IssueLogBuffer()
    store_path = args.store or Path(os.getenv("TRACKER_STORE_PATH") or cfg.store_path)
    store = JsonRecordStore(store_path, issue_log=issue_log)
    logger.debug(f"store: {store_path}")

    if args.command == "show":
        return _show(store, args.region, args.sort)

    if args.command == "clear":
        store.clear()
        logger.info(f"cleared {store_path}")
        return EXIT_SUCCESS_ALL

    if args.command == "mark":
        try:
            record = run_mark(store, args.record_id, args.code, args.outcome)
        except ProcessingError as e:
            logger.error(f"mark: {e}")
            return EXIT_FATAL
        logger.info(
            f"{record.driver}: delivered={record.delivered} unsuccessful={record.unsuccessful} "
            f"pending={record.pending} delivery={record.delivery_percentage}%"
        )
        return EXIT_SUCCESS_ALL

    try:
        paths = scan_spreadsheets(args.paths)
    except ProcessingError as e:
        logger.error(f"{args.command}: {e}")
        return EXIT_FATAL
    if not paths:
        logger.warning("no spreadsheet files found")

    if args.command == "import":
        result = run_import(paths, cfg, store, issue_log)
    else:
        result = run_status(paths, cfg, store, issue_log, keyed_by=args.keyed_by)

    summary_line = render_summary_line(result)
    log_summary(summary_line[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
