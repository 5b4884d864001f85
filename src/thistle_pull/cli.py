import argparse
import logging
import sys
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from rich import print, print_json
from rich.markup import escape

from config.settings import (
    PROBE_OUT_FILE, PROBE_TIMEOUT, PULL_OUT_FILE, REQUEST_DELAY_SECONDS,
    TAGS, TIMEOUT, TOWN, WINDOW_MONTHS,
)
from thistle_pull.client import DataThistleClient
from thistle_pull.config import load_config
from thistle_pull.errors import ConfigError, RequestFailedError
from thistle_pull.pager import fetch_pages
from thistle_pull.storage import count_unique_ids, save_events

log = logging.getLogger("thistle_pull")


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def _base_parser(description: str, out_default: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--out", "-o", type=Path, default=Path(out_default), help=f"Output JSON file (default: {out_default})")
    parser.add_argument("--town", default=TOWN, help=f"Town filter (default: {TOWN})")
    parser.add_argument("--tags", default=TAGS, help=f"Tag filter (default: {TAGS})")
    parser.add_argument("--months", type=int, default=WINDOW_MONTHS, help="Months ahead to include")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def _load(args, timeout):
    """Load .env from the working directory, then build the run config."""
    load_dotenv(find_dotenv(usecwd=True))
    return load_config(
        months=args.months, town=args.town, tags=args.tags,
        timeout=timeout, output_path=args.out,
    )


def pull_all(argv=None) -> int:
    parser = _base_parser("Pull every matching DataThistle event into one JSON file.", PULL_OUT_FILE)
    parser.add_argument("--delay", type=float, default=REQUEST_DELAY_SECONDS,
                        help=f"Seconds to wait after each full page (default: {REQUEST_DELAY_SECONDS})")
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        cfg = _load(args, TIMEOUT)
    except ConfigError as e:
        log.error(str(e))
        return 1

    print(f"[bold]DataThistle full pull[/bold]: {cfg.town} + {cfg.tags}, "
          f"{cfg.limit} per page ({args.delay:g}s delay between full pages)")
    try:
        result = fetch_pages(DataThistleClient(cfg.token, timeout=cfg.timeout), cfg, delay=args.delay)
        out = save_events(result.events, cfg.output_path)
        print(f"[green]All data saved to[/green] {escape(str(out))}")
        log.info("Total requests made: %d", result.requests)
        log.info("Total events collected: %d", len(result.events))
        log.info("Unique event IDs: %d", count_unique_ids(result.events))
    except Exception as e:
        log.error("Pull failed: %s", e)
        return 1
    return 0


def probe(argv=None) -> int:
    parser = _base_parser("Fetch a single page of DataThistle events as a smoke test.", PROBE_OUT_FILE)
    parser.add_argument("--ping", action="store_true", help="Check authentication with /ping first")
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    print("[bold]DataThistle API probe[/bold]")
    try:
        cfg = _load(args, PROBE_TIMEOUT)
    except ConfigError as e:
        log.error(str(e))
        return 1

    client = DataThistleClient(cfg.token, timeout=cfg.timeout)
    if args.ping:
        try:
            client.ping()
        except RequestFailedError as e:
            log.error("/ping FAILED: %s", e)
            if e.body:
                log.error("Body: %s", e.body)
            log.error("Likely causes: wrong or expired API key, revoked key, or network/firewall blocking the request")
            return 1

    result = fetch_pages(client, cfg, max_pages=1, delay=0)
    if not result.ok:
        if result.error is not None and result.error.body:
            log.error("Response body: %s", result.error.body)
        return 0

    print(f"[green]SUCCESS[/green] received {len(result.events)} events (page size {cfg.limit})")
    if result.events:
        print("First event:")
        print_json(data=result.events[0])
    try:
        out = save_events(result.events, cfg.output_path)
    except OSError as e:
        log.error("Could not save response: %s", e)
        return 1
    print(f"[green]Full response saved to[/green] {escape(str(out))}")
    return 0


if __name__ == "__main__":
    sys.exit(pull_all())
