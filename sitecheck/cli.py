from __future__ import annotations

import argparse
import logging
import sys

import yaml

from sitecheck.checks.retry import Checker
from sitecheck.config import settings
from sitecheck.formatting import print_result, print_summary
from sitecheck.pool import WorkerPool
from sitecheck.registry import build_config, parse_bind
from sitecheck.runner import RoundScheduler, shutdown_pool
from sitecheck.shutdown import ShutdownSignal, install_signal_handlers
from sitecheck.state import StatsStore

logger = logging.getLogger(__name__)

EXAMPLES = """\
examples:
  sitecheck https://example.com https://www.python.org
  sitecheck -f urls.txt -n 80 -t 3 -r 2
  sitecheck -p 60 -H 'Server: nginx' --contains 'Welcome' https://example.com
  sitecheck -c sitecheck.yml --serve 127.0.0.1:8080
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitecheck",
        description="Concurrent website status checker (worker threads + queues).",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "urls",
        nargs="*",
        metavar="URL",
        help="URLs to check (http/https).",
    )
    parser.add_argument(
        "-n",
        "--threads",
        type=int,
        default=None,
        help=f"Number of worker threads (default: {settings.THREADS}).",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        metavar="SECS",
        help=f"Request timeout in seconds (default: {settings.TIMEOUT_S:g}).",
    )
    parser.add_argument(
        "-r",
        "--retries",
        type=int,
        default=None,
        help=f"Max retries per URL (default: {settings.RETRIES}).",
    )
    parser.add_argument(
        "-p",
        "--period",
        type=float,
        default=None,
        metavar="SECS",
        help="Repeat every SECS seconds (default: run once).",
    )
    parser.add_argument(
        "-f",
        "--file",
        default=None,
        metavar="PATH",
        help="File with one URL per line.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        metavar="PATH",
        help="YAML file with defaults and URLs.",
    )
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        metavar="'Name: Value'",
        help="Require response header to match value (repeatable).",
    )
    parser.add_argument(
        "--contains",
        default=None,
        metavar="TEXT",
        help="Require response body to contain TEXT.",
    )
    parser.add_argument(
        "--serve",
        default=None,
        metavar="HOST:PORT",
        help="Expose a read-only status API while running.",
    )
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        help="Logging level for stderr output (default: %(default)s).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        stream=sys.stderr,
    )

    try:
        cfg = build_config(args)
        bind = parse_bind(args.serve) if args.serve else None
    except (OSError, ValueError, yaml.YAMLError) as e:
        # pydantic's ValidationError subclasses ValueError
        print(f"sitecheck: {e}", file=sys.stderr)
        return 1

    if not cfg.urls:
        print(
            "No URLs provided. Provide positional URLs, -f <file> or -c <config>.",
            file=sys.stderr,
        )
        return 1

    stop = ShutdownSignal()
    install_signal_handlers(stop)

    stats = StatsStore(max_recent=settings.MAX_RECENT)
    pool = WorkerPool(cfg.worker_threads, checker_factory=lambda: Checker(cfg))
    scheduler = RoundScheduler(
        cfg,
        pool,
        stats,
        stop,
        on_result=print_result,
        on_summary=print_summary,
    )

    server = None
    if bind is not None:
        from sitecheck.main import create_app, serve_in_background

        host, port = bind
        server = serve_in_background(create_app(stats, scheduler), host, port)

    logger.debug("Running with %s", cfg)
    pool.start()
    try:
        scheduler.run()
    finally:
        shutdown_pool(pool)
        if server is not None:
            server.should_exit = True
        print("Shutdown complete.", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
