from __future__ import annotations

import argparse
import logging
import sys
import threading
from typing import Optional

from .config import DEFAULT_CONCURRENCY, DEFAULT_PORT_SPEC, DEFAULT_TIMEOUT_MS, ScanConfig
from .errors import ConfigError, ResolutionError, ScanCancelled
from .models import ScanSummary
from .output import print_footer, print_header, print_json, print_result, save_results
from .ports import parse_ports
from .scanner import run_scan
from .targets import resolve_target

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CANCELLED = 1
EXIT_RESOLUTION = 2
EXIT_INTERRUPTED = 130


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="netrecon", description="TCP connect port scanner with banner grabbing")
    p.add_argument("--host", "--target", dest="host", required=True, help="Target IP or hostname")
    p.add_argument("-p", "--ports", default=None,
                   help=f'Ports like "22,80,443" or "1-1024" (default: {DEFAULT_PORT_SPEC})')
    p.add_argument("-c", "--concurrency", type=int, default=DEFAULT_CONCURRENCY,
                   help=f"Simultaneous connections (default: {DEFAULT_CONCURRENCY})")
    p.add_argument("-t", "--timeout", type=int, default=DEFAULT_TIMEOUT_MS,
                   help=f"Per-port timeout in ms (default: {DEFAULT_TIMEOUT_MS})")
    p.add_argument("-v", "--verbose", action="store_true", help="Log every probe")
    p.add_argument("--json", action="store_true", help="Print results as JSON")
    p.add_argument("--no-rdns", action="store_true", help="Skip the reverse DNS lookup")
    p.add_argument("--max-time", type=float, default=None,
                   help="Stop the scan after this many seconds and report what was found")
    p.add_argument("--format", choices=["txt", "csv", "json"], help="Also save results to a file")
    p.add_argument("--out-dir", default="SCANS", help="Output directory for saved files")
    return p


def _report(summary: ScanSummary, args: argparse.Namespace) -> None:
    if args.json:
        print_json(summary)
    else:
        print_footer(summary)

    if args.format:
        path = save_results(summary, fmt=args.format, out_dir=args.out_dir)
        logger.info("Saved results to %s", path)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = ScanConfig(concurrency=args.concurrency, timeout_ms=args.timeout)
    except ConfigError as e:
        parser.error(str(e))

    try:
        target = resolve_target(args.host, reverse=not args.no_rdns)
    except ResolutionError as e:
        print(f"Host resolution failed: {e.reason}", file=sys.stderr)
        return EXIT_RESOLUTION

    ports = parse_ports(args.ports)

    if not args.json:
        print_header(target, len(ports), config)

    cancel = threading.Event()
    timer: Optional[threading.Timer] = None
    if args.max_time is not None:
        timer = threading.Timer(args.max_time, cancel.set)
        timer.daemon = True
        timer.start()

    try:
        summary = run_scan(
            target,
            ports,
            config,
            cancel=cancel,
            on_result=None if args.json else print_result,
        )
    except ScanCancelled as e:
        logger.warning("Time limit reached, reporting partial results")
        if e.summary is not None:
            _report(e.summary, args)
        return EXIT_CANCELLED
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED
    finally:
        if timer is not None:
            timer.cancel()

    _report(summary, args)
    return EXIT_OK
