from __future__ import annotations

import argparse
import signal
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from pincode_distance.config.loader import ConfigError, load_config
from pincode_distance.logging.init import log_summary, setup_logging
from pincode_distance.lookup.base import CredentialFailure, LookupFailure, LookupService
from pincode_distance.lookup.gemini import GeminiLookupService
from pincode_distance.models.config_models import AppConfig
from pincode_distance.models.run_result import RunState
from pincode_distance.services.credentials import API_KEY_ENV_VARS, CredentialGate, resolve_api_key
from pincode_distance.services.orchestrator import ProcessingError, process_file
from pincode_distance.services.progress import ProgressReporter
from pincode_distance.services.runner import BatchAborted, BatchRunner
from pincode_distance.services.single import InputValidationError, lookup_single
from pincode_distance.services.summary import (
    render_abort_message,
    render_failed_rows,
    render_outcome_message,
    render_summary_line,
)

"""CLI entrypoint.

Commands:
- single ORIGIN DESTINATION: one lookup, printed with a directions link
- bulk INPUT: run the batch pipeline over a .csv/.xlsx file
- template [PATH]: write a sample input file

Exit codes: 0 all rows succeeded, 2 completed with row errors (or
cancelled), 1 fatal (config, credential, unreadable input, credential abort).
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

SAMPLE_TEMPLATE = "Origin Pin Code,Destination City\n400001,Pune\n110001,Jaipur\n"
DEFAULT_TEMPLATE_NAME = "sample_template.csv"


def build_lookup_service(api_key: str, cfg: AppConfig) -> LookupService:
    return GeminiLookupService(api_key, cfg.lookup)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; values in .env win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="pincode-distance",
        description="Driving distance calculator for Indian pin codes and cities",
    )
    p.add_argument("--config", type=Path, default=None, help="Config file (default: config/distance.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    single = sub.add_parser("single", help="Calculate one route")
    single.add_argument("origin", help="6-digit origin pin code")
    single.add_argument("destination", help="Destination city or town")

    bulk = sub.add_parser("bulk", help="Calculate routes for every row of a .csv/.xlsx file")
    bulk.add_argument("input", type=Path, help="Input file with origin/destination columns")
    bulk.add_argument("--output", type=Path, default=None, help="Results file (default from config)")
    bulk.add_argument("--sheet", default=None, help="Sheet name for .xlsx input (default: first sheet)")

    template = sub.add_parser("template", help="Write a sample input file")
    template.add_argument("path", type=Path, nargs="?", default=Path(DEFAULT_TEMPLATE_NAME))
    template.add_argument("--force", action="store_true", help="Overwrite an existing file")
    return p.parse_args(argv)


@contextmanager
def _cancel_on_interrupt(runner: BatchRunner, logger: Any) -> Iterator[None]:
    """First Ctrl-C asks the runner to stop between rows; a second one interrupts."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum: int, frame: Any) -> None:
        if runner.cancel_requested:
            raise KeyboardInterrupt
        runner.cancel()
        logger.warning("cancel requested; stopping after the current row (Ctrl-C again to abort)")

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _write_template(path: Path, force: bool, logger: Any) -> int:
    if path.exists() and not force:
        logger.error(f"template: {path} already exists (use --force to overwrite)")
        return EXIT_FATAL
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(SAMPLE_TEMPLATE, encoding="utf-8")
    logger.info(f"Sample template written to: {path}")
    return EXIT_SUCCESS_ALL


def _run_single(args: argparse.Namespace, cfg: AppConfig, service: LookupService, gate: CredentialGate, logger: Any) -> int:
    try:
        found = lookup_single(service, gate, args.origin, args.destination, country=cfg.lookup.country)
    except InputValidationError as e:
        logger.error(str(e))
        return EXIT_FATAL
    except CredentialFailure as e:
        logger.error(str(e))
        return EXIT_FATAL
    except LookupFailure as e:
        logger.error(str(e) or "An unexpected error occurred. Please try again.")
        return EXIT_FATAL

    result = found.result
    logger.info(f"Route: {found.origin} -> {found.destination}")
    logger.info(f"Distance: {result.distance:g} km")
    logger.info(f"Travel time: {result.travel_time}")
    logger.info(f"Route summary: {result.route_summary}")
    logger.info(f"Directions: {found.directions_url}")
    return EXIT_SUCCESS_ALL


def _run_bulk(args: argparse.Namespace, cfg: AppConfig, service: LookupService, gate: CredentialGate, logger: Any) -> int:
    runner = BatchRunner(service, gate, ProgressReporter())
    try:
        with _cancel_on_interrupt(runner, logger):
            result = process_file(args.input, runner, cfg, results_path=args.output, sheet=args.sheet)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    except BatchAborted as e:
        if e.result is not None:
            log_summary(render_summary_line(e.result).removeprefix("SUMMARY "))
        logger.error(render_abort_message(e.reason, e.processed, e.progress.total))
        return EXIT_FATAL

    summary_line = render_summary_line(result)
    log_summary(summary_line.removeprefix("SUMMARY "))

    for line in render_failed_rows(runner.outcome.errors):
        logger.warning(line)
    logger.info(render_outcome_message(result))

    if result.state is RunState.COMPLETED and result.failed_rows == 0:
        return EXIT_SUCCESS_ALL
    return EXIT_PARTIAL_FAILURE


def main(argv: list[str] | None = None) -> int:
    # None のときのみシステム引数を読む (テストで [] を渡すケースを区別)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "template":
        return _write_template(args.path, args.force, logger)

    _load_env_file(Path(".env"), override=True)
    api_key = resolve_api_key()
    gate = CredentialGate(ready=api_key is not None)
    if api_key is None:
        logger.error(f"API key required. Set one of {', '.join(API_KEY_ENV_VARS)} (environment or .env).")
        return EXIT_FATAL

    service = build_lookup_service(api_key, cfg)
    if args.command == "single":
        return _run_single(args, cfg, service, gate, logger)
    return _run_bulk(args, cfg, service, gate, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
