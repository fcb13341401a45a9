#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from folio_user_import.app import run_import
from folio_user_import.config import (
    ConfigurationError,
    build_settings_source,
    configure_logging,
    get_import_settings,
    get_logging_config,
    get_okapi_config,
    parse_credential_failure_policy,
)
from folio_user_import.config.logging import parse_log_level

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from folio_user_import.config import ImportSettings, LoggingConfig

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import users into FOLIO")
    parser.add_argument(
        "--file",
        type=Path,
        help="JSON file holding the list of users to import (defaults to FOLIO_FILENAME)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional JSON file with FOLIO_* settings overriding the environment",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        help="Number of users checked for existence per request (defaults to config)",
    )
    parser.add_argument(
        "--max-concurrent",
        type=int,
        help="Maximum number of user create/update operations in flight",
    )
    parser.add_argument(
        "--batch-concurrency",
        type=int,
        help="Number of batches processed at the same time",
    )
    parser.add_argument(
        "--credential-failure-policy",
        type=str,
        help="What to do with a new user whose credential fails: delete-record or keep-record",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Log level, e.g. DEBUG or INFO (defaults to FOLIO_LOGLEVEL)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Additional log file (defaults to FOLIO_LOGFILE)",
    )
    return parser.parse_args(list(argv))


def _apply_overrides(settings: ImportSettings, args: argparse.Namespace) -> ImportSettings:
    for name in ("page_size", "max_concurrent", "batch_concurrency"):
        value = getattr(args, name)
        if value is not None and value <= 0:
            raise ValueError(f"--{name.replace('_', '-')} must be positive")
    overrides: dict[str, object] = {}
    if args.file is not None:
        overrides["input_file"] = args.file
    if args.page_size is not None:
        overrides["page_size"] = args.page_size
    if args.max_concurrent is not None:
        overrides["max_concurrent"] = args.max_concurrent
    if args.batch_concurrency is not None:
        overrides["batch_concurrency"] = args.batch_concurrency
    if args.credential_failure_policy is not None:
        overrides["credential_failure_policy"] = parse_credential_failure_policy(
            args.credential_failure_policy
        )
    return replace(settings, **overrides)


def _logging_overrides(config: LoggingConfig, args: argparse.Namespace) -> LoggingConfig:
    level = parse_log_level(args.log_level) if args.log_level else config.level
    log_file = args.log_file if args.log_file is not None else config.log_file
    return replace(config, level=level, log_file=log_file)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        source = build_settings_source(parsed_args.config)
        logging_config = _logging_overrides(get_logging_config(source=source), parsed_args)
        settings = _apply_overrides(get_import_settings(source=source), parsed_args)
        okapi = get_okapi_config(source=source)
    except (ValueError, ConfigurationError):
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging_config.level, log_file=logging_config.log_file)

    try:
        run_import(settings=settings, okapi=okapi)
    except Exception:
        log.exception("Fatal error during user import")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def cli() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    cli()
