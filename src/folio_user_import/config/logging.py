"""Shared logging helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .env import SettingsSource, read_setting
from .errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: int = logging.INFO
    log_file: Path | None = None


def parse_log_level(value: str) -> int:
    level = logging.getLevelNamesMapping().get(value.strip().upper())
    if level is None:
        raise ConfigurationError(f"Unknown log level: {value}")
    return level


def get_logging_config(*, source: SettingsSource | None = None) -> LoggingConfig:
    level = parse_log_level(read_setting("FOLIO_LOGLEVEL", "INFO", source=source))
    log_file = read_setting("FOLIO_LOGFILE", "", source=source)
    return LoggingConfig(level=level, log_file=Path(log_file) if log_file else None)


def configure_logging(
    *,
    level: int = logging.INFO,
    log_file: Path | None = None,
    force: bool = False,
) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: we default
    to INFO level and a terse format suitable for CLI output. ``log_file`` adds a
    file sink next to the console. Pass ``force=True`` to reconfigure during tests
    or specialised entry points.
    """

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=force,
    )
