"""Environment variable loaders for configuration."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import TYPE_CHECKING, cast

from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

type SettingsSource = Mapping[str, str]


def build_settings_source(config_file: Path | None = None) -> dict[str, str]:
    """Return the process environment overlaid with the values of ``config_file``.

    The config file is a JSON object using the same ``FOLIO_*`` keys as the
    environment. Values from the file win over the environment.
    """

    values = dict(os.environ)
    if config_file is not None:
        values.update(load_config_file(config_file))
    return values


def load_config_file(path: Path) -> dict[str, str]:
    try:
        payload: object = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Config file {path} is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")

    entries = cast(dict[str, object], payload)
    return {key: str(value) for key, value in entries.items() if value is not None}


def read_setting(name: str, default: str, *, source: SettingsSource | None = None) -> str:
    """Return a setting by name, falling back to ``default`` when absent or blank."""

    values = source if source is not None else os.environ
    value = values.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def read_int_setting(
    name: str,
    default: int,
    *,
    source: SettingsSource | None = None,
    minimum: int = 1,
) -> int:
    raw = read_setting(name, str(default), source=source)
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {value}")
    return value
