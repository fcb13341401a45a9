"""Application configuration helpers."""

from __future__ import annotations

from .env import build_settings_source, read_int_setting, read_setting
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import LoggingConfig, configure_logging, get_logging_config
from .okapi import Credentials, OkapiConfig, get_okapi_config
from .sync import ImportSettings, get_import_settings, parse_credential_failure_policy

__all__ = [
    "ConfigurationError",
    "Credentials",
    "ImportSettings",
    "LoggingConfig",
    "OkapiConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "build_settings_source",
    "configure_logging",
    "get_import_settings",
    "get_logging_config",
    "get_okapi_config",
    "parse_credential_failure_policy",
    "read_int_setting",
    "read_setting",
]
