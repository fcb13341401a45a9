from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from folio_user_import.config import (
    ConfigurationError,
    build_settings_source,
    get_import_settings,
    get_logging_config,
    get_okapi_config,
    read_int_setting,
    read_setting,
)
from folio_user_import.domain.model import CredentialFailurePolicy

if TYPE_CHECKING:
    from pathlib import Path


def test_read_setting_falls_back_on_blank_values() -> None:
    assert read_setting("FOLIO_HOST", "localhost", source={"FOLIO_HOST": "   "}) == "localhost"
    assert read_setting("FOLIO_HOST", "localhost", source={"FOLIO_HOST": " okapi "}) == "okapi"


def test_read_int_setting_validates_values() -> None:
    assert read_int_setting("FOLIO_PAGESIZE", 10, source={}) == 10
    assert read_int_setting("FOLIO_PAGESIZE", 10, source={"FOLIO_PAGESIZE": "25"}) == 25

    with pytest.raises(ConfigurationError, match="must be an integer"):
        read_int_setting("FOLIO_PAGESIZE", 10, source={"FOLIO_PAGESIZE": "ten"})
    with pytest.raises(ConfigurationError, match="at least 1"):
        read_int_setting("FOLIO_PAGESIZE", 10, source={"FOLIO_PAGESIZE": "0"})


def test_okapi_config_defaults() -> None:
    config = get_okapi_config(source={})

    assert config.base_url == "http://localhost:9130"
    assert config.credentials.username == "diku_admin"
    assert config.tenant == "diku"
    assert config.resilience.base_url == config.base_url
    assert "POST" not in config.resilience.retry.allowed_methods
    assert "password" not in repr(config.credentials)


def test_okapi_config_from_source() -> None:
    config = get_okapi_config(
        source={
            "FOLIO_PROTOCOL": "https:",
            "FOLIO_HOST": "okapi.example.org",
            "FOLIO_PORT": "443",
            "FOLIO_TENANT": "fs00001",
            "FOLIO_USERNAME": "importer",
            "FOLIO_PASSWORD": "s3cret",
        }
    )

    assert config.base_url == "https://okapi.example.org:443"
    assert config.credentials.username == "importer"
    assert config.credentials.password == "s3cret"  # noqa: S105
    assert config.tenant == "fs00001"


def test_import_settings_from_source() -> None:
    settings = get_import_settings(
        source={
            "FOLIO_FILENAME": "patrons.json",
            "FOLIO_PAGESIZE": "20",
            "FOLIO_MAX_CONCURRENT": "4",
            "FOLIO_CREDENTIAL_FAILURE_POLICY": "KEEP-RECORD",
        }
    )

    assert str(settings.input_file) == "patrons.json"
    assert settings.page_size == 20
    assert settings.max_concurrent == 4
    assert settings.batch_concurrency == 1
    assert settings.credential_failure_policy is CredentialFailurePolicy.KEEP_RECORD


def test_unknown_credential_policy_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="delete-record, keep-record"):
        get_import_settings(source={"FOLIO_CREDENTIAL_FAILURE_POLICY": "sometimes"})


def test_logging_config_from_source(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "user-import.log"

    config = get_logging_config(
        source={"FOLIO_LOGLEVEL": "debug", "FOLIO_LOGFILE": str(log_file)}
    )

    assert config.level == logging.DEBUG
    assert config.log_file == log_file


def test_config_file_overrides_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("FOLIO_TENANT", "from-env")
    monkeypatch.setenv("FOLIO_HOST", "env-host")
    config_file = tmp_path / "config.json"
    config_file.write_text('{"FOLIO_TENANT": "from-file"}', encoding="utf-8")

    source = build_settings_source(config_file)

    assert source["FOLIO_TENANT"] == "from-file"
    assert source["FOLIO_HOST"] == "env-host"


@pytest.mark.parametrize("content", ["not json", "[1, 2]"])
def test_invalid_config_file_is_rejected(tmp_path: Path, content: str) -> None:
    config_file = tmp_path / "config.json"
    config_file.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        build_settings_source(config_file)


def test_missing_config_file_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Cannot read config file"):
        build_settings_source(tmp_path / "missing.json")
