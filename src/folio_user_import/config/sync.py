"""Import run defaults and settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from folio_user_import.domain.batching import DEFAULT_PAGE_SIZE
from folio_user_import.domain.executor import DEFAULT_BATCH_CONCURRENCY, DEFAULT_MAX_CONCURRENT
from folio_user_import.domain.model import CredentialFailurePolicy

from .env import SettingsSource, read_int_setting, read_setting
from .errors import ConfigurationError

DEFAULT_INPUT_FILENAME = "users.json"


@dataclass(frozen=True, slots=True)
class ImportSettings:
    input_file: Path = Path(DEFAULT_INPUT_FILENAME)
    page_size: int = DEFAULT_PAGE_SIZE
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    batch_concurrency: int = DEFAULT_BATCH_CONCURRENCY
    credential_failure_policy: CredentialFailurePolicy = CredentialFailurePolicy.DELETE_RECORD


def parse_credential_failure_policy(value: str) -> CredentialFailurePolicy:
    try:
        return CredentialFailurePolicy(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(policy.value for policy in CredentialFailurePolicy)
        raise ConfigurationError(
            f"Unknown credential failure policy {value!r} (expected one of: {choices})"
        ) from exc


def get_import_settings(*, source: SettingsSource | None = None) -> ImportSettings:
    return ImportSettings(
        input_file=Path(read_setting("FOLIO_FILENAME", DEFAULT_INPUT_FILENAME, source=source)),
        page_size=read_int_setting("FOLIO_PAGESIZE", DEFAULT_PAGE_SIZE, source=source),
        max_concurrent=read_int_setting(
            "FOLIO_MAX_CONCURRENT", DEFAULT_MAX_CONCURRENT, source=source
        ),
        batch_concurrency=read_int_setting(
            "FOLIO_BATCH_CONCURRENCY", DEFAULT_BATCH_CONCURRENCY, source=source
        ),
        credential_failure_policy=parse_credential_failure_policy(
            read_setting(
                "FOLIO_CREDENTIAL_FAILURE_POLICY",
                CredentialFailurePolicy.DELETE_RECORD.value,
                source=source,
            )
        ),
    )
