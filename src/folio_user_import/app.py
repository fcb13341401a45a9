"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from folio_user_import.adapters.http_resilience import ResilientClient
from folio_user_import.adapters.input_file import read_input_records
from folio_user_import.adapters.okapi import OkapiClient
from folio_user_import.config import (
    ImportSettings,
    OkapiConfig,
    ResilienceConfig,
    get_import_settings,
    get_okapi_config,
)
from folio_user_import.domain.data_integration import import_users

if TYPE_CHECKING:
    from collections.abc import Sequence

    from folio_user_import.domain.model import InputRecord, RunSummary

ClientFactory = Callable[[ResilienceConfig], ResilientClient]


log = getLogger(__name__)


def run_import(
    *,
    settings: ImportSettings | None = None,
    okapi: OkapiConfig | None = None,
    records: Sequence[InputRecord] | None = None,
    client_factory: ClientFactory | None = None,
) -> RunSummary:
    """Import the configured user file into FOLIO and return the run summary."""

    active_settings = settings or get_import_settings()
    active_okapi = okapi or get_okapi_config()
    effective_records = (
        records if records is not None else read_input_records(active_settings.input_file)
    )
    log.info(
        "Starting user import: users=%s, okapi=%s, tenant=%s, page_size=%s, max_concurrent=%s",
        len(effective_records),
        active_okapi.base_url,
        active_okapi.tenant,
        active_settings.page_size,
        active_settings.max_concurrent,
    )

    summary = asyncio.run(
        _import_async(
            effective_records,
            settings=active_settings,
            okapi=active_okapi,
            client_factory=client_factory,
        )
    )

    if summary.failures:
        log.warning("Failed users: %s", ", ".join(summary.failed_external_ids))
    if summary.orphans:
        log.error(
            "Possible remote orphans left by failed rollbacks: %s",
            ", ".join(summary.orphans),
        )
    return summary


async def _import_async(
    records: Sequence[InputRecord],
    *,
    settings: ImportSettings,
    okapi: OkapiConfig,
    client_factory: ClientFactory | None,
) -> RunSummary:
    async with OkapiClient(config=okapi, client_factory=client_factory) as directory:
        return await import_users(
            records,
            directory=directory,
            credentials=okapi.credentials,
            page_size=settings.page_size,
            max_concurrent=settings.max_concurrent,
            batch_concurrency=settings.batch_concurrency,
            policy=settings.credential_failure_policy,
        )
