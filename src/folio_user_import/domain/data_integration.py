"""Application service importing users into the remote directory."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .batching import DEFAULT_PAGE_SIZE, partition
from .executor import DEFAULT_BATCH_CONCURRENCY, DEFAULT_MAX_CONCURRENT, BatchExecutor
from .model import CredentialFailurePolicy
from .reference import resolve_reference_tables
from .session import authenticate

if TYPE_CHECKING:
    from collections.abc import Sequence

    from folio_user_import.config.okapi import Credentials

    from .model import InputRecord, RunSummary
    from .ports import UserDirectory

log = getLogger(__name__)


async def import_users(
    records: Sequence[InputRecord],
    *,
    directory: UserDirectory,
    credentials: Credentials,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    batch_concurrency: int = DEFAULT_BATCH_CONCURRENCY,
    policy: CredentialFailurePolicy = CredentialFailurePolicy.DELETE_RECORD,
) -> RunSummary:
    """Log in, resolve reference tables, then reconcile ``records`` batch by batch.

    Raises ``AuthenticationError`` before any other remote call when login fails.
    Record and batch failures end up in the returned summary instead.
    """

    batches = partition(records, page_size)
    session = await authenticate(directory, credentials)
    tables = await resolve_reference_tables(directory, session)

    log.info(
        "Importing %s users in %s batches of up to %s",
        len(records),
        len(batches),
        page_size,
    )
    executor = BatchExecutor(
        directory=directory,
        max_concurrent=max_concurrent,
        batch_concurrency=batch_concurrency,
        policy=policy,
    )
    return await executor.run(batches, session, tables)
