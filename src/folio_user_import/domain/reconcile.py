"""Existence reconciliation of a batch against the remote directory."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .errors import BatchReconciliationError, RemoteCallError
from .model import PendingUpdate, ReconciliationResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .model import Batch, InputRecord, RemoteRecord
    from .ports import UserDirectory
    from .session import SessionContext

log = getLogger(__name__)

EXTERNAL_ID_FIELD = "externalSystemId"
# Page size of the existence search. Independent of the batch size: remote
# users can share an external id.
EXISTENCE_SEARCH_PAGE_SIZE = 1000
_CQL_SPECIAL_CHARACTERS = ("\\", '"', "*", "?", "^")


def escape_cql_value(value: str) -> str:
    """Escape a term for use inside a double-quoted CQL string."""

    escaped = value
    for character in _CQL_SPECIAL_CHARACTERS:
        escaped = escaped.replace(character, f"\\{character}")
    return escaped


def build_external_id_query(batch: Batch) -> str:
    """Return one CQL disjunction matching every external id of ``batch``."""

    if not batch:
        raise ValueError("Cannot build an existence query for an empty batch")
    predicates: list[str] = []
    for record in batch:
        external_id = record.external_id
        if not external_id.strip():
            raise ValueError("Cannot build an existence query for a blank external id")
        predicates.append(f'{EXTERNAL_ID_FIELD}=="{escape_cql_value(external_id)}"')
    return f"({' or '.join(predicates)})"


async def reconcile(
    batch: Batch,
    directory: UserDirectory,
    session: SessionContext,
) -> ReconciliationResult:
    """Split ``batch`` into users to update and users to create.

    One read call per batch. Any failure to build the query, call the service or
    parse its answer leaves no basis for a decision and raises
    ``BatchReconciliationError`` for the whole batch.
    """

    try:
        query = build_external_id_query(batch)
    except ValueError as exc:
        raise BatchReconciliationError(str(exc)) from exc

    try:
        existing = await directory.search_users(
            session, query=query, page_size=EXISTENCE_SEARCH_PAGE_SIZE
        )
    except RemoteCallError as exc:
        log.error("Failed to list existing users with query %s: %s", query, exc)
        raise BatchReconciliationError(f"Existence check failed: {exc}") from exc

    return match_existing(batch, existing)


def match_existing(batch: Batch, existing: Iterable[RemoteRecord]) -> ReconciliationResult:
    """Pair batch records with the remote records sharing their external id."""

    records_by_external_id: dict[str, InputRecord] = {
        record.external_id: record for record in batch
    }
    remote_ids: dict[str, str] = {}
    for remote in existing:
        if remote.external_id is None or remote.external_id not in records_by_external_id:
            continue
        if remote.external_id in remote_ids:
            log.warning(
                "Several remote users share externalSystemId %s, updating %s",
                remote.external_id,
                remote_ids[remote.external_id],
            )
            continue
        remote_ids[remote.external_id] = remote.remote_id

    to_update: list[PendingUpdate] = []
    to_create: list[InputRecord] = []
    for record in batch:
        remote_id = remote_ids.get(record.external_id)
        if remote_id is None:
            to_create.append(record)
        else:
            to_update.append(PendingUpdate(record=record, remote_id=remote_id))

    log.debug(
        "Reconciled batch of %s: to_update=%s, to_create=%s",
        len(batch),
        len(to_update),
        len(to_create),
    )
    return ReconciliationResult(to_update=tuple(to_update), to_create=tuple(to_create))
