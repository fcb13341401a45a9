"""Batch execution and outcome aggregation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .creation import CompensatingCreator
from .errors import BatchReconciliationError
from .materialize import materialize
from .model import CredentialFailurePolicy, Outcome, OutcomeStatus, RunSummary
from .reconcile import reconcile
from .update import update_user

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from .model import Batch, ReferenceTables
    from .ports import UserDirectory
    from .session import SessionContext

log = getLogger(__name__)

DEFAULT_MAX_CONCURRENT = 5
DEFAULT_BATCH_CONCURRENCY = 1


@dataclass(slots=True)
class BatchExecutor:
    """Drive reconciliation and per-record operations for every batch.

    ``max_concurrent`` bounds the record operations in flight across the whole
    run, ``batch_concurrency`` the number of batches worked on at once. Batch
    tasks hand their outcomes back instead of writing to shared state; the
    summary is assembled once all of them are done.
    """

    directory: UserDirectory
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    batch_concurrency: int = DEFAULT_BATCH_CONCURRENCY
    policy: CredentialFailurePolicy = CredentialFailurePolicy.DELETE_RECORD

    async def run(
        self,
        batches: Sequence[Batch],
        session: SessionContext,
        tables: ReferenceTables,
    ) -> RunSummary:
        if self.max_concurrent <= 0:
            raise ValueError(f"max_concurrent must be positive, got {self.max_concurrent}")
        if self.batch_concurrency <= 0:
            raise ValueError(f"batch_concurrency must be positive, got {self.batch_concurrency}")

        batch_slots = asyncio.Semaphore(self.batch_concurrency)
        record_slots = asyncio.Semaphore(self.max_concurrent)
        total = len(batches)

        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(
                    self._run_batch(
                        batch,
                        label=f"{index}/{total}",
                        session=session,
                        tables=tables,
                        batch_slots=batch_slots,
                        record_slots=record_slots,
                    )
                )
                for index, batch in enumerate(batches, start=1)
            ]

        summary = RunSummary(outcomes=tuple(outcome for task in tasks for outcome in task.result()))
        log.info(
            "Import has finished: total=%s, created=%s, updated=%s, failed=%s",
            summary.total,
            summary.created,
            summary.updated,
            summary.failed,
        )
        return summary

    async def _run_batch(
        self,
        batch: Batch,
        *,
        label: str,
        session: SessionContext,
        tables: ReferenceTables,
        batch_slots: asyncio.Semaphore,
        record_slots: asyncio.Semaphore,
    ) -> list[Outcome]:
        async with batch_slots:
            try:
                result = await reconcile(batch, self.directory, session)
            except BatchReconciliationError as exc:
                log.error(
                    "Failed to reconcile user batch %s, failing all its users: %s", label, exc
                )
                outcomes = [
                    Outcome.failed(record.external_id, f"batch reconciliation failed: {exc}")
                    for record in batch
                ]
                for outcome in outcomes:
                    _log_outcome(outcome)
                return outcomes

            creator = CompensatingCreator(
                directory=self.directory,
                session=session,
                policy=self.policy,
            )
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(
                        _guarded(
                            pending.record.external_id,
                            lambda pending=pending: update_user(
                                materialize(pending.record, tables),
                                pending.remote_id,
                                self.directory,
                                session,
                            ),
                            record_slots,
                        )
                    )
                    for pending in result.to_update
                ]
                tasks.extend(
                    group.create_task(
                        _guarded(
                            record.external_id,
                            lambda record=record: creator.create(materialize(record, tables)),
                            record_slots,
                        )
                    )
                    for record in result.to_create
                )

        by_external_id = {task.result().external_id: task.result() for task in tasks}
        outcomes = [by_external_id[record.external_id] for record in batch]
        failed = sum(1 for outcome in outcomes if not outcome.ok)
        log.info(
            "Imported user batch %s: %s users, %s failed",
            label,
            len(outcomes),
            failed,
        )
        return outcomes


async def _guarded(
    external_id: str,
    operation: Callable[[], Awaitable[Outcome]],
    slots: asyncio.Semaphore,
) -> Outcome:
    async with slots:
        try:
            outcome = await operation()
        except Exception as exc:  # noqa: BLE001
            log.exception("Unexpected error while importing user %s", external_id)
            outcome = Outcome.failed(external_id, f"unexpected error: {exc}")
    _log_outcome(outcome)
    return outcome


def _log_outcome(outcome: Outcome) -> None:
    if outcome.status is OutcomeStatus.FAILED:
        log.warning("User %s failed: %s", outcome.external_id, outcome.reason)
        return
    log.info("User %s %s (%s)", outcome.external_id, outcome.status, outcome.remote_id)
