"""Multi-step user creation with best-effort compensation.

Creating a user takes three remote calls: the user record, its login
credential and an (empty) permission set. When a later step fails the steps
already done are undone in reverse order. Undo calls are best effort: if one of
them fails the remote side keeps an orphan, which is logged and reported on the
outcome so an operator can clean it up.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import uuid4

from .errors import RemoteCallError
from .model import CredentialFailurePolicy, Outcome

if TYPE_CHECKING:
    from .model import TranslatedRecord
    from .ports import UserDirectory
    from .session import SessionContext

log = getLogger(__name__)


def _new_user_id() -> str:
    return str(uuid4())


class CreationStep(StrEnum):
    CREATING_RECORD = "creating_record"
    CREATING_CREDENTIAL = "creating_credential"
    APPLYING_PERMISSIONS = "applying_permissions"


@dataclass(frozen=True, slots=True)
class _Undo:
    label: str
    orphan: str
    run: Callable[[], Awaitable[None]]


@dataclass(slots=True)
class CompensatingCreator:
    """Run the creation steps for one user and unwind them on failure."""

    directory: UserDirectory
    session: SessionContext
    policy: CredentialFailurePolicy = CredentialFailurePolicy.DELETE_RECORD
    id_factory: Callable[[], str] = field(default=_new_user_id)

    async def create(self, record: TranslatedRecord) -> Outcome:
        user_id = self.id_factory()
        prepared = record.with_remote_id(user_id)
        undo_stack: list[_Undo] = []
        step = CreationStep.CREATING_RECORD

        try:
            await self.directory.create_user(self.session, prepared.body())
            log.debug("Created user %s as %s", record.external_id, user_id)
            undo_stack.append(
                _Undo(
                    label="user",
                    orphan=f"user:{user_id}",
                    run=lambda: self.directory.delete_user(self.session, user_id),
                )
            )

            step = CreationStep.CREATING_CREDENTIAL
            await self.directory.create_credentials(
                self.session, _credentials_body(prepared, user_id)
            )
            username = prepared.username or ""
            undo_stack.append(
                _Undo(
                    label="credential",
                    orphan=f"credential:{username}",
                    run=lambda: self.directory.delete_credentials(self.session, username),
                )
            )

            step = CreationStep.APPLYING_PERMISSIONS
            await self.directory.create_permission_user(
                self.session, _permissions_body(prepared, user_id)
            )
        except RemoteCallError as exc:
            log.warning("Failed to create user %s while %s: %s", record.external_id, step, exc)
            if step is CreationStep.CREATING_CREDENTIAL and self.policy is (
                CredentialFailurePolicy.KEEP_RECORD
            ):
                log.error(
                    "Keeping user %s (%s) without credential; remote orphan remains",
                    record.external_id,
                    user_id,
                )
                orphans = tuple(undo.orphan for undo in undo_stack)
            else:
                orphans = await self._unwind(record.external_id, undo_stack)
            return Outcome.failed(
                record.external_id,
                f"{step}: {exc}",
                remote_id=user_id,
                orphans=orphans,
            )
        except Exception as exc:
            log.exception(
                "Unexpected error creating user %s while %s", record.external_id, step
            )
            orphans = await self._unwind(record.external_id, undo_stack)
            return Outcome.failed(
                record.external_id,
                f"{step}: unexpected error: {exc}",
                remote_id=user_id,
                orphans=orphans,
            )

        log.debug("Applied permission set to user %s", record.external_id)
        return Outcome.created(record.external_id, user_id)

    async def _unwind(self, external_id: str, undo_stack: list[_Undo]) -> tuple[str, ...]:
        orphans: list[str] = []
        while undo_stack:
            undo = undo_stack.pop()
            try:
                await undo.run()
            except Exception as exc:  # noqa: BLE001
                log.error(
                    "Rollback of %s for user %s failed, remote orphan %s may remain: %s",
                    undo.label,
                    external_id,
                    undo.orphan,
                    exc,
                )
                orphans.append(undo.orphan)
            else:
                log.info("Rolled back %s for user %s", undo.label, external_id)
        return tuple(orphans)


def _credentials_body(record: TranslatedRecord, user_id: str) -> dict[str, object]:
    return {
        "username": record.username,
        "userId": user_id,
        "password": record.password or "",
    }


def _permissions_body(record: TranslatedRecord, user_id: str) -> dict[str, object]:
    return {
        "userId": user_id,
        "username": record.username,
        "permissions": [],
    }


async def create_user(
    record: TranslatedRecord,
    directory: UserDirectory,
    session: SessionContext,
    policy: CredentialFailurePolicy = CredentialFailurePolicy.DELETE_RECORD,
) -> Outcome:
    """Create ``record`` remotely, returning ``created`` or a compensated ``failed``."""

    return await CompensatingCreator(directory=directory, session=session, policy=policy).create(
        record
    )
