"""Single-call update of users that already exist remotely."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .errors import RemoteCallError
from .model import Outcome

if TYPE_CHECKING:
    from .model import TranslatedRecord
    from .ports import UserDirectory
    from .session import SessionContext

log = getLogger(__name__)


async def update_user(
    record: TranslatedRecord,
    remote_id: str,
    directory: UserDirectory,
    session: SessionContext,
) -> Outcome:
    """Replace the remote user ``remote_id`` with ``record``.

    A failed call only fails this record; it is never raised to the batch.
    """

    prepared = record.with_remote_id(remote_id)
    try:
        await directory.update_user(session, remote_id, prepared.body())
    except RemoteCallError as exc:
        log.warning("Failed to update user %s (%s): %s", record.external_id, remote_id, exc)
        log.debug("User data: %s", prepared.payload)
        return Outcome.failed(record.external_id, str(exc), remote_id=remote_id)
    return Outcome.updated(record.external_id, remote_id)
