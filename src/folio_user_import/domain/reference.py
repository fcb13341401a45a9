"""Reference table resolution.

Address types and patron groups are fetched once per run and frozen into a
``ReferenceTables`` snapshot. A table that cannot be fetched degrades to an
empty table: every record then loses the corresponding field, the run goes on.
"""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import RemoteCallError
from .model import ReferenceTables

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .ports import UserDirectory
    from .session import SessionContext

log = getLogger(__name__)


async def resolve_reference_tables(
    directory: UserDirectory,
    session: SessionContext,
) -> ReferenceTables:
    """Fetch address types and patron groups concurrently and snapshot them."""

    address_types, patron_groups = await asyncio.gather(
        _fetch_table("address types", lambda: directory.list_address_types(session)),
        _fetch_table("patron groups", lambda: directory.list_patron_groups(session)),
    )
    log.info(
        "Resolved reference tables: address_types=%s, patron_groups=%s",
        len(address_types),
        len(patron_groups),
    )
    return ReferenceTables(address_types=address_types, patron_groups=patron_groups)


async def _fetch_table(
    label: str,
    fetch: Callable[[], Awaitable[dict[str, str]]],
) -> dict[str, str]:
    try:
        table = await fetch()
    except RemoteCallError as exc:
        log.warning("Failed to list %s, continuing with an empty table: %s", label, exc)
        return {}
    log.debug("Listed %s successfully", label)
    return table
