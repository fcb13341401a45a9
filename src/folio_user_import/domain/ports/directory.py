"""Port for the remote user directory the import writes to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from folio_user_import.config.okapi import Credentials
    from folio_user_import.domain.model import RemoteRecord
    from folio_user_import.domain.session import SessionContext


@runtime_checkable
class UserDirectory(Protocol):
    """Remote operations consumed by the pipeline.

    Implementations raise ``RemoteCallError`` for every unsuccessful call so the
    pipeline sees one uniform failure signal regardless of endpoint.
    """

    async def login(self, credentials: Credentials) -> str | None: ...

    async def list_address_types(self, session: SessionContext) -> dict[str, str]: ...

    async def list_patron_groups(self, session: SessionContext) -> dict[str, str]: ...

    async def search_users(
        self, session: SessionContext, *, query: str, page_size: int
    ) -> list[RemoteRecord]:
        """Return every user matching ``query``, fetching at most ``page_size`` per request."""
        ...

    async def create_user(self, session: SessionContext, body: Mapping[str, Any]) -> None: ...

    async def update_user(
        self, session: SessionContext, user_id: str, body: Mapping[str, Any]
    ) -> None: ...

    async def delete_user(self, session: SessionContext, user_id: str) -> None: ...

    async def create_credentials(
        self, session: SessionContext, body: Mapping[str, Any]
    ) -> None: ...

    async def delete_credentials(self, session: SessionContext, username: str) -> None: ...

    async def create_permission_user(
        self, session: SessionContext, body: Mapping[str, Any]
    ) -> None: ...


__all__ = ["UserDirectory"]
