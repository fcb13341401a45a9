"""Authenticated session shared by every remote call of a run."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import AuthenticationError, RemoteCallError

if TYPE_CHECKING:
    from folio_user_import.config.okapi import Credentials

    from .ports import UserDirectory

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionContext:
    """Token and tenant stamped on outbound calls. Never refreshed mid-run."""

    token: str
    tenant: str

    def __repr__(self) -> str:
        return f"SessionContext(tenant={self.tenant!r}, token=<redacted>)"


async def authenticate(directory: UserDirectory, credentials: Credentials) -> SessionContext:
    """Exchange ``credentials`` for a session, raising ``AuthenticationError`` on any failure."""

    try:
        token = await directory.login(credentials)
    except RemoteCallError as exc:
        log.error("Failed to log in as %s: %s", credentials.username, exc)
        raise AuthenticationError(f"Login failed for {credentials.username}: {exc}") from exc

    if not token:
        log.error("Login response for %s carried no token", credentials.username)
        raise AuthenticationError(f"Login for {credentials.username} returned no token")

    log.debug("Login was successful for tenant %s", credentials.tenant)
    return SessionContext(token=token, tenant=credentials.tenant)
