"""HTTP client for the Okapi user, credential and permission APIs."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, Unpack
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from folio_user_import.adapters.http_resilience import ResilientClient
from folio_user_import.domain.errors import RemoteCallError, RemotePayloadError
from folio_user_import.domain.model import RemoteRecord

from .schema import AddressTypeCollection, UserCollection, UserGroupCollection

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from folio_user_import.adapters.http_resilience import RequestOptions
    from folio_user_import.config.http_resilience import ResilienceConfig
    from folio_user_import.config.okapi import Credentials, OkapiConfig
    from folio_user_import.domain.session import SessionContext

log = getLogger(__name__)

OKAPI_TENANT_HEADER = "X-Okapi-Tenant"
OKAPI_TOKEN_HEADER = "X-Okapi-Token"
REFERENCE_TABLE_LIMIT = 1000
_MAX_DETAIL_LENGTH = 500


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def ensure_success(response: httpx.Response, operation: str) -> httpx.Response:
    """Raise ``RemoteCallError`` unless ``response`` carries a 2xx status.

    Every call site goes through here, so all endpoints share one notion of
    success. Status code and body are kept on the error for operators.
    """

    if is_success(response.status_code):
        return response
    detail = response.text.strip()[:_MAX_DETAIL_LENGTH] or None
    log.error("%s failed with HTTP %s: %s", operation, response.status_code, detail)
    raise RemoteCallError(operation, status_code=response.status_code, detail=detail)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class OkapiClient:
    """``UserDirectory`` backed by the Okapi gateway.

    Use as an async context manager: one pooled HTTP client serves the whole run.
    """

    def __init__(
        self,
        *,
        config: OkapiConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or _default_client_factory
        self._client: ResilientClient | None = None

    async def __aenter__(self) -> OkapiClient:
        self._client = self._client_factory(self._config.resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def login(self, credentials: Credentials) -> str | None:
        response = await self._perform(
            "POST",
            "/authn/login",
            operation="Login",
            headers={OKAPI_TENANT_HEADER: credentials.tenant},
            json={
                "username": credentials.username,
                "password": credentials.password,
                "tenant": credentials.tenant,
            },
        )
        return response.headers.get(OKAPI_TOKEN_HEADER)

    async def list_address_types(self, session: SessionContext) -> dict[str, str]:
        response = await self._perform(
            "GET",
            "/addresstypes",
            operation="List address types",
            headers=_session_headers(session),
            params={"limit": REFERENCE_TABLE_LIMIT},
        )
        return _parse(response, AddressTypeCollection, "List address types").as_table()

    async def list_patron_groups(self, session: SessionContext) -> dict[str, str]:
        response = await self._perform(
            "GET",
            "/groups",
            operation="List patron groups",
            headers=_session_headers(session),
            params={"limit": REFERENCE_TABLE_LIMIT},
        )
        return _parse(response, UserGroupCollection, "List patron groups").as_table()

    async def search_users(
        self, session: SessionContext, *, query: str, page_size: int
    ) -> list[RemoteRecord]:
        """Page through ``/users`` until every match announced by ``totalRecords`` is read."""

        found: list[RemoteRecord] = []
        offset = 0
        while True:
            response = await self._perform(
                "GET",
                "/users",
                operation="List existing users",
                headers=_session_headers(session),
                params={"query": query, "limit": page_size, "offset": offset},
            )
            collection = _parse(response, UserCollection, "List existing users")
            found.extend(
                RemoteRecord(remote_id=user.id, external_id=user.external_system_id)
                for user in collection.users
            )
            offset += len(collection.users)
            if not collection.users:
                return found
            if collection.total_records is None:
                if len(collection.users) < page_size:
                    return found
            elif offset >= collection.total_records:
                return found

    async def create_user(self, session: SessionContext, body: Mapping[str, Any]) -> None:
        await self._perform(
            "POST",
            "/users",
            operation=f"Create user {body.get('externalSystemId')}",
            headers=_session_headers(session),
            json=dict(body),
        )

    async def update_user(
        self, session: SessionContext, user_id: str, body: Mapping[str, Any]
    ) -> None:
        await self._perform(
            "PUT",
            f"/users/{quote(user_id, safe='')}",
            operation=f"Update user {body.get('externalSystemId')}",
            headers=_session_headers(session),
            json=dict(body),
        )

    async def delete_user(self, session: SessionContext, user_id: str) -> None:
        await self._perform(
            "DELETE",
            f"/users/{quote(user_id, safe='')}",
            operation=f"Delete user {user_id}",
            headers=_session_headers(session),
        )

    async def create_credentials(self, session: SessionContext, body: Mapping[str, Any]) -> None:
        await self._perform(
            "POST",
            "/authn/credentials",
            operation=f"Create credentials for {body.get('username')}",
            headers=_session_headers(session),
            json=dict(body),
        )

    async def delete_credentials(self, session: SessionContext, username: str) -> None:
        await self._perform(
            "DELETE",
            f"/authn/credentials/{quote(username, safe='')}",
            operation=f"Delete credentials for {username}",
            headers=_session_headers(session),
        )

    async def create_permission_user(
        self, session: SessionContext, body: Mapping[str, Any]
    ) -> None:
        await self._perform(
            "POST",
            "/perms/users",
            operation=f"Create permissions for {body.get('username')}",
            headers=_session_headers(session),
            json=dict(body),
        )

    async def _perform(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("OkapiClient must be used as an async context manager")
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            log.error("%s failed: %s", operation, exc)
            raise RemoteCallError(operation, detail=str(exc)) from exc
        log.debug("%s -> HTTP %s", operation, response.status_code)
        return ensure_success(response, operation)


def _session_headers(session: SessionContext) -> dict[str, str]:
    return {
        OKAPI_TENANT_HEADER: session.tenant,
        OKAPI_TOKEN_HEADER: session.token,
    }


def _parse[TModel: BaseModel](
    response: httpx.Response,
    model: type[TModel],
    operation: str,
) -> TModel:
    try:
        return model.model_validate_json(response.content)
    except ValidationError as exc:
        log.error("%s returned an unexpected payload: %s", operation, exc)
        raise RemotePayloadError(
            operation,
            status_code=response.status_code,
            detail="unexpected response payload",
        ) from exc
