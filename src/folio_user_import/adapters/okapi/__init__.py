"""Public interface for the Okapi adapter."""

from __future__ import annotations

from .client import OKAPI_TOKEN_HEADER, OkapiClient, ensure_success, is_success
from .schema import AddressTypeCollection, UserCollection, UserGroupCollection

__all__ = [
    "OKAPI_TOKEN_HEADER",
    "AddressTypeCollection",
    "OkapiClient",
    "UserCollection",
    "UserGroupCollection",
    "ensure_success",
    "is_success",
]
