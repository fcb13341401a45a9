"""Translation of input records into service payloads."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from .model import TranslatedRecord

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .model import InputRecord, ReferenceTables

log = getLogger(__name__)


def materialize(record: InputRecord, tables: ReferenceTables) -> TranslatedRecord:
    """Return ``record`` with reference names replaced by service ids.

    Unknown patron groups and contact types are dropped from the payload.
    Addresses without a known address type are left out entirely. Never fails
    and never mutates ``record``.
    """

    payload = record.to_payload()
    payload.pop("id", None)

    _translate_field(payload, "patronGroup", tables.patron_groups)

    personal = payload.get("personal")
    if isinstance(personal, dict):
        personal_payload = cast(dict[str, Any], personal)
        _translate_field(personal_payload, "preferredContactTypeId", tables.contact_types)
        addresses = personal_payload.get("addresses")
        if isinstance(addresses, list) and addresses:
            personal_payload["addresses"] = _translate_addresses(
                record.external_id,
                cast(list[dict[str, Any]], addresses),
                tables.address_types,
            )

    return TranslatedRecord(
        external_id=record.external_id,
        username=record.username,
        password=record.password,
        payload=payload,
    )


def _translate_field(payload: dict[str, Any], key: str, table: Mapping[str, str]) -> None:
    name = payload.get(key)
    if name is None:
        return
    resolved = table.get(str(name))
    if resolved is None:
        del payload[key]
    else:
        payload[key] = resolved


def _translate_addresses(
    external_id: str,
    addresses: list[dict[str, Any]],
    address_types: Mapping[str, str],
) -> list[dict[str, Any]]:
    translated: list[dict[str, Any]] = []
    for address in addresses:
        name = address.get("addressTypeId")
        type_id = address_types.get(str(name)) if name is not None else None
        if type_id is None:
            log.warning(
                "Address of user %s has no valid address type %r, skipping it",
                external_id,
                name,
            )
            continue
        translated.append({**address, "addressTypeId": type_id})
    return translated
