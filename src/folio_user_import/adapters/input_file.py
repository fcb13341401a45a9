"""Loading input user records from JSON."""

from __future__ import annotations

from collections import Counter
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from folio_user_import.domain.errors import InputError
from folio_user_import.domain.model import InputRecord

if TYPE_CHECKING:
    from pathlib import Path

log = getLogger(__name__)

_RECORDS_ADAPTER = TypeAdapter(list[InputRecord])


def parse_input_records(data: bytes | str) -> list[InputRecord]:
    """Validate a JSON array of user records.

    Raises ``InputError`` for malformed JSON, invalid records and external ids
    occurring more than once.
    """

    try:
        records = _RECORDS_ADAPTER.validate_json(data)
    except ValidationError as exc:
        raise InputError(f"Failed to parse user data as a JSON list of users: {exc}") from exc

    duplicates = sorted(
        external_id
        for external_id, count in Counter(record.external_id for record in records).items()
        if count > 1
    )
    if duplicates:
        raise InputError(f"Duplicate externalSystemId values in input: {', '.join(duplicates)}")

    log.debug("Parsed %s user records", len(records))
    return records


def read_input_records(path: Path) -> list[InputRecord]:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise InputError(f"Failed to read user data from {path}: {exc}") from exc
    return parse_input_records(data)
