from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from folio_user_import.adapters.input_file import parse_input_records, read_input_records
from folio_user_import.domain.errors import InputError

if TYPE_CHECKING:
    from pathlib import Path


def test_parse_input_records_keeps_unknown_fields() -> None:
    data = json.dumps(
        [
            {
                "externalSystemId": "EXT-1",
                "username": "jane",
                "barcode": "123",
                "personal": {"lastName": "Doe", "email": "jane@example.org"},
            }
        ]
    ).encode()

    records = parse_input_records(data)

    assert len(records) == 1
    payload = records[0].to_payload()
    assert payload["barcode"] == "123"
    assert payload["personal"]["email"] == "jane@example.org"


@pytest.mark.parametrize(
    "data",
    [
        b"not json",
        b'{"externalSystemId": "EXT-1"}',
        b'[{"username": "no-external-id"}]',
        b'[{"externalSystemId": "   "}]',
    ],
)
def test_parse_input_records_rejects_invalid_input(data: bytes) -> None:
    with pytest.raises(InputError):
        parse_input_records(data)


def test_parse_input_records_rejects_duplicate_external_ids() -> None:
    data = b'[{"externalSystemId": "A"}, {"externalSystemId": "B"}, {"externalSystemId": "A"}]'

    with pytest.raises(InputError, match="Duplicate externalSystemId values in input: A"):
        parse_input_records(data)


def test_read_input_records_from_file(tmp_path: Path) -> None:
    path = tmp_path / "users.json"
    path.write_text('[{"externalSystemId": "A"}, {"externalSystemId": "B"}]', encoding="utf-8")

    records = read_input_records(path)

    assert [record.external_id for record in records] == ["A", "B"]


def test_read_input_records_missing_file(tmp_path: Path) -> None:
    with pytest.raises(InputError, match="Failed to read user data"):
        read_input_records(tmp_path / "missing.json")
