"""Builders for input records."""

from __future__ import annotations

from typing import Any

from folio_user_import.domain.model import InputRecord


def make_record(external_id: str, **fields: Any) -> InputRecord:
    payload: dict[str, Any] = {
        "externalSystemId": external_id,
        "username": f"user-{external_id.lower()}",
        "active": True,
    }
    payload.update(fields)
    return InputRecord.model_validate(payload)


def make_records(*external_ids: str) -> list[InputRecord]:
    return [make_record(external_id) for external_id in external_ids]
