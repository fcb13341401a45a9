from __future__ import annotations

import asyncio
import logging

import pytest

from folio_user_import.domain.model import PREFERRED_CONTACT_TYPES
from folio_user_import.domain.reference import resolve_reference_tables
from folio_user_import.domain.session import SessionContext
from tests.support.directory import FakeUserDirectory


def test_resolve_reference_tables_snapshots_both_tables(
    directory: FakeUserDirectory, session: SessionContext
) -> None:
    tables = asyncio.run(resolve_reference_tables(directory, session))

    assert dict(tables.address_types) == {"Home": "addr-home", "Work": "addr-work"}
    assert dict(tables.patron_groups) == {"staff": "group-staff", "undergrad": "group-undergrad"}
    assert dict(tables.contact_types) == dict(PREFERRED_CONTACT_TYPES)
    assert sorted(directory.operations()) == ["list_address_types", "list_patron_groups"]


def test_failed_table_degrades_to_empty(
    directory: FakeUserDirectory,
    session: SessionContext,
    caplog: pytest.LogCaptureFixture,
) -> None:
    directory.failing.add("list_patron_groups")

    with caplog.at_level(logging.WARNING):
        tables = asyncio.run(resolve_reference_tables(directory, session))

    assert dict(tables.patron_groups) == {}
    assert dict(tables.address_types) == {"Home": "addr-home", "Work": "addr-work"}
    assert "Failed to list patron groups" in caplog.text


def test_reference_tables_are_read_only(
    directory: FakeUserDirectory, session: SessionContext
) -> None:
    tables = asyncio.run(resolve_reference_tables(directory, session))

    with pytest.raises(TypeError):
        tables.patron_groups["new"] = "id"  # type: ignore[index]
