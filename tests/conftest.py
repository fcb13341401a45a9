from __future__ import annotations

import pytest

from folio_user_import.config.okapi import Credentials
from folio_user_import.domain.model import ReferenceTables
from folio_user_import.domain.session import SessionContext
from tests.support.directory import FakeUserDirectory


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(token="token-123", tenant="diku")


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username="diku_admin", password="admin", tenant="diku")  # noqa: S106


@pytest.fixture
def tables() -> ReferenceTables:
    return ReferenceTables(
        address_types={"Home": "addr-home", "Work": "addr-work"},
        patron_groups={"staff": "group-staff", "undergrad": "group-undergrad"},
    )


@pytest.fixture
def directory() -> FakeUserDirectory:
    return FakeUserDirectory(
        address_types={"Home": "addr-home", "Work": "addr-work"},
        patron_groups={"staff": "group-staff", "undergrad": "group-undergrad"},
    )
