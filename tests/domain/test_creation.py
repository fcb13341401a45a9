from __future__ import annotations

import asyncio
import logging

import pytest

from folio_user_import.domain.creation import CompensatingCreator, create_user
from folio_user_import.domain.materialize import materialize
from folio_user_import.domain.model import (
    CredentialFailurePolicy,
    OutcomeStatus,
    ReferenceTables,
    TranslatedRecord,
)
from folio_user_import.domain.session import SessionContext
from tests.support.directory import FakeUserDirectory
from tests.support.records import make_record


def _translated(external_id: str = "EXT-1") -> TranslatedRecord:
    return materialize(make_record(external_id, password="pw"), ReferenceTables())  # noqa: S106


def _creator(
    directory: FakeUserDirectory,
    session: SessionContext,
    policy: CredentialFailurePolicy = CredentialFailurePolicy.DELETE_RECORD,
) -> CompensatingCreator:
    return CompensatingCreator(
        directory=directory,
        session=session,
        policy=policy,
        id_factory=lambda: "new-user-id",
    )


def test_create_runs_all_three_steps(
    directory: FakeUserDirectory, session: SessionContext
) -> None:
    outcome = asyncio.run(_creator(directory, session).create(_translated()))

    assert outcome.status is OutcomeStatus.CREATED
    assert outcome.remote_id == "new-user-id"
    assert directory.operations() == [
        "create_user",
        "create_credentials",
        "create_permission_user",
    ]
    assert directory.bodies["create_user"][0]["id"] == "new-user-id"
    assert "password" not in directory.bodies["create_user"][0]
    assert directory.bodies["create_credentials"][0] == {
        "username": "user-ext-1",
        "userId": "new-user-id",
        "password": "pw",
    }
    assert directory.bodies["create_permission_user"][0] == {
        "userId": "new-user-id",
        "username": "user-ext-1",
        "permissions": [],
    }


def test_create_generates_fresh_id_per_attempt(
    directory: FakeUserDirectory, session: SessionContext
) -> None:
    first = asyncio.run(create_user(_translated("A"), directory, session))
    second = asyncio.run(create_user(_translated("B"), directory, session))

    assert first.remote_id
    assert second.remote_id
    assert first.remote_id != second.remote_id


def test_record_failure_has_nothing_to_unwind(
    directory: FakeUserDirectory, session: SessionContext
) -> None:
    directory.failing.add("create_user")

    outcome = asyncio.run(_creator(directory, session).create(_translated()))

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.reason is not None
    assert outcome.reason.startswith("creating_record")
    assert directory.operations() == ["create_user"]


def test_credential_failure_deletes_record_once(
    directory: FakeUserDirectory, session: SessionContext
) -> None:
    directory.failing.add("create_credentials")

    outcome = asyncio.run(_creator(directory, session).create(_translated()))

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.orphans == ()
    assert directory.operations() == ["create_user", "create_credentials", "delete_user"]
    assert directory.calls_for("delete_user") == ["new-user-id"]


def test_credential_failure_can_keep_record(
    directory: FakeUserDirectory,
    session: SessionContext,
    caplog: pytest.LogCaptureFixture,
) -> None:
    directory.failing.add("create_credentials")

    with caplog.at_level(logging.ERROR):
        outcome = asyncio.run(
            _creator(directory, session, CredentialFailurePolicy.KEEP_RECORD).create(_translated())
        )

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.orphans == ("user:new-user-id",)
    assert "delete_user" not in directory.operations()
    assert "orphan" in caplog.text


def test_permission_failure_unwinds_credential_then_record(
    directory: FakeUserDirectory, session: SessionContext
) -> None:
    directory.failing.add("create_permission_user")

    outcome = asyncio.run(_creator(directory, session).create(_translated()))

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.reason is not None
    assert outcome.reason.startswith("applying_permissions")
    assert directory.operations() == [
        "create_user",
        "create_credentials",
        "create_permission_user",
        "delete_credentials",
        "delete_user",
    ]
    assert directory.calls_for("delete_credentials") == ["user-ext-1"]


def test_failed_rollback_is_reported_as_orphan(
    directory: FakeUserDirectory,
    session: SessionContext,
    caplog: pytest.LogCaptureFixture,
) -> None:
    directory.failing.update({"create_permission_user", "delete_user"})

    with caplog.at_level(logging.ERROR):
        outcome = asyncio.run(_creator(directory, session).create(_translated()))

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.orphans == ("user:new-user-id",)
    assert directory.operations()[-2:] == ["delete_credentials", "delete_user"]
    assert "remote orphan user:new-user-id may remain" in caplog.text


def test_unexpected_error_still_unwinds_created_record(
    directory: FakeUserDirectory, session: SessionContext
) -> None:
    directory.crashing.add("create_credentials")

    outcome = asyncio.run(_creator(directory, session).create(_translated()))

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.reason is not None
    assert outcome.reason.startswith("creating_credential: unexpected error")
    assert directory.calls_for("delete_user") == ["new-user-id"]
    assert outcome.orphans == ()


def test_unexpected_rollback_error_is_reported_as_orphan(
    directory: FakeUserDirectory, session: SessionContext
) -> None:
    directory.failing.add("create_permission_user")
    directory.crashing.add("delete_credentials")

    outcome = asyncio.run(_creator(directory, session).create(_translated()))

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.orphans == ("credential:user-ext-1",)
    assert directory.calls_for("delete_user") == ["new-user-id"]
