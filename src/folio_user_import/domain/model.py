"""Core types of the user import pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class InputBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)


class InputAddress(InputBaseModel):
    address_type_name: str | None = Field(default=None, alias="addressTypeId")


class InputPersonal(InputBaseModel):
    preferred_contact_type_name: str | None = Field(default=None, alias="preferredContactTypeId")
    addresses: tuple[InputAddress, ...] | None = None


class InputRecord(InputBaseModel):
    """A user record as supplied by the external source.

    Reference fields carry human-readable names in the input; the materializer
    swaps them for service ids. Fields this model does not declare are kept
    and passed through to the service untouched.
    """

    external_id: NonBlankStr = Field(alias="externalSystemId")
    username: str | None = None
    password: str | None = None
    patron_group_name: str | None = Field(default=None, alias="patronGroup")
    personal: InputPersonal | None = None

    def to_payload(self) -> dict[str, Any]:
        """Return the record as a fresh JSON-ready dict in the service's field names."""

        return self.model_dump(by_alias=True, exclude_none=True, exclude={"password"}, mode="json")


@dataclass(frozen=True, slots=True)
class RemoteRecord:
    remote_id: str
    external_id: str | None


def _frozen(values: Mapping[str, str] | None = None) -> Mapping[str, str]:
    return MappingProxyType(dict(values or {}))


PREFERRED_CONTACT_TYPES: Mapping[str, str] = _frozen(
    {
        "mail": "001",
        "email": "002",
        "text": "003",
        "phone": "004",
        "mobile": "005",
    }
)


@dataclass(frozen=True, slots=True)
class ReferenceTables:
    """Read-only snapshot of every name -> id lookup used for translation."""

    address_types: Mapping[str, str] = field(default_factory=_frozen)
    patron_groups: Mapping[str, str] = field(default_factory=_frozen)
    contact_types: Mapping[str, str] = field(default_factory=lambda: PREFERRED_CONTACT_TYPES)

    def __post_init__(self) -> None:
        object.__setattr__(self, "address_types", _frozen(self.address_types))
        object.__setattr__(self, "patron_groups", _frozen(self.patron_groups))
        object.__setattr__(self, "contact_types", _frozen(self.contact_types))


type Batch = tuple[InputRecord, ...]


@dataclass(frozen=True, slots=True)
class PendingUpdate:
    record: InputRecord
    remote_id: str


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    to_update: tuple[PendingUpdate, ...] = ()
    to_create: tuple[InputRecord, ...] = ()


@dataclass(frozen=True, slots=True)
class TranslatedRecord:
    """Materialized record ready for submission."""

    external_id: str
    username: str | None
    password: str | None
    payload: Mapping[str, Any]

    def with_remote_id(self, remote_id: str) -> TranslatedRecord:
        return replace(self, payload={**self.payload, "id": remote_id})

    def body(self) -> dict[str, Any]:
        return dict(self.payload)


class OutcomeStatus(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Outcome:
    """Final state of one input record."""

    external_id: str
    status: OutcomeStatus
    remote_id: str | None = None
    reason: str | None = None
    orphans: tuple[str, ...] = ()

    @classmethod
    def created(cls, external_id: str, remote_id: str) -> Outcome:
        return cls(external_id=external_id, status=OutcomeStatus.CREATED, remote_id=remote_id)

    @classmethod
    def updated(cls, external_id: str, remote_id: str) -> Outcome:
        return cls(external_id=external_id, status=OutcomeStatus.UPDATED, remote_id=remote_id)

    @classmethod
    def failed(
        cls,
        external_id: str,
        reason: str,
        *,
        remote_id: str | None = None,
        orphans: tuple[str, ...] = (),
    ) -> Outcome:
        return cls(
            external_id=external_id,
            status=OutcomeStatus.FAILED,
            remote_id=remote_id,
            reason=reason,
            orphans=orphans,
        )

    @property
    def ok(self) -> bool:
        return self.status is not OutcomeStatus.FAILED


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Aggregated outcome of an import run."""

    outcomes: tuple[Outcome, ...] = ()

    @property
    def created(self) -> int:
        return self._count(OutcomeStatus.CREATED)

    @property
    def updated(self) -> int:
        return self._count(OutcomeStatus.UPDATED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def failures(self) -> tuple[Outcome, ...]:
        return tuple(outcome for outcome in self.outcomes if not outcome.ok)

    @property
    def failed_external_ids(self) -> tuple[str, ...]:
        return tuple(outcome.external_id for outcome in self.failures)

    @property
    def orphans(self) -> tuple[str, ...]:
        return tuple(orphan for outcome in self.outcomes for orphan in outcome.orphans)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)


class CredentialFailurePolicy(StrEnum):
    """What to do with a freshly created user when its credential cannot be created."""

    DELETE_RECORD = "delete-record"
    KEEP_RECORD = "keep-record"
