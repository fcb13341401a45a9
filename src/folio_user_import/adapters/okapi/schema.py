"""Pydantic models describing the Okapi payloads read by the importer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OkapiBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AddressTypePayload(OkapiBaseModel):
    id: str
    address_type: str = Field(alias="addressType")


class AddressTypeCollection(OkapiBaseModel):
    address_types: list[AddressTypePayload] = Field(alias="addressTypes")
    total_records: int | None = Field(default=None, alias="totalRecords")

    def as_table(self) -> dict[str, str]:
        return {item.address_type: item.id for item in self.address_types}


class UserGroupPayload(OkapiBaseModel):
    id: str
    group: str


class UserGroupCollection(OkapiBaseModel):
    usergroups: list[UserGroupPayload]
    total_records: int | None = Field(default=None, alias="totalRecords")

    def as_table(self) -> dict[str, str]:
        return {item.group: item.id for item in self.usergroups}


class UserPayload(OkapiBaseModel):
    id: str
    external_system_id: str | None = Field(default=None, alias="externalSystemId")
    username: str | None = None


class UserCollection(OkapiBaseModel):
    users: list[UserPayload]
    total_records: int | None = Field(default=None, alias="totalRecords")
