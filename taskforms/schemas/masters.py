from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

FixedMasterType = Literal["departments", "categories", "statuses", "priorities", "taskTypes"]


class LookupOption(BaseModel):
    value: str
    label: str


class MasterListItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    value: str = Field(min_length=1, max_length=200)
    item_label: str = Field(alias="itemLabel", min_length=1, max_length=200)


class MasterListCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    items: list[MasterListItem] = Field(default_factory=list)


class MasterListOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    items: list[MasterListItem]
    created: int
    last_updated: int = Field(alias="lastUpdated")


class FixedMasterCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class FixedMasterOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    master_type: str = Field(alias="masterType")
    name: str
    created: int
    last_updated: int = Field(alias="lastUpdated")
