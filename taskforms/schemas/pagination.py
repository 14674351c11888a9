from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginationMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    limit: int
    offset: int
    has_more: bool = Field(alias="hasMore")


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a listing plus where it sits in the whole."""

    items: list[T]
    pagination: PaginationMeta

    @classmethod
    def build(cls, items: list[T], *, total: int, limit: int, offset: int) -> "PaginatedResponse[T]":
        return cls(
            items=items,
            pagination=PaginationMeta(
                total=total,
                limit=limit,
                offset=offset,
                has_more=offset + len(items) < total,
            ),
        )
