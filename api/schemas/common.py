# api/schemas/common.py
from datetime import datetime
from typing import Annotated, Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from core.utils.csv_export import format_timestamp

# Naive UTC datetimes rendered as 2024-01-31T09:30:00.000Z
UtcDateTime = Annotated[datetime, PlainSerializer(format_timestamp, return_type=str, when_used="json")]


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class PageMeta(CamelModel):
    total: int
    limit: int
    offset: int
    has_next: bool
    has_previous: bool

    @classmethod
    def build(cls, total: int, limit: int, offset: int) -> "PageMeta":
        return cls(
            total=total,
            limit=limit,
            offset=offset,
            has_next=offset + limit < total,
            has_previous=offset > 0
        )


DataT = TypeVar("DataT")


class DataResponse(BaseModel, Generic[DataT]):
    data: DataT


class PaginatedResponse(BaseModel, Generic[DataT]):
    """
    Generic schema for paginated API responses.
    """
    data: List[DataT]
    meta: PageMeta
