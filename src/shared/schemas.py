"""Common Pydantic schemas."""

from __future__ import annotations

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

T = TypeVar("T")


class ResponseEnvelope(BaseModel, Generic[T]):
    """Standard API envelope."""

    success: bool = True
    data: T | None = None
    message: str | None = None


class PaginationMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    page: int
    limit: int

    @computed_field(alias="totalPages")  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class Page(BaseModel, Generic[T]):
    """A bounded result slice plus total-count metadata."""

    data: list[T] = Field(default_factory=list)
    pagination: PaginationMeta


class PaginatedEnvelope(BaseModel, Generic[T]):
    success: bool = True
    message: str | None = None
    data: list[T] = Field(default_factory=list)
    pagination: PaginationMeta

    @classmethod
    def from_page(cls, page: Page[T], message: str | None = None) -> PaginatedEnvelope[T]:
        return cls(data=page.data, pagination=page.pagination, message=message)
