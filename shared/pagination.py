from typing import Generic, List, TypeVar

from fastapi import Query
from pydantic import BaseModel

T = TypeVar("T")


class PageParams:
    """Query dependency for ``?page=&limit=`` pagination."""

    default_limit = 10

    def __init__(
        self,
        page: int = Query(default=1, ge=1),
        limit: int | None = Query(default=None, ge=1, le=100),
    ):
        self.page = page
        self.limit = limit or self.default_limit

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class CatalogPageParams(PageParams):
    default_limit = 20


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class Page(BaseModel, Generic[T]):
    data: List[T]
    pagination: Pagination

    @classmethod
    def build(cls, items, total: int, params: PageParams):
        pages = (total + params.limit - 1) // params.limit
        return cls.model_validate(
            {
                "data": list(items),
                "pagination": {
                    "page": params.page,
                    "limit": params.limit,
                    "total": total,
                    "pages": pages,
                },
            },
            from_attributes=True,
        )
