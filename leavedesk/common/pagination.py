"""Page/size query parameters and the ``{"data", "meta"}`` list envelope."""


import math
from typing import Any, Generic, Optional, Sequence, TypeVar

from fastapi import Query
from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from leavedesk.common.filters import apply_sorting

T = TypeVar("T")


class PaginationParams:
    """Query-string paging for list routes (``page``, ``page_size``, ``sort``)."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="1-based page index"),
        page_size: int = Query(
            default=DEFAULT_PAGE_SIZE,
            ge=1,
            le=MAX_PAGE_SIZE,
            description=f"Rows per page, at most {MAX_PAGE_SIZE}",
        ),
        sort: Optional[str] = Query(
            default=None,
            description='Column to order by, "-" prefix for newest/largest first',
        ),
    ) -> None:
        self.page = page
        self.page_size = page_size
        self.sort = sort

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class PaginationMeta(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, params: PaginationParams, total: int) -> "PaginationMeta":
        pages = math.ceil(total / params.page_size) if total else 0
        return cls(
            page=params.page,
            page_size=params.page_size,
            total=total,
            total_pages=pages,
            has_next=params.page < pages,
            has_prev=params.page > 1,
        )


class PaginatedResponse(BaseModel, Generic[T]):
    data: Sequence[T]
    meta: PaginationMeta


async def _count_rows(session: AsyncSession, query: Select) -> int:
    # Wrapping in a subquery keeps eager-load options off the COUNT.
    wrapped = select(func.count()).select_from(query.order_by(None).subquery())
    return (await session.execute(wrapped)).scalar_one()


async def paginate(
    session: AsyncSession,
    query: Select,
    params: PaginationParams,
    *,
    model: Any,
) -> PaginatedResponse:
    """Run one page of *query* and report the total across all pages.

    A ``params.sort`` naming a mapped column of *model* takes precedence
    over the query's own ORDER BY.
    """
    if params.sort:
        query = apply_sorting(query.order_by(None), model, params.sort)

    total = await _count_rows(session, query)
    page = await session.execute(query.offset(params.offset).limit(params.page_size))

    return PaginatedResponse(
        data=page.scalars().all(),
        meta=PaginationMeta.build(params, total),
    )
