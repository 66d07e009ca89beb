"""페이지네이션 유틸리티 모듈.

Pagination utility module for SQLAlchemy async queries.
Pages are 0-based: ``page=0`` is the first page.
"""

import math
from typing import Any, Sequence

from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings


class Page(BaseModel):
    """페이지네이션 결과 모델.

    Pagination result returned inside the response envelope.

    Attributes:
        content: 현재 페이지 항목 목록 (Items for the current page)
        page: 현재 페이지 번호, 0부터 시작 (Current page number, 0-based)
        size: 페이지 크기 (Requested page size)
        total_elements: 전체 항목 수 (Total count across all pages)
        total_pages: 전체 페이지 수 (Total number of pages)
        first: 첫 페이지 여부 (Whether this is the first page)
        last: 마지막 페이지 여부 (Whether this is the last page)
    """

    content: list[Any]
    page: int
    size: int
    total_elements: int
    total_pages: int
    first: bool
    last: bool

    @classmethod
    def build(cls, content: Sequence[Any], total: int, page: int, size: int) -> "Page":
        """항목 목록과 전체 개수로 페이지 객체를 만듭니다."""
        total_pages: int = math.ceil(total / size) if size > 0 else 0
        return cls(
            content=list(content),
            page=page,
            size=size,
            total_elements=total,
            total_pages=total_pages,
            first=page == 0,
            last=page >= total_pages - 1,
        )


def clamp_page_params(page: int, size: int) -> tuple[int, int]:
    """음수 페이지와 과도한 페이지 크기를 보정합니다."""
    page = max(page, 0)
    size = min(max(size, 1), settings.MAX_PAGE_SIZE)
    return page, size


async def paginate(
    db: AsyncSession,
    query: Select[Any],
    page: int = 0,
    size: int = 10,
) -> tuple[Sequence[Any], int]:
    """SQLAlchemy 쿼리에 대한 페이지네이션을 수행합니다.

    Execute a paginated query, returning the page items and the total count.
    Runs one COUNT over the query as a subquery and one OFFSET/LIMIT fetch.

    Args:
        db: 비동기 DB 세션 (Async database session)
        query: SQLAlchemy Select 쿼리 (Base query to paginate)
        page: 요청 페이지 번호, 0부터 시작 (Page number, 0-based)
        size: 페이지당 항목 수 (Items per page)

    Returns:
        tuple[Sequence[Any], int]: (항목 목록, 전체 개수)
    """
    page, size = clamp_page_params(page, size)
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total: int = (await db.execute(count_query)).scalar() or 0

    result = await db.execute(query.offset(page * size).limit(size))
    items: Sequence[Any] = result.scalars().all()

    return items, total
