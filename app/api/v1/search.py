"""검색 라우터 — 복합 필터 서비스 검색, 추천/인기 서비스.

Search Router — Combined-filter service search plus featured and popular
listings. Every filter is applied in SQL before pagination.
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import PageParams, get_page_params
from app.database import get_db
from app.schemas.envelope import ApiResponse
from app.services.listing_service import listing_service
from app.utils.pagination import Page

router: APIRouter = APIRouter()


@router.get("", response_model=ApiResponse)
async def search(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    q: Annotated[str | None, Query(description="제목/설명 검색어")] = None,
    category_id: Annotated[int | None, Query(alias="categoryId")] = None,
    min_price: Annotated[Decimal | None, Query(alias="minPrice", ge=0)] = None,
    max_price: Annotated[Decimal | None, Query(alias="maxPrice", ge=0)] = None,
    min_rating: Annotated[Decimal | None, Query(alias="minRating", ge=0, le=5)] = None,
    location: Annotated[str | None, Query(description="서비스 지역 검색어")] = None,
) -> ApiResponse:
    """서비스 검색 — Search active, available services.

    Filters: keyword ``q`` (title/description), ``categoryId``, base price
    range ``minPrice``..``maxPrice``, ``minRating`` and ``location``
    (service area substring).
    """
    result: Page = await listing_service.search(
        db,
        keyword=q,
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        min_rating=min_rating,
        location=location,
        page=paging.page,
        size=paging.size,
    )
    return ApiResponse.ok(request, result, "Search completed successfully")


@router.get("/featured", response_model=ApiResponse)
async def featured(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
) -> ApiResponse:
    result: Page = await listing_service.featured_services(db, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Featured services retrieved successfully")


@router.get("/popular", response_model=ApiResponse)
async def popular(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
) -> ApiResponse:
    """인기 서비스 — Highest rated first, then most reviewed."""
    result: Page = await listing_service.popular_services(db, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Popular services retrieved successfully")
