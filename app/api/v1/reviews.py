"""리뷰 라우터 — 리뷰 작성, 조회, 제공자 답변.

Review Router — Writing reviews for completed bookings, public review
listings and provider responses.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import PageParams, get_page_params, get_principal
from app.database import get_db
from app.schemas.envelope import ApiResponse
from app.schemas.principal import AuthenticatedPrincipal
from app.schemas.review import ProviderResponseRequest, ReviewCreate, ReviewResponse
from app.services.review_service import review_service
from app.utils.pagination import Page

router: APIRouter = APIRouter()


@router.post("", response_model=ApiResponse, status_code=201)
async def create_review(
    request: Request,
    data: ReviewCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
) -> ApiResponse:
    """리뷰 작성 (고객) — Review a completed booking."""
    result: ReviewResponse = await review_service.create_review(db, principal, data)
    await db.commit()
    return ApiResponse.ok(request, result, "Review created successfully", 201)


@router.get("/service/{service_id}", response_model=ApiResponse)
async def get_service_reviews(
    service_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
) -> ApiResponse:
    result: Page = await review_service.get_service_reviews(db, service_id, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Reviews retrieved successfully")


@router.get("/provider/{provider_id}", response_model=ApiResponse)
async def get_provider_reviews(
    provider_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
) -> ApiResponse:
    result: Page = await review_service.get_provider_reviews(db, provider_id, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Reviews retrieved successfully")


@router.get("/customer", response_model=ApiResponse)
async def get_customer_reviews(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
    paging: Annotated[PageParams, Depends(get_page_params)],
) -> ApiResponse:
    """내가 쓴 리뷰 — Reviews written by the caller."""
    result: Page = await review_service.get_customer_reviews(db, principal, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Reviews retrieved successfully")


@router.get("/{review_id}", response_model=ApiResponse)
async def get_review(
    review_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    result: ReviewResponse = await review_service.get_review(db, review_id)
    return ApiResponse.ok(request, result, "Review retrieved successfully")


@router.put("/{review_id}/response", response_model=ApiResponse)
async def add_provider_response(
    review_id: int,
    request: Request,
    data: ProviderResponseRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
) -> ApiResponse:
    """제공자 답변 — The reviewed provider answers a review."""
    result: ReviewResponse = await review_service.add_provider_response(db, principal, review_id, data)
    await db.commit()
    return ApiResponse.ok(request, result, "Response added successfully")
