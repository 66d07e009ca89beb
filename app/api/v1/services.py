"""서비스 라우터 — 서비스 목록 조회 및 제공자 서비스 관리.

Service Router — Public listing browse endpoints and provider-owned
create/update/delete.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import PageParams, get_page_params, get_principal
from app.database import get_db
from app.schemas.envelope import ApiResponse
from app.schemas.principal import AuthenticatedPrincipal
from app.schemas.service import ServiceCreate, ServiceResponse, ServiceUpdate
from app.services.listing_service import listing_service
from app.utils.pagination import Page

router: APIRouter = APIRouter()


@router.get("", response_model=ApiResponse)
async def list_services(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
) -> ApiResponse:
    """예약 가능한 서비스 목록 (최신순) — Active and available listings, newest first."""
    result: Page = await listing_service.list_services(db, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Services retrieved successfully")


@router.get("/category/{category_id}", response_model=ApiResponse)
async def list_by_category(
    category_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
) -> ApiResponse:
    result: Page = await listing_service.list_by_category(db, category_id, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Services retrieved successfully")


@router.get("/search", response_model=ApiResponse)
async def search_services(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    q: Annotated[str, Query(min_length=1, description="제목/설명 검색어")],
) -> ApiResponse:
    """키워드 검색 — Title or description substring match."""
    result: Page = await listing_service.search_services(db, q, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Search completed successfully")


@router.get("/featured", response_model=ApiResponse)
async def featured_services(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
) -> ApiResponse:
    result: Page = await listing_service.featured_services(db, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Featured services retrieved successfully")


@router.get("/slug/{slug}", response_model=ApiResponse)
async def get_service_by_slug(
    slug: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    result: ServiceResponse = await listing_service.get_service_by_slug(db, slug)
    return ApiResponse.ok(request, result, "Service retrieved successfully")


@router.get("/provider/{provider_id}", response_model=ApiResponse)
async def list_by_provider(
    provider_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
) -> ApiResponse:
    result: Page = await listing_service.list_by_provider(db, provider_id, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Services retrieved successfully")


@router.get("/{service_id}", response_model=ApiResponse)
async def get_service(
    service_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    result: ServiceResponse = await listing_service.get_service(db, service_id)
    return ApiResponse.ok(request, result, "Service retrieved successfully")


@router.post("", response_model=ApiResponse, status_code=201)
async def create_service(
    request: Request,
    data: ServiceCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
) -> ApiResponse:
    """서비스 등록 (제공자) — Create a listing owned by the caller."""
    result: ServiceResponse = await listing_service.create_service(db, principal, data)
    await db.commit()
    return ApiResponse.ok(request, result, "Service created successfully", 201)


@router.put("/{service_id}", response_model=ApiResponse)
async def update_service(
    service_id: int,
    request: Request,
    data: ServiceUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
) -> ApiResponse:
    """서비스 수정 (소유 제공자) — Owner-only update."""
    result: ServiceResponse = await listing_service.update_service(db, principal, service_id, data)
    await db.commit()
    return ApiResponse.ok(request, result, "Service updated successfully")


@router.delete("/{service_id}", response_model=ApiResponse)
async def delete_service(
    service_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
) -> ApiResponse:
    """서비스 삭제 (소유 제공자, 소프트 삭제) — Owner-only soft delete."""
    await listing_service.delete_service(db, principal, service_id)
    await db.commit()
    return ApiResponse.ok(request, None, "Service deleted successfully")
