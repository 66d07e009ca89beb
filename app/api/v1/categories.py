"""카테고리 라우터 — 카테고리 트리 조회 및 관리자 관리.

Category Router — Public browsing of the category tree and admin-only
create/update.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from app.schemas.envelope import ApiResponse
from app.services.category_service import category_service

router: APIRouter = APIRouter()


@router.get("", response_model=ApiResponse)
async def list_categories(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    """활성 카테고리 전체 — All active categories in display order."""
    result: list[CategoryResponse] = await category_service.list_categories(db)
    return ApiResponse.ok(request, result, "Categories retrieved successfully")


@router.get("/top-level", response_model=ApiResponse)
async def list_top_level(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    result: list[CategoryResponse] = await category_service.list_top_level(db)
    return ApiResponse.ok(request, result, "Top-level categories retrieved successfully")


@router.get("/slug/{slug}", response_model=ApiResponse)
async def get_category_by_slug(
    slug: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    result: CategoryResponse = await category_service.get_category_by_slug(db, slug)
    return ApiResponse.ok(request, result, "Category retrieved successfully")


@router.get("/{category_id}", response_model=ApiResponse)
async def get_category(
    category_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    result: CategoryResponse = await category_service.get_category(db, category_id)
    return ApiResponse.ok(request, result, "Category retrieved successfully")


@router.get("/{category_id}/subcategories", response_model=ApiResponse)
async def list_subcategories(
    category_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    """하위 카테고리 — Direct children of a category."""
    result: list[CategoryResponse] = await category_service.list_subcategories(db, category_id)
    return ApiResponse.ok(request, result, "Subcategories retrieved successfully")


@router.post("", response_model=ApiResponse, status_code=201)
async def create_category(
    request: Request,
    data: CategoryCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    """카테고리 생성 (관리자) — Create a category."""
    result: CategoryResponse = await category_service.create_category(db, data)
    await db.commit()
    return ApiResponse.ok(request, result, "Category created successfully", 201)


@router.put("/{category_id}", response_model=ApiResponse)
async def update_category(
    category_id: int,
    request: Request,
    data: CategoryUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    """카테고리 수정 (관리자) — Update a category."""
    result: CategoryResponse = await category_service.update_category(db, category_id, data)
    await db.commit()
    return ApiResponse.ok(request, result, "Category updated successfully")
