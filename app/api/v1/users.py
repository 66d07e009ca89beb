"""사용자 라우터 — 프로필, 사용자 조회 및 관리자 사용자 관리.

User Router — Own profile, user directory lookups and admin account
management. Role requirements live in ``app.api.policy``.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import PageParams, get_page_params, get_principal
from app.config import settings
from app.database import get_db
from app.schemas.envelope import ApiResponse
from app.schemas.principal import AuthenticatedPrincipal
from app.schemas.user import (
    AvailabilityResponse,
    ChangePasswordRequest,
    UpdateProfileRequest,
    UserResponse,
)
from app.services.user_service import user_service
from app.utils.pagination import Page

router: APIRouter = APIRouter()


@router.get("/profile", response_model=ApiResponse)
async def get_profile(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
) -> ApiResponse:
    """내 프로필 조회 — Profile of the authenticated user."""
    result: UserResponse = await user_service.get_profile(db, principal.user_id)
    return ApiResponse.ok(request, result, "Profile retrieved successfully")


@router.put("/profile", response_model=ApiResponse)
async def update_profile(
    request: Request,
    data: UpdateProfileRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
) -> ApiResponse:
    """내 프로필 수정 — Update the authenticated user's profile."""
    result: UserResponse = await user_service.update_profile(db, principal.user_id, data)
    await db.commit()
    return ApiResponse.ok(request, result, "Profile updated successfully")


@router.put("/change-password", response_model=ApiResponse)
async def change_password(
    request: Request,
    data: ChangePasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
) -> ApiResponse:
    """비밀번호 변경 — Change the authenticated user's password."""
    await user_service.change_password(db, principal.user_id, data)
    await db.commit()
    return ApiResponse.ok(request, None, "Password changed successfully")


@router.get("", response_model=ApiResponse)
async def list_users(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
) -> ApiResponse:
    """전체 사용자 목록 (페이지) — Paged list of active users."""
    result: Page = await user_service.list_users(db, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Users retrieved successfully")


@router.get("/search", response_model=ApiResponse)
async def search_users(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    search_term: Annotated[str, Query(alias="searchTerm", min_length=1, description="이름 또는 이메일 검색어")],
) -> ApiResponse:
    """사용자 검색 — Search users by name or email."""
    result: Page = await user_service.search_users(db, search_term, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Search completed successfully")


@router.get("/role/{role_name}", response_model=ApiResponse)
async def get_users_by_role(
    role_name: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
) -> ApiResponse:
    result: Page = await user_service.get_users_by_role(db, role_name, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Users retrieved successfully")


@router.get("/providers", response_model=ApiResponse)
async def get_providers(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
) -> ApiResponse:
    """서비스 제공자 목록 — Public list of providers."""
    result: Page = await user_service.get_providers(db, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Providers retrieved successfully")


@router.get("/customers", response_model=ApiResponse)
async def get_customers(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    paging: Annotated[PageParams, Depends(get_page_params)],
) -> ApiResponse:
    result: Page = await user_service.get_customers(db, paging.page, paging.size)
    return ApiResponse.ok(request, result, "Customers retrieved successfully")


@router.get("/nearby", response_model=ApiResponse)
async def get_nearby_users(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    latitude: Annotated[float, Query(ge=-90, le=90)],
    longitude: Annotated[float, Query(ge=-180, le=180)],
    radius_km: Annotated[float, Query(alias="radiusKm", gt=0)] = settings.DEFAULT_SEARCH_RADIUS_KM,
) -> ApiResponse:
    """반경 내 사용자 — Users within ``radiusKm`` of a point, nearest first."""
    result: list[UserResponse] = await user_service.get_users_nearby(db, latitude, longitude, radius_km)
    return ApiResponse.ok(request, result, "Nearby users retrieved successfully")


@router.get("/check-email", response_model=ApiResponse)
async def check_email(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    email: Annotated[str, Query(min_length=3)],
) -> ApiResponse:
    """이메일 사용 가능 여부 — Whether an email is still free for registration."""
    available: bool = await user_service.is_email_available(db, email)
    return ApiResponse.ok(
        request, AvailabilityResponse(value=email, available=available), "Email availability checked"
    )


@router.get("/check-phone", response_model=ApiResponse)
async def check_phone(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    phone_number: Annotated[str, Query(alias="phoneNumber", min_length=3)],
) -> ApiResponse:
    available: bool = await user_service.is_phone_available(db, phone_number)
    return ApiResponse.ok(
        request, AvailabilityResponse(value=phone_number, available=available), "Phone availability checked"
    )


@router.get("/stats", response_model=ApiResponse)
async def get_user_stats(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    """사용자 통계 — Counts per role."""
    return ApiResponse.ok(request, await user_service.get_user_stats(db), "User statistics retrieved")


@router.get("/{user_id}", response_model=ApiResponse)
async def get_user(
    user_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    result: UserResponse = user_service.to_response(await user_service.get_user(db, user_id))
    return ApiResponse.ok(request, result, "User retrieved successfully")


@router.put("/{user_id}/verify-email", response_model=ApiResponse)
async def verify_email(
    user_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    result: UserResponse = await user_service.verify_email(db, user_id)
    await db.commit()
    return ApiResponse.ok(request, result, "Email verified successfully")


@router.put("/{user_id}/verify-phone", response_model=ApiResponse)
async def verify_phone(
    user_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    result: UserResponse = await user_service.verify_phone(db, user_id)
    await db.commit()
    return ApiResponse.ok(request, result, "Phone verified successfully")


@router.put("/{user_id}/toggle-status", response_model=ApiResponse)
async def toggle_status(
    user_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    enabled: Annotated[bool, Query(description="계정 사용 여부")],
) -> ApiResponse:
    """계정 활성/비활성 — Enable or disable an account."""
    result: UserResponse = await user_service.toggle_status(db, user_id, enabled)
    await db.commit()
    return ApiResponse.ok(request, result, "User status updated successfully")


@router.delete("/{user_id}", response_model=ApiResponse)
async def delete_user(
    user_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    """사용자 소프트 삭제 — Soft delete an account."""
    await user_service.delete_user(db, user_id)
    await db.commit()
    return ApiResponse.ok(request, None, "User deleted successfully")
