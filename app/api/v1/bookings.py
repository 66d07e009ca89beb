"""예약 라우터 — 예약 생성, 조회, 상태 전이.

Booking Router — Booking creation, listing and the status transitions
(accept, reject, start, complete, cancel).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import PageParams, get_page_params, get_principal
from app.database import get_db
from app.schemas.booking import BookingCompleteRequest, BookingCreate, BookingReasonRequest, BookingResponse
from app.schemas.envelope import ApiResponse
from app.schemas.principal import AuthenticatedPrincipal
from app.services.booking_service import booking_service
from app.utils.pagination import Page

router: APIRouter = APIRouter()


@router.post("", response_model=ApiResponse, status_code=201)
async def create_booking(
    request: Request,
    data: BookingCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
) -> ApiResponse:
    """예약 생성 (고객) — Request a booking for a service."""
    result: BookingResponse = await booking_service.create_booking(db, principal, data)
    await db.commit()
    return ApiResponse.ok(request, result, "Booking created successfully", 201)


@router.get("/customer", response_model=ApiResponse)
async def get_customer_bookings(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    status: Annotated[str | None, Query(description="예약 상태 필터")] = None,
) -> ApiResponse:
    """내 예약 목록 (고객) — The caller's bookings as a customer, newest first."""
    result: Page = await booking_service.get_customer_bookings(db, principal, paging.page, paging.size, status)
    return ApiResponse.ok(request, result, "Bookings retrieved successfully")


@router.get("/provider", response_model=ApiResponse)
async def get_provider_bookings(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    status: Annotated[str | None, Query(description="예약 상태 필터")] = None,
) -> ApiResponse:
    """받은 예약 목록 (제공자) — Bookings of the caller's services, newest first."""
    result: Page = await booking_service.get_provider_bookings(db, principal, paging.page, paging.size, status)
    return ApiResponse.ok(request, result, "Bookings retrieved successfully")


@router.get("/{booking_id}", response_model=ApiResponse)
async def get_booking(
    booking_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
) -> ApiResponse:
    result: BookingResponse = await booking_service.get_booking(db, principal, booking_id)
    return ApiResponse.ok(request, result, "Booking retrieved successfully")


@router.put("/{booking_id}/accept", response_model=ApiResponse)
async def accept_booking(
    booking_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
) -> ApiResponse:
    result: BookingResponse = await booking_service.accept_booking(db, principal, booking_id)
    await db.commit()
    return ApiResponse.ok(request, result, "Booking accepted successfully")


@router.put("/{booking_id}/reject", response_model=ApiResponse)
async def reject_booking(
    booking_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
    data: BookingReasonRequest | None = None,
) -> ApiResponse:
    reason: str | None = data.reason if data is not None else None
    result: BookingResponse = await booking_service.reject_booking(db, principal, booking_id, reason)
    await db.commit()
    return ApiResponse.ok(request, result, "Booking rejected successfully")


@router.put("/{booking_id}/start", response_model=ApiResponse)
async def start_booking(
    booking_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
) -> ApiResponse:
    result: BookingResponse = await booking_service.start_booking(db, principal, booking_id)
    await db.commit()
    return ApiResponse.ok(request, result, "Booking started successfully")


@router.put("/{booking_id}/complete", response_model=ApiResponse)
async def complete_booking(
    booking_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
    data: BookingCompleteRequest | None = None,
) -> ApiResponse:
    """예약 완료 (제공자) — Final price defaults to the quoted price."""
    result: BookingResponse = await booking_service.complete_booking(db, principal, booking_id, data)
    await db.commit()
    return ApiResponse.ok(request, result, "Booking completed successfully")


@router.put("/{booking_id}/cancel", response_model=ApiResponse)
async def cancel_booking(
    booking_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
    data: BookingReasonRequest | None = None,
) -> ApiResponse:
    """예약 취소 (고객 또는 관리자) — Cancel a requested or accepted booking."""
    reason: str | None = data.reason if data is not None else None
    result: BookingResponse = await booking_service.cancel_booking(db, principal, booking_id, reason)
    await db.commit()
    return ApiResponse.ok(request, result, "Booking cancelled successfully")
