"""예약 서비스 — 예약 생성 및 상태 전이 비즈니스 로직.

Booking Service — Booking creation and the booking status machine.

Transitions (see ``BookingStatus.TRANSITIONS``):
    accept    REQUESTED → ACCEPTED      provider of the booking
    reject    REQUESTED → REJECTED      provider, records reason, actor PROVIDER
    start     ACCEPTED → IN_PROGRESS    provider, records actual start
    complete  IN_PROGRESS → COMPLETED   provider, records actual end
              ACCEPTED → COMPLETED      start is stamped at the same instant
    cancel    REQUESTED|ACCEPTED → CANCELLED   customer (actor CUSTOMER) or admin (actor ADMIN)

An illegal transition raises ``InvalidStateError`` naming the current status
and leaves the booking untouched.
"""

from datetime import datetime, timezone

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.booking import Booking, BookingStatus, CancelledBy
from app.models.catalog import Service
from app.models.user import RoleName
from app.repositories.booking_repository import booking_repository
from app.repositories.service_repository import service_repository
from app.schemas.booking import BookingCompleteRequest, BookingCreate, BookingResponse
from app.schemas.principal import AuthenticatedPrincipal
from app.services.listing_service import listing_service
from app.services.user_service import user_service
from app.utils.exceptions import BadRequestError, InvalidStateError, NotFoundError
from app.utils.logger import get_logger
from app.utils.pagination import Page

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BookingService:
    """예약 비즈니스 로직 서비스 — Booking business logic."""

    def to_response(self, booking: Booking) -> BookingResponse:
        return BookingResponse(
            id=booking.id,
            status=booking.status,
            service_id=booking.service_id,
            service_title=booking.service.title,
            customer=user_service.to_summary(booking.customer),
            provider=user_service.to_summary(booking.provider),
            scheduled_at=booking.scheduled_at,
            estimated_duration_minutes=booking.estimated_duration_minutes,
            actual_start_time=booking.actual_start_time,
            actual_end_time=booking.actual_end_time,
            actual_duration_minutes=booking.actual_duration_minutes,
            quoted_price=float(booking.quoted_price),
            final_price=float(booking.final_price) if booking.final_price is not None else None,
            currency=booking.currency,
            service_address=booking.service_address,
            customer_notes=booking.customer_notes,
            provider_notes=booking.provider_notes,
            requested_at=booking.requested_at,
            accepted_at=booking.accepted_at,
            rejected_at=booking.rejected_at,
            started_at=booking.started_at,
            completed_at=booking.completed_at,
            cancelled_at=booking.cancelled_at,
            cancellation_reason=booking.cancellation_reason,
            cancelled_by=booking.cancelled_by,
            created_at=booking.created_at,
        )

    async def get_booking_entity(self, db: AsyncSession, booking_id: int) -> Booking:
        booking: Booking | None = await booking_repository.get_by_id(db, booking_id, active_only=True)
        if booking is None:
            raise NotFoundError.for_field("Booking", "id", booking_id)
        return booking

    def _ensure_transition(self, booking: Booking, target: str, verb: str) -> None:
        if not booking.can_transition_to(target):
            raise InvalidStateError(f"Booking cannot be {verb} in current status: {booking.status}")

    async def _get_for_provider(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        booking_id: int,
    ) -> Booking:
        booking: Booking = await self.get_booking_entity(db, booking_id)
        if booking.provider_id != principal.user_id:
            raise BadRequestError("You can only manage bookings for your own services")
        return booking

    async def create_booking(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        data: BookingCreate,
    ) -> BookingResponse:
        """예약을 생성합니다.

        Create a booking in REQUESTED status. The provider, quoted price and
        estimated duration are copied from the service.

        Raises:
            BadRequestError: 고객이 아니거나, 예약 불가 서비스, 본인 서비스
                             (Caller not a customer, unavailable service, own service)
            NotFoundError: 서비스 없음 (Missing service)
        """
        if not principal.has_role(RoleName.CUSTOMER):
            raise BadRequestError("Only customers can book services")

        service: Service = await listing_service.get_active_service(db, data.service_id)
        if not service.is_available:
            raise BadRequestError("Service is not available for booking")
        if service.provider_id == principal.user_id:
            raise BadRequestError("You cannot book your own service")

        booking: Booking = await booking_repository.create(
            db,
            {
                "service_id": service.id,
                "customer_id": principal.user_id,
                "provider_id": service.provider_id,
                "status": BookingStatus.REQUESTED,
                "scheduled_at": data.scheduled_at,
                "estimated_duration_minutes": service.estimated_duration_minutes,
                "quoted_price": service.base_price,
                "currency": settings.DEFAULT_CURRENCY,
                "service_address": data.service_address,
                "customer_notes": data.customer_notes,
                "requested_at": _now(),
            },
        )
        await service_repository.update(db, service, {"total_bookings": service.total_bookings + 1})

        logger.info(
            "Booking id=%s requested by customer id=%s for service id=%s",
            booking.id, principal.user_id, service.id,
        )
        return self.to_response(booking)

    async def _page(self, db: AsyncSession, query: Select, status: str | None, page: int, size: int) -> Page:
        if status is not None:
            status = status.upper()
            if status not in BookingStatus.ALL:
                raise BadRequestError(f"Invalid booking status: {status}")
            query = query.where(Booking.status == status)
        bookings, total = await booking_repository.get_paginated(db, query, page, size)
        return Page.build([self.to_response(b) for b in bookings], total, page, size)

    async def get_customer_bookings(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        page: int,
        size: int,
        status: str | None = None,
    ) -> Page:
        return await self._page(db, booking_repository.by_customer_query(principal.user_id), status, page, size)

    async def get_provider_bookings(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        page: int,
        size: int,
        status: str | None = None,
    ) -> Page:
        return await self._page(db, booking_repository.by_provider_query(principal.user_id), status, page, size)

    async def get_booking(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        booking_id: int,
    ) -> BookingResponse:
        """예약 상세 — 고객, 제공자, 관리자/모더레이터만 조회 가능."""
        booking: Booking = await self.get_booking_entity(db, booking_id)
        if principal.user_id not in (booking.customer_id, booking.provider_id) and not principal.is_staff:
            raise BadRequestError("You do not have access to this booking")
        return self.to_response(booking)

    async def accept_booking(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        booking_id: int,
    ) -> BookingResponse:
        booking: Booking = await self._get_for_provider(db, principal, booking_id)
        self._ensure_transition(booking, BookingStatus.ACCEPTED, "accepted")

        booking = await booking_repository.update(
            db, booking, {"status": BookingStatus.ACCEPTED, "accepted_at": _now()}
        )
        logger.info("Booking id=%s accepted", booking.id)
        return self.to_response(booking)

    async def reject_booking(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        booking_id: int,
        reason: str | None = None,
    ) -> BookingResponse:
        booking: Booking = await self._get_for_provider(db, principal, booking_id)
        self._ensure_transition(booking, BookingStatus.REJECTED, "rejected")

        booking = await booking_repository.update(
            db,
            booking,
            {
                "status": BookingStatus.REJECTED,
                "rejected_at": _now(),
                "cancellation_reason": reason,
                "cancelled_by": CancelledBy.PROVIDER,
            },
        )
        logger.info("Booking id=%s rejected", booking.id)
        return self.to_response(booking)

    async def start_booking(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        booking_id: int,
    ) -> BookingResponse:
        booking: Booking = await self._get_for_provider(db, principal, booking_id)
        self._ensure_transition(booking, BookingStatus.IN_PROGRESS, "started")

        now: datetime = _now()
        booking = await booking_repository.update(
            db,
            booking,
            {"status": BookingStatus.IN_PROGRESS, "started_at": now, "actual_start_time": now},
        )
        logger.info("Booking id=%s started", booking.id)
        return self.to_response(booking)

    async def complete_booking(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        booking_id: int,
        data: BookingCompleteRequest | None = None,
    ) -> BookingResponse:
        """예약을 완료합니다.

        Complete from IN_PROGRESS, or directly from ACCEPTED in which case the
        start is stamped at the same instant. Final price defaults to the quote.
        """
        booking: Booking = await self._get_for_provider(db, principal, booking_id)
        self._ensure_transition(booking, BookingStatus.COMPLETED, "completed")

        now: datetime = _now()
        update_data: dict = {
            "status": BookingStatus.COMPLETED,
            "completed_at": now,
            "actual_end_time": now,
            "final_price": booking.quoted_price,
        }
        if booking.status == BookingStatus.ACCEPTED:
            update_data["started_at"] = now
            update_data["actual_start_time"] = now
        if data is not None:
            if data.final_price is not None:
                update_data["final_price"] = data.final_price
            if data.provider_notes is not None:
                update_data["provider_notes"] = data.provider_notes

        booking = await booking_repository.update(db, booking, update_data)
        logger.info("Booking id=%s completed", booking.id)
        return self.to_response(booking)

    async def cancel_booking(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        booking_id: int,
        reason: str | None = None,
    ) -> BookingResponse:
        """예약을 취소합니다 — The booking's customer or an admin may cancel."""
        booking: Booking = await self.get_booking_entity(db, booking_id)
        if booking.customer_id == principal.user_id:
            actor: str = CancelledBy.CUSTOMER
        elif principal.is_admin:
            actor = CancelledBy.ADMIN
        else:
            raise BadRequestError("You can only cancel your own bookings")
        self._ensure_transition(booking, BookingStatus.CANCELLED, "cancelled")

        booking = await booking_repository.update(
            db,
            booking,
            {
                "status": BookingStatus.CANCELLED,
                "cancelled_at": _now(),
                "cancellation_reason": reason,
                "cancelled_by": actor,
            },
        )
        logger.info("Booking id=%s cancelled by %s", booking.id, actor)
        return self.to_response(booking)


# 싱글턴 인스턴스 — Singleton instance
booking_service: BookingService = BookingService()
