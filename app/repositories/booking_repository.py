"""예약 레포지토리 — 고객/제공자별 예약 조회 쿼리.

Booking Repository — Customer- and provider-scoped booking queries.
"""

from sqlalchemy import Select

from app.models.booking import Booking
from app.repositories.base import BaseRepository


class BookingRepository(BaseRepository[Booking]):
    """예약 테이블 레포지토리 — Repository for the bookings table."""

    def __init__(self) -> None:
        super().__init__(Booking)

    def by_customer_query(self, customer_id: int) -> Select:
        return (
            self.base_query()
            .where(Booking.customer_id == customer_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )

    def by_provider_query(self, provider_id: int) -> Select:
        return (
            self.base_query()
            .where(Booking.provider_id == provider_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )


# 싱글턴 인스턴스 — Singleton instance
booking_repository: BookingRepository = BookingRepository()
