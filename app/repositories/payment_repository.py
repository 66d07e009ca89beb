"""결제 레포지토리 — 예약별 결제 조회.

Payment Repository — Lookup of the payment row attached to a booking.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.payment import Payment
from app.repositories.base import BaseRepository


class PaymentRepository(BaseRepository[Payment]):
    """결제 테이블 레포지토리 — Repository for the payments table."""

    def __init__(self) -> None:
        super().__init__(Payment)

    async def get_by_booking_id(self, db: AsyncSession, booking_id: int) -> Payment | None:
        result = await db.execute(select(Payment).where(Payment.booking_id == booking_id))
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
payment_repository: PaymentRepository = PaymentRepository()
