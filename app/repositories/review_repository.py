"""리뷰 레포지토리 — 리뷰 조회 및 평점 집계 쿼리.

Review Repository — Review listings and the per-service rating aggregate.
"""

from decimal import Decimal

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.review import Review
from app.repositories.base import BaseRepository


class ReviewRepository(BaseRepository[Review]):
    """리뷰 테이블 레포지토리 — Repository for the reviews table."""

    def __init__(self) -> None:
        super().__init__(Review)

    async def get_by_booking_id(self, db: AsyncSession, booking_id: int) -> Review | None:
        result = await db.execute(select(Review).where(Review.booking_id == booking_id))
        return result.scalar_one_or_none()

    def _newest_first(self, query: Select) -> Select:
        return query.order_by(Review.created_at.desc(), Review.id.desc())

    def by_service_query(self, service_id: int) -> Select:
        return self._newest_first(self.base_query().where(Review.service_id == service_id))

    def by_provider_query(self, provider_id: int) -> Select:
        return self._newest_first(self.base_query().where(Review.provider_id == provider_id))

    def by_customer_query(self, customer_id: int) -> Select:
        return self._newest_first(self.base_query().where(Review.customer_id == customer_id))

    async def rating_aggregate(self, db: AsyncSession, service_id: int) -> tuple[Decimal, int]:
        """서비스 평점 집계 — (average overall rating, review count) over active reviews."""
        query = select(func.avg(Review.overall_rating), func.count(Review.id)).where(
            Review.service_id == service_id,
            Review.is_active.is_(True),
        )
        average, count = (await db.execute(query)).one()
        if not count:
            return Decimal("0.00"), 0
        return Decimal(str(average)), int(count)


# 싱글턴 인스턴스 — Singleton instance
review_repository: ReviewRepository = ReviewRepository()
