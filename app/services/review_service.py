"""리뷰 서비스 — 리뷰 작성, 조회, 서비스 평점 집계 비즈니스 로직.

Review Service — Writing reviews for completed bookings and keeping the
service rating aggregate in step with them.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import Select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking, BookingStatus
from app.models.catalog import Service
from app.models.review import Review, rating_description
from app.repositories.booking_repository import booking_repository
from app.repositories.review_repository import review_repository
from app.repositories.service_repository import service_repository
from app.schemas.principal import AuthenticatedPrincipal
from app.schemas.review import ProviderResponseRequest, ReviewCreate, ReviewResponse
from app.services.user_service import user_service
from app.utils.exceptions import BadRequestError, NotFoundError
from app.utils.logger import get_logger
from app.utils.pagination import Page

logger = get_logger(__name__)

# 자동 제목의 본문 발췌 길이 — Comment excerpt length for generated titles
TITLE_EXCERPT_LIMIT: int = 50


def generate_title(overall_rating: Decimal, comment: str) -> str:
    """자동 제목 생성 — "<rating description> service - <comment excerpt>"."""
    excerpt: str = comment
    if len(comment) > TITLE_EXCERPT_LIMIT:
        excerpt = comment[: TITLE_EXCERPT_LIMIT - 3] + "..."
    return f"{rating_description(float(overall_rating))} service - {excerpt}"


class ReviewService:
    """리뷰 비즈니스 로직 서비스 — Review business logic."""

    def to_response(self, review: Review) -> ReviewResponse:
        return ReviewResponse(
            id=review.id,
            booking_id=review.booking_id,
            service_id=review.service_id,
            service_title=review.service.title,
            provider_id=review.provider_id,
            customer=user_service.to_summary(review.customer),
            overall_rating=float(review.overall_rating),
            quality_rating=float(review.quality_rating),
            communication_rating=float(review.communication_rating),
            punctuality_rating=float(review.punctuality_rating),
            value_rating=float(review.value_rating),
            rating_description=rating_description(float(review.overall_rating)),
            title=review.title,
            comment=review.comment,
            provider_response=review.provider_response,
            provider_response_at=review.provider_response_at,
            created_at=review.created_at,
        )

    async def _page(self, db: AsyncSession, query: Select, page: int, size: int) -> Page:
        reviews, total = await review_repository.get_paginated(db, query, page, size)
        return Page.build([self.to_response(r) for r in reviews], total, page, size)

    async def create_review(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        data: ReviewCreate,
    ) -> ReviewResponse:
        """리뷰를 작성합니다.

        Write a review for a completed booking. Checks run in order: the
        booking exists, belongs to the caller, is COMPLETED, and has no
        review yet. Omitted detailed ratings take the overall rating.

        After the review is stored the service's ``average_rating`` and
        ``total_reviews`` are recomputed inside a savepoint; a failure there
        is logged and does not undo the review.

        Raises:
            NotFoundError: 예약 없음 (Missing booking)
            BadRequestError: 본인 예약 아님, 미완료, 중복 리뷰
                             (Not the caller's booking, not completed, already reviewed)
        """
        booking: Booking | None = await booking_repository.get_by_id(db, data.booking_id, active_only=True)
        if booking is None:
            raise NotFoundError.for_field("Booking", "id", data.booking_id)
        if booking.customer_id != principal.user_id:
            raise BadRequestError("You can only review your own bookings")
        if booking.status != BookingStatus.COMPLETED:
            raise BadRequestError("You can only review completed bookings")
        if await review_repository.get_by_booking_id(db, booking.id) is not None:
            raise BadRequestError("You have already reviewed this booking")

        overall: Decimal = data.overall_rating
        title: str | None = data.title.strip() if data.title else None
        values: dict = {
            "booking_id": booking.id,
            "service_id": booking.service_id,
            "customer_id": booking.customer_id,
            "provider_id": booking.provider_id,
            "overall_rating": overall,
            "quality_rating": data.quality_rating if data.quality_rating is not None else overall,
            "communication_rating": (
                data.communication_rating if data.communication_rating is not None else overall
            ),
            "punctuality_rating": data.punctuality_rating if data.punctuality_rating is not None else overall,
            "value_rating": data.value_rating if data.value_rating is not None else overall,
            "title": title or generate_title(overall, data.comment),
            "comment": data.comment,
        }
        try:
            # 동시 요청이 같은 예약을 리뷰하면 booking_id 고유 제약에 걸림 (unique booking_id rejects a concurrent duplicate)
            async with db.begin_nested():
                review: Review = await review_repository.create(db, values)
        except IntegrityError as exc:
            logger.warning("Concurrent duplicate review for booking id=%s", booking.id)
            raise BadRequestError("You have already reviewed this booking") from exc
        logger.info("Review id=%s created for booking id=%s", review.id, booking.id)

        await self.update_service_rating(db, booking.service_id)
        return self.to_response(review)

    async def update_service_rating(self, db: AsyncSession, service_id: int) -> None:
        """서비스 평점 재계산 — Recompute the service rating aggregate in a savepoint."""
        try:
            async with db.begin_nested():
                average, count = await review_repository.rating_aggregate(db, service_id)
                service: Service | None = await service_repository.get_by_id(db, service_id)
                if service is None:
                    return
                service.average_rating = average.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
                service.total_reviews = count
        except SQLAlchemyError:
            logger.exception("Failed to update rating for service id=%s", service_id)

    async def get_service_reviews(self, db: AsyncSession, service_id: int, page: int, size: int) -> Page:
        return await self._page(db, review_repository.by_service_query(service_id), page, size)

    async def get_provider_reviews(self, db: AsyncSession, provider_id: int, page: int, size: int) -> Page:
        return await self._page(db, review_repository.by_provider_query(provider_id), page, size)

    async def get_customer_reviews(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        page: int,
        size: int,
    ) -> Page:
        return await self._page(db, review_repository.by_customer_query(principal.user_id), page, size)

    async def _get_active(self, db: AsyncSession, review_id: int) -> Review:
        review: Review | None = await review_repository.get_by_id(db, review_id, active_only=True)
        if review is None:
            raise NotFoundError.for_field("Review", "id", review_id)
        return review

    async def get_review(self, db: AsyncSession, review_id: int) -> ReviewResponse:
        return self.to_response(await self._get_active(db, review_id))

    async def add_provider_response(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        review_id: int,
        data: ProviderResponseRequest,
    ) -> ReviewResponse:
        """제공자 답변 등록 — Only the reviewed provider may respond."""
        review: Review = await self._get_active(db, review_id)
        if review.provider_id != principal.user_id:
            raise BadRequestError("You can only respond to reviews of your own services")

        review = await review_repository.update(
            db,
            review,
            {"provider_response": data.response.strip(), "provider_response_at": datetime.now(timezone.utc)},
        )
        logger.info("Provider id=%s responded to review id=%s", principal.user_id, review.id)
        return self.to_response(review)


# 싱글턴 인스턴스 — Singleton instance
review_service: ReviewService = ReviewService()
