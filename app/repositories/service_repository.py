"""서비스 레포지토리 — 서비스 목록, 검색, 필터 쿼리.

Service Repository — Listing, search and filter queries for service listings.
Public listings only include active and available services.
"""

from decimal import Decimal

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.catalog import Service
from app.repositories.base import BaseRepository


class ServiceRepository(BaseRepository[Service]):
    """서비스 테이블 레포지토리 — Repository for the services table."""

    def __init__(self) -> None:
        super().__init__(Service)

    def listed_query(self) -> Select:
        """공개 목록 기본 쿼리 — Active and available services, newest first."""
        return (
            self.base_query()
            .where(Service.is_available.is_(True))
            .order_by(Service.created_at.desc(), Service.id.desc())
        )

    def by_category_query(self, category_id: int) -> Select:
        return self.listed_query().where(Service.category_id == category_id)

    def by_provider_query(self, provider_id: int) -> Select:
        return (
            self.base_query()
            .where(Service.provider_id == provider_id)
            .order_by(Service.created_at.desc(), Service.id.desc())
        )

    def featured_query(self) -> Select:
        return self.listed_query().where(Service.is_featured.is_(True))

    def popular_query(self) -> Select:
        """인기 서비스 — Highest rated first, then most reviewed."""
        return (
            self.base_query()
            .where(Service.is_available.is_(True))
            .order_by(Service.average_rating.desc(), Service.total_reviews.desc(), Service.id)
        )

    def search_query(
        self,
        keyword: str | None = None,
        category_id: int | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        min_rating: Decimal | None = None,
        location: str | None = None,
    ) -> Select:
        """필터 검색 — Every filter is applied in SQL; ``None`` skips a filter.

        Args:
            keyword: 제목/설명 부분 일치 (Substring of title or description)
            category_id: 카테고리 ID (Category filter)
            min_price / max_price: 기본 가격 범위 (Base price bounds, inclusive)
            min_rating: 최소 평균 평점 (Minimum average rating)
            location: 서비스 지역 부분 일치 (Substring of the service area)
        """
        query: Select = self.listed_query()
        if keyword:
            pattern: str = f"%{keyword.strip()}%"
            query = query.where(or_(Service.title.ilike(pattern), Service.description.ilike(pattern)))
        if category_id is not None:
            query = query.where(Service.category_id == category_id)
        if min_price is not None:
            query = query.where(Service.base_price >= min_price)
        if max_price is not None:
            query = query.where(Service.base_price <= max_price)
        if min_rating is not None:
            query = query.where(Service.average_rating >= min_rating)
        if location:
            query = query.where(Service.service_area.ilike(f"%{location.strip()}%"))
        return query

    async def get_by_slug(self, db: AsyncSession, slug: str) -> Service | None:
        result = await db.execute(self.base_query().where(Service.slug == slug))
        return result.scalar_one_or_none()

    async def slug_exists(self, db: AsyncSession, slug: str) -> bool:
        query = select(func.count()).select_from(Service).where(Service.slug == slug)
        return ((await db.execute(query)).scalar() or 0) > 0


# 싱글턴 인스턴스 — Singleton instance
service_repository: ServiceRepository = ServiceRepository()
