"""서비스 목록 서비스 — 제공자 서비스 등록, 조회, 검색 비즈니스 로직.

Listing Service — Business logic for provider service listings:
browsing, filtered search, and owner-only maintenance.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.catalog import Service
from app.models.user import RoleName
from app.repositories.service_repository import service_repository
from app.schemas.principal import AuthenticatedPrincipal
from app.schemas.service import ServiceCreate, ServiceResponse, ServiceUpdate
from app.services.category_service import category_service
from app.services.user_service import user_service
from app.utils.exceptions import BadRequestError, NotFoundError
from app.utils.logger import get_logger
from app.utils.pagination import Page
from app.utils.slug import slugify, with_suffix

logger = get_logger(__name__)

# null 로 비울 수 있는 필드 (Nullable columns an update may clear with an explicit null)
CLEARABLE_FIELDS: frozenset[str] = frozenset({"min_price", "max_price", "estimated_duration_minutes", "service_area"})


def _money(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


class ListingService:
    """서비스 등록 정보 비즈니스 로직 — Service listing business logic."""

    def to_response(self, service: Service) -> ServiceResponse:
        return ServiceResponse(
            id=service.id,
            title=service.title,
            description=service.description,
            slug=service.slug,
            base_price=float(service.base_price),
            pricing_type=service.pricing_type,
            min_price=_money(service.min_price),
            max_price=_money(service.max_price),
            price_unit=service.price_unit,
            price_display=service.price_display,
            estimated_duration_minutes=service.estimated_duration_minutes,
            service_area=service.service_area,
            is_available=service.is_available,
            is_featured=service.is_featured,
            average_rating=float(service.average_rating or 0),
            total_reviews=service.total_reviews,
            total_bookings=service.total_bookings,
            category_id=service.category_id,
            category_name=service.category.name,
            provider=user_service.to_summary(service.provider),
            created_at=service.created_at,
        )

    async def _page(self, db: AsyncSession, query, page: int, size: int) -> Page:
        services, total = await service_repository.get_paginated(db, query, page, size)
        return Page.build([self.to_response(s) for s in services], total, page, size)

    async def get_active_service(self, db: AsyncSession, service_id: int) -> Service:
        """활성 서비스 엔티티 조회 — Active service row or 404."""
        service: Service | None = await service_repository.get_by_id(db, service_id, active_only=True)
        if service is None:
            raise NotFoundError.for_field("Service", "id", service_id)
        return service

    async def list_services(self, db: AsyncSession, page: int, size: int) -> Page:
        return await self._page(db, service_repository.listed_query(), page, size)

    async def list_by_category(self, db: AsyncSession, category_id: int, page: int, size: int) -> Page:
        await category_service.get_active_category(db, category_id)
        return await self._page(db, service_repository.by_category_query(category_id), page, size)

    async def search_services(self, db: AsyncSession, keyword: str, page: int, size: int) -> Page:
        return await self._page(db, service_repository.search_query(keyword=keyword), page, size)

    async def featured_services(self, db: AsyncSession, page: int, size: int) -> Page:
        return await self._page(db, service_repository.featured_query(), page, size)

    async def popular_services(self, db: AsyncSession, page: int, size: int) -> Page:
        return await self._page(db, service_repository.popular_query(), page, size)

    async def list_by_provider(self, db: AsyncSession, provider_id: int, page: int, size: int) -> Page:
        return await self._page(db, service_repository.by_provider_query(provider_id), page, size)

    async def search(
        self,
        db: AsyncSession,
        keyword: str | None,
        category_id: int | None,
        min_price: Decimal | None,
        max_price: Decimal | None,
        min_rating: Decimal | None,
        location: str | None,
        page: int,
        size: int,
    ) -> Page:
        """복합 필터 검색 — Combined filter search, every filter applied in SQL."""
        if min_price is not None and max_price is not None and min_price > max_price:
            raise BadRequestError("minPrice must not exceed maxPrice")
        query = service_repository.search_query(
            keyword=keyword,
            category_id=category_id,
            min_price=min_price,
            max_price=max_price,
            min_rating=min_rating,
            location=location,
        )
        return await self._page(db, query, page, size)

    async def get_service(self, db: AsyncSession, service_id: int) -> ServiceResponse:
        return self.to_response(await self.get_active_service(db, service_id))

    async def get_service_by_slug(self, db: AsyncSession, slug: str) -> ServiceResponse:
        service: Service | None = await service_repository.get_by_slug(db, slug)
        if service is None:
            raise NotFoundError.for_field("Service", "slug", slug)
        return self.to_response(service)

    async def _unique_slug(self, db: AsyncSession, title: str) -> str:
        """제목 기반 고유 slug — Unique slug from the title with -2, -3... on collision."""
        base: str = slugify(title) or "service"
        attempt: int = 1
        while await service_repository.slug_exists(db, with_suffix(base, attempt)):
            attempt += 1
        return with_suffix(base, attempt)

    async def create_service(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        data: ServiceCreate,
    ) -> ServiceResponse:
        """서비스를 등록합니다 — Create a listing owned by the calling provider.

        Raises:
            BadRequestError: 제공자가 아닌 경우 (Caller is not a provider)
            NotFoundError: 카테고리가 없거나 비활성 (Missing or inactive category)
        """
        if not principal.has_role(RoleName.PROVIDER):
            raise BadRequestError("Only providers can create services")
        await category_service.get_active_category(db, data.category_id)

        payload: dict = data.model_dump()
        payload["provider_id"] = principal.user_id
        payload["slug"] = await self._unique_slug(db, data.title)
        service: Service = await service_repository.create(db, payload)

        logger.info("Provider id=%s created service id=%s", principal.user_id, service.id)
        return self.to_response(service)

    async def _get_owned(self, db: AsyncSession, principal: AuthenticatedPrincipal, service_id: int) -> Service:
        service: Service = await self.get_active_service(db, service_id)
        if service.provider_id != principal.user_id:
            raise BadRequestError("You can only modify your own services")
        return service

    async def update_service(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        service_id: int,
        data: ServiceUpdate,
    ) -> ServiceResponse:
        """서비스를 수정합니다 — Owner-only partial update."""
        service: Service = await self._get_owned(db, principal, service_id)
        update_data: dict = {
            k: v
            for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k in CLEARABLE_FIELDS
        }

        min_price: Decimal | None = update_data.get("min_price", service.min_price)
        max_price: Decimal | None = update_data.get("max_price", service.max_price)
        if min_price is not None and max_price is not None and min_price > max_price:
            raise BadRequestError("min_price must not exceed max_price")

        if "category_id" in update_data:
            await category_service.get_active_category(db, update_data["category_id"])
        if "title" in update_data and update_data["title"] != service.title:
            update_data["slug"] = await self._unique_slug(db, update_data["title"])

        service = await service_repository.update(db, service, update_data)
        logger.info("Provider id=%s updated service id=%s", principal.user_id, service.id)
        return self.to_response(service)

    async def delete_service(
        self,
        db: AsyncSession,
        principal: AuthenticatedPrincipal,
        service_id: int,
    ) -> None:
        """서비스를 소프트 삭제합니다 — Owner-only soft delete."""
        service: Service = await self._get_owned(db, principal, service_id)
        await service_repository.update(db, service, {"is_active": False, "is_available": False})
        logger.info("Provider id=%s deleted service id=%s", principal.user_id, service_id)


# 싱글턴 인스턴스 — Singleton instance
listing_service: ListingService = ListingService()
