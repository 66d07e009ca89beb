"""카테고리 서비스 — 카테고리 조회 및 관리 비즈니스 로직.

Category Service — Browsing the category tree and admin maintenance.
Parent changes are checked so the tree never contains a cycle.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.catalog import Category
from app.repositories.category_repository import category_repository
from app.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from app.utils.exceptions import BadRequestError, DuplicateError, NotFoundError
from app.utils.logger import get_logger
from app.utils.slug import slugify

logger = get_logger(__name__)


class CategoryService:
    """카테고리 비즈니스 로직 서비스 — Category business logic."""

    def _to_response(self, category: Category, service_count: int = 0) -> CategoryResponse:
        parent: Category | None = category.parent
        return CategoryResponse(
            id=category.id,
            name=category.name,
            description=category.description,
            icon_url=category.icon_url,
            image_url=category.image_url,
            slug=category.slug,
            sort_order=category.sort_order,
            is_featured=category.is_featured,
            parent_category_id=category.parent_category_id,
            parent_category_name=parent.name if parent is not None else None,
            service_count=service_count,
        )

    async def _to_responses(self, db: AsyncSession, categories: list[Category]) -> list[CategoryResponse]:
        counts: dict[int, int] = await category_repository.count_active_services(db, [c.id for c in categories])
        return [self._to_response(c, counts.get(c.id, 0)) for c in categories]

    async def _get_active(self, db: AsyncSession, category_id: int) -> Category:
        category: Category | None = await category_repository.get_by_id(db, category_id, active_only=True)
        if category is None:
            raise NotFoundError.for_field("Category", "id", category_id)
        return category

    async def list_categories(self, db: AsyncSession) -> list[CategoryResponse]:
        return await self._to_responses(db, await category_repository.list_active(db))

    async def list_top_level(self, db: AsyncSession) -> list[CategoryResponse]:
        return await self._to_responses(db, await category_repository.list_top_level(db))

    async def list_subcategories(self, db: AsyncSession, category_id: int) -> list[CategoryResponse]:
        await self._get_active(db, category_id)
        return await self._to_responses(db, await category_repository.list_children(db, category_id))

    async def get_category(self, db: AsyncSession, category_id: int) -> CategoryResponse:
        category: Category = await self._get_active(db, category_id)
        return (await self._to_responses(db, [category]))[0]

    async def get_category_by_slug(self, db: AsyncSession, slug: str) -> CategoryResponse:
        category: Category | None = await category_repository.get_by_slug(db, slug)
        if category is None:
            raise NotFoundError.for_field("Category", "slug", slug)
        return (await self._to_responses(db, [category]))[0]

    async def get_active_category(self, db: AsyncSession, category_id: int) -> Category:
        """다른 서비스에서 사용하는 활성 카테고리 조회."""
        return await self._get_active(db, category_id)

    async def _resolve_slug(
        self,
        db: AsyncSession,
        requested: str | None,
        name: str,
        exclude_id: int | None = None,
    ) -> str:
        slug: str = slugify(requested or name)
        if not slug:
            raise BadRequestError("Category slug cannot be empty")
        if await category_repository.slug_exists(db, slug, exclude_id=exclude_id):
            raise DuplicateError(f"Category slug already exists: {slug}")
        return slug

    async def _check_parent(self, db: AsyncSession, parent_id: int, category_id: int | None = None) -> None:
        """상위 카테고리 검증 — Parent must exist and must not create a cycle.

        Walks up from the proposed parent; meeting ``category_id`` on the
        way means the category would become its own ancestor.
        """
        parent: Category = await self._get_active(db, parent_id)
        if category_id is None:
            return
        seen: set[int] = set()
        current: Category | None = parent
        while current is not None and current.id not in seen:
            if current.id == category_id:
                raise BadRequestError("Category cannot be its own ancestor")
            seen.add(current.id)
            if current.parent_category_id is None:
                break
            current = await category_repository.get_by_id(db, current.parent_category_id)

    async def create_category(self, db: AsyncSession, data: CategoryCreate) -> CategoryResponse:
        """카테고리를 생성합니다 — Create a category; slug derived from name when absent."""
        if data.parent_category_id is not None:
            await self._check_parent(db, data.parent_category_id)
        slug: str = await self._resolve_slug(db, data.slug, data.name)

        payload: dict = data.model_dump()
        payload["slug"] = slug
        category: Category = await category_repository.create(db, payload)
        logger.info("Created category id=%s slug=%s", category.id, category.slug)
        return self._to_response(category)

    async def update_category(
        self,
        db: AsyncSession,
        category_id: int,
        data: CategoryUpdate,
    ) -> CategoryResponse:
        """카테고리를 수정합니다 — Partial update with slug and cycle checks."""
        category: Category = await self._get_active(db, category_id)
        update_data: dict = data.model_dump(exclude_unset=True)

        if "parent_category_id" in update_data and update_data["parent_category_id"] is not None:
            await self._check_parent(db, update_data["parent_category_id"], category_id=category.id)

        # 이름 변경 시 slug 재생성 — name changes re-derive the slug unless one is given
        requested: str | None = update_data.pop("slug", None)
        if requested is not None or update_data.get("name"):
            update_data["slug"] = await self._resolve_slug(
                db,
                requested,
                update_data.get("name") or category.name,
                exclude_id=category.id,
            )
        for column in ("name", "sort_order", "is_featured"):
            if column in update_data and update_data[column] is None:
                del update_data[column]

        category = await category_repository.update(db, category, update_data)
        logger.info("Updated category id=%s", category.id)
        return (await self._to_responses(db, [category]))[0]


# 싱글턴 인스턴스 — Singleton instance
category_service: CategoryService = CategoryService()
