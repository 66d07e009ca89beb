"""카테고리 레포지토리 — 카테고리 트리 조회 쿼리.

Category Repository — Queries over the self-referencing category tree.
Children are always found by querying on ``parent_category_id``.
"""

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.catalog import Category, Service
from app.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """카테고리 테이블 레포지토리 — Repository for the categories table."""

    def __init__(self) -> None:
        super().__init__(Category)

    def _ordered(self, query: Select) -> Select:
        return query.order_by(Category.sort_order, Category.name)

    async def list_active(self, db: AsyncSession) -> list[Category]:
        result = await db.execute(self._ordered(self.base_query()))
        return list(result.scalars().all())

    async def list_top_level(self, db: AsyncSession) -> list[Category]:
        query: Select = self.base_query().where(Category.parent_category_id.is_(None))
        result = await db.execute(self._ordered(query))
        return list(result.scalars().all())

    async def list_children(self, db: AsyncSession, parent_id: int) -> list[Category]:
        query: Select = self.base_query().where(Category.parent_category_id == parent_id)
        result = await db.execute(self._ordered(query))
        return list(result.scalars().all())

    async def get_by_slug(self, db: AsyncSession, slug: str, active_only: bool = True) -> Category | None:
        result = await db.execute(self.base_query(active_only).where(Category.slug == slug))
        return result.scalar_one_or_none()

    async def slug_exists(self, db: AsyncSession, slug: str, exclude_id: int | None = None) -> bool:
        query: Select = select(func.count()).select_from(Category).where(Category.slug == slug)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        return ((await db.execute(query)).scalar() or 0) > 0

    async def count_active_services(self, db: AsyncSession, category_ids: list[int]) -> dict[int, int]:
        """카테고리별 활성 서비스 수 — Active service count per category id."""
        if not category_ids:
            return {}
        query = (
            select(Service.category_id, func.count(Service.id))
            .where(Service.category_id.in_(category_ids), Service.is_active.is_(True))
            .group_by(Service.category_id)
        )
        result = await db.execute(query)
        return {category_id: count for category_id, count in result.all()}


# 싱글턴 인스턴스 — Singleton instance
category_repository: CategoryRepository = CategoryRepository()
