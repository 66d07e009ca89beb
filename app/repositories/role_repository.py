"""역할 레포지토리 — 역할 조회 쿼리.

Role Repository — Lookup queries for the roles table.
"""

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import Role
from app.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """역할 테이블 레포지토리 — Repository for the roles table."""

    def __init__(self) -> None:
        super().__init__(Role)

    async def get_by_name(
        self,
        db: AsyncSession,
        name: str,
        active_only: bool = True,
    ) -> Role | None:
        """이름으로 역할을 조회합니다 (대소문자 무시).

        Look up a role by name, case-insensitively.
        """
        query: Select = select(Role).where(Role.name == name.upper())
        if active_only:
            query = query.where(Role.is_active.is_(True))
        result = await db.execute(query)
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
role_repository: RoleRepository = RoleRepository()
