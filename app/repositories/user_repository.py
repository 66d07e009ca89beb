"""사용자 레포지토리 — 사용자 조회, 검색, 근처 사용자 쿼리.

User Repository — Lookup, search, role filtering and the nearby-users query.
"""

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import Role, User
from app.repositories.base import BaseRepository

# 지구 평균 반지름(km) — Mean Earth radius in kilometres
EARTH_RADIUS_KM: float = 6371.0


def distance_km_expression(latitude: float, longitude: float) -> ColumnElement[float]:
    """하버사인 거리 SQL 식 — Haversine great-circle distance as a SQL expression.

    Uses the asin form so rounding can never push the argument outside [-1, 1].
    """
    d_lat = func.radians(User.latitude - latitude) / 2
    d_lon = func.radians(User.longitude - longitude) / 2
    sin_lat = func.sin(d_lat)
    sin_lon = func.sin(d_lon)
    chord = (
        sin_lat * sin_lat
        + func.cos(func.radians(latitude)) * func.cos(func.radians(User.latitude)) * sin_lon * sin_lon
    )
    return 2 * EARTH_RADIUS_KM * func.asin(func.sqrt(chord))


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    Roles are eager-loaded through the relationship's selectin strategy.
    """

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    async def get_active_by_email(self, db: AsyncSession, email: str) -> User | None:
        """활성 사용자를 이메일로 조회합니다 — Active user lookup used by authentication."""
        result = await db.execute(
            select(User).where(
                func.lower(User.email) == email.lower(),
                User.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def get_by_phone(self, db: AsyncSession, phone_number: str) -> User | None:
        result = await db.execute(select(User).where(User.phone_number == phone_number))
        return result.scalar_one_or_none()

    async def email_exists(self, db: AsyncSession, email: str) -> bool:
        return await self.get_by_email(db, email) is not None

    async def phone_exists(self, db: AsyncSession, phone_number: str) -> bool:
        return await self.get_by_phone(db, phone_number) is not None

    def active_query(self) -> Select:
        return self.base_query().order_by(User.id)

    def search_query(self, term: str) -> Select:
        """이름/이메일 부분 일치 검색 — Substring search over names and email."""
        pattern: str = f"%{term.strip()}%"
        return (
            self.base_query()
            .where(
                or_(
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                    User.email.ilike(pattern),
                )
            )
            .order_by(User.id)
        )

    def by_role_query(self, role_name: str) -> Select:
        return (
            self.base_query()
            .where(User.roles.any(Role.name == role_name.upper()))
            .order_by(User.id)
        )

    def nearby_query(self, latitude: float, longitude: float, radius_km: float) -> Select:
        """반경 내 사용자 조회 — Users with coordinates within ``radius_km``, nearest first."""
        distance = distance_km_expression(latitude, longitude)
        return (
            self.base_query()
            .where(User.latitude.is_not(None), User.longitude.is_not(None))
            .where(distance <= radius_km)
            .order_by(distance)
        )

    async def list_nearby(
        self,
        db: AsyncSession,
        latitude: float,
        longitude: float,
        radius_km: float,
    ) -> list[User]:
        result = await db.execute(self.nearby_query(latitude, longitude, radius_km))
        return list(result.scalars().all())

    async def count_active(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count()).select_from(User).where(User.is_active.is_(True)))
        return result.scalar() or 0

    async def count_by_role(self, db: AsyncSession, role_name: str) -> int:
        query = (
            select(func.count())
            .select_from(User)
            .where(User.is_active.is_(True), User.roles.any(Role.name == role_name.upper()))
        )
        return (await db.execute(query)).scalar() or 0


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
