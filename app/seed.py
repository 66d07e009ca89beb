"""초기 데이터 시드 스크립트 — 역할, 카테고리, 관리자 계정 생성.

Seed script — Creates the roles, a starter category tree and the
administrator account. Every step is idempotent and can be re-run.

Usage:
    python -m app.seed

Creates:
    - 4개 역할: CUSTOMER, PROVIDER, ADMIN, MODERATOR (4 roles)
    - 기본 카테고리 트리 (Top-level categories with subcategories)
    - 관리자 계정: settings.ADMIN_EMAIL / settings.ADMIN_PASSWORD (1 admin user)
"""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import Base, async_session, engine
from app.models import Category, Role, RoleName, User
from app.repositories.category_repository import category_repository
from app.repositories.role_repository import role_repository
from app.repositories.user_repository import user_repository
from app.utils.logger import configure_logging, get_logger
from app.utils.password import hash_password
from app.utils.slug import slugify

logger = get_logger(__name__)

ROLE_DESCRIPTIONS: dict[str, str] = {
    RoleName.CUSTOMER: "Books services offered by providers",
    RoleName.PROVIDER: "Offers services and fulfils bookings",
    RoleName.ADMIN: "Full platform administration",
    RoleName.MODERATOR: "Reviews users and platform content",
}

# (이름, 설명, 하위 카테고리) — (name, description, subcategory names)
CATEGORY_TREE: list[tuple[str, str, list[str]]] = [
    ("Home Services", "Cleaning, plumbing and everyday home help", ["Cleaning", "Plumbing", "Electrical"]),
    ("Repair & Maintenance", "Appliance and vehicle repair", ["Appliance Repair", "Vehicle Repair"]),
    ("Personal Care", "Beauty and wellness at home", ["Salon at Home", "Fitness Training"]),
    ("Education", "Tutoring and skill lessons", ["Tutoring", "Music Lessons"]),
]


async def seed_roles(db: AsyncSession) -> dict[str, Role]:
    """역할을 생성합니다 (이미 있으면 건너뜀) — Create missing roles."""
    roles: dict[str, Role] = {}
    for name in RoleName.ALL:
        role: Role | None = await role_repository.get_by_name(db, name)
        if role is None:
            role = await role_repository.create(db, {"name": name, "description": ROLE_DESCRIPTIONS[name]})
            logger.info("Seeded role %s", name)
        roles[name] = role
    return roles


async def seed_categories(db: AsyncSession) -> int:
    """기본 카테고리 트리를 생성합니다 — Create missing categories; returns the number created."""
    created: int = 0
    for sort_order, (name, description, children) in enumerate(CATEGORY_TREE):
        parent: Category | None = await category_repository.get_by_slug(db, slugify(name), active_only=False)
        if parent is None:
            parent = await category_repository.create(
                db,
                {
                    "name": name,
                    "description": description,
                    "slug": slugify(name),
                    "sort_order": sort_order,
                    "is_featured": sort_order == 0,
                },
            )
            created += 1

        for child_order, child_name in enumerate(children):
            if await category_repository.get_by_slug(db, slugify(child_name), active_only=False) is not None:
                continue
            await category_repository.create(
                db,
                {
                    "name": child_name,
                    "slug": slugify(child_name),
                    "sort_order": child_order,
                    "parent_category_id": parent.id,
                },
            )
            created += 1

    if created:
        logger.info("Seeded %d categories", created)
    return created


async def seed_admin(db: AsyncSession, admin_role: Role) -> User:
    """관리자 계정을 생성합니다 (이미 있으면 그대로 반환)."""
    email: str = settings.ADMIN_EMAIL.lower()
    admin: User | None = await user_repository.get_by_email(db, email)
    if admin is not None:
        return admin

    admin = User(
        first_name="System",
        last_name="Administrator",
        email=email,
        password_hash=hash_password(settings.ADMIN_PASSWORD),
        is_email_verified=True,
        enabled=True,
        is_active=True,
    )
    admin.roles = [admin_role]
    db.add(admin)
    await db.flush()
    logger.info("Seeded admin user id=%s", admin.id)
    return admin


async def seed() -> None:
    """데이터베이스를 초기 데이터로 시드합니다.

    Create tables if they don't exist, then run every seed step in one
    transaction.
    """
    # 테이블 생성 — DDL 실행 (Create all tables from ORM metadata)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        roles: dict[str, Role] = await seed_roles(db)
        await seed_categories(db)
        await seed_admin(db, roles[RoleName.ADMIN])
        await db.commit()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(seed())
