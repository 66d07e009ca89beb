"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite database, session and httpx client
fixtures. Each test gets a fresh database with the four roles seeded.
SQLite lacks the trigonometric functions used by the nearby-users query,
so they are registered on every connection.
"""

import math
import os
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# 앱 설정 로드 전에 테스트 환경 변수 지정 — Must run before app.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("AXIOM_API_TOKEN", "")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import *  # noqa: F401,F403 — register all models with metadata
from app.models.booking import Booking, BookingStatus
from app.models.catalog import Category, Service
from app.models.user import Role, RoleName, User
from app.seed import seed_roles
from app.utils.jwt import create_access_token, create_refresh_token
from app.utils.password import hash_password

API = "/api/v1"
DEFAULT_PASSWORD = "Passw0rd!"

_SQL_MATH_FUNCTIONS = {
    "asin": math.asin,
    "sqrt": math.sqrt,
    "sin": math.sin,
    "cos": math.cos,
    "radians": math.radians,
}


def _register_math(dbapi_connection, connection_record) -> None:
    for name, func in _SQL_MATH_FUNCTIONS.items():
        dbapi_connection.create_function(name, 1, func)


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트마다 새 인메모리 DB 엔진을 만들고 스키마를 생성합니다."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(eng.sync_engine, "connect", _register_math)

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def roles(db: AsyncSession) -> dict[str, Role]:
    """기본 4개 역할을 생성합니다."""
    result = await seed_roles(db)
    await db.commit()
    return result


async def make_user(
    db: AsyncSession,
    roles: dict[str, Role],
    email: str,
    role_names: list[str],
    first_name: str = "Test",
    last_name: str = "User",
    **extra,
) -> User:
    """역할이 지정된 사용자를 생성합니다."""
    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password_hash=hash_password(DEFAULT_PASSWORD),
        enabled=True,
        is_active=True,
        **extra,
    )
    user.roles = [roles[name] for name in role_names]
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def customer(db: AsyncSession, roles) -> User:
    """고객 사용자를 생성합니다."""
    return await make_user(db, roles, "customer@test.com", [RoleName.CUSTOMER], "Carol", "Customer")


@pytest_asyncio.fixture
async def other_customer(db: AsyncSession, roles) -> User:
    """다른 고객 사용자를 생성합니다."""
    return await make_user(db, roles, "other@test.com", [RoleName.CUSTOMER], "Oscar", "Other")


@pytest_asyncio.fixture
async def provider(db: AsyncSession, roles) -> User:
    """서비스 제공자 사용자를 생성합니다."""
    return await make_user(db, roles, "provider@test.com", [RoleName.PROVIDER], "Pat", "Provider")


@pytest_asyncio.fixture
async def other_provider(db: AsyncSession, roles) -> User:
    """다른 서비스 제공자를 생성합니다."""
    return await make_user(db, roles, "provider2@test.com", [RoleName.PROVIDER], "Quinn", "Provider")


@pytest_asyncio.fixture
async def admin(db: AsyncSession, roles) -> User:
    """관리자 사용자를 생성합니다."""
    return await make_user(db, roles, "admin@test.com", [RoleName.ADMIN], "Ada", "Admin")


@pytest_asyncio.fixture
async def moderator(db: AsyncSession, roles) -> User:
    """모더레이터 사용자를 생성합니다."""
    return await make_user(db, roles, "moderator@test.com", [RoleName.MODERATOR], "Max", "Moderator")


@pytest_asyncio.fixture
async def category(db: AsyncSession) -> Category:
    """테스트 카테고리를 생성합니다."""
    c = Category(name="Home Cleaning", slug="home-cleaning", sort_order=0)
    db.add(c)
    await db.commit()
    await db.refresh(c)
    return c


async def make_service(
    db: AsyncSession,
    provider: User,
    category: Category,
    title: str = "Deep Home Cleaning",
    base_price: str = "1000.00",
    **extra,
) -> Service:
    """서비스 등록 정보를 생성합니다."""
    s = Service(
        provider_id=provider.id,
        category_id=category.id,
        title=title,
        description="Full apartment deep cleaning with supplies",
        base_price=Decimal(base_price),
        slug=title.lower().replace(" ", "-"),
        estimated_duration_minutes=120,
        **extra,
    )
    db.add(s)
    await db.commit()
    await db.refresh(s)
    return s


@pytest_asyncio.fixture
async def service(db: AsyncSession, provider, category) -> Service:
    """제공자 소유의 테스트 서비스를 생성합니다."""
    return await make_service(db, provider, category, service_area="Bangalore")


async def make_booking(
    db: AsyncSession,
    service: Service,
    customer: User,
    status: str = BookingStatus.REQUESTED,
) -> Booking:
    """지정 상태의 예약을 직접 생성합니다."""
    b = Booking(
        service_id=service.id,
        customer_id=customer.id,
        provider_id=service.provider_id,
        status=status,
        scheduled_at=datetime.now(timezone.utc) + timedelta(days=2),
        quoted_price=service.base_price,
        currency="INR",
    )
    db.add(b)
    await db.commit()
    await db.refresh(b)
    return b


def future_iso(days: int = 2) -> str:
    """미래 시각 ISO 문자열 — Future timestamp for booking requests."""
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def make_token(user: User) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token(user.email, user.role_names)


def make_refresh_token(user: User) -> str:
    return create_refresh_token(user.email)


def auth_header(user_or_token: User | str) -> dict[str, str]:
    token = user_or_token if isinstance(user_or_token, str) else make_token(user_or_token)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers(customer) -> dict[str, str]:
    return auth_header(customer)


@pytest.fixture
def provider_headers(provider) -> dict[str, str]:
    return auth_header(provider)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return auth_header(admin)
