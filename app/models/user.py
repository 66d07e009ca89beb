"""사용자 및 역할 관련 SQLAlchemy ORM 모델 정의.

User and Role SQLAlchemy ORM model definitions.
Implements role-based access control with a many-to-many user/role link.

Tables:
    - roles: 시스템 역할 (CUSTOMER, PROVIDER, ADMIN, MODERATOR)
    - users: 사용자 계정 (User accounts)
    - user_roles: 사용자-역할 연결 테이블 (User/role association)
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class RoleName:
    """역할 이름 상수 — Role name vocabulary."""

    CUSTOMER = "CUSTOMER"
    PROVIDER = "PROVIDER"
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"

    ALL: tuple[str, ...] = (CUSTOMER, PROVIDER, ADMIN, MODERATOR)
    # 회원가입으로 선택 가능한 역할 — Roles a user may pick at registration
    SELF_REGISTERED: tuple[str, ...] = (CUSTOMER, PROVIDER)


# 사용자-역할 연결 테이블 — User/role association table (composite PK)
user_roles: Table = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    """역할 모델 — 접근 제어 단위.

    Role model — Unit of access control referenced by the authorization policy.

    Attributes:
        id: 고유 식별자 (Unique identifier)
        name: 역할 이름, 전역 고유 (Role name, globally unique)
        description: 설명 (Free-text description)
        is_active: 활성 상태 (Soft-delete flag)

    Relationships:
        users: 이 역할을 가진 사용자 목록 (Users holding this role)
    """

    __tablename__ = "roles"

    # 역할 고유 식별자 — Role identifier (auto-increment)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 역할 이름 — Role name (CUSTOMER/PROVIDER/ADMIN/MODERATOR)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    # 역할 설명 — Role description
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 활성 상태 — Soft-delete flag
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    users = relationship("User", secondary=user_roles, back_populates="roles")


class User(Base):
    """사용자 모델 — 고객, 서비스 제공자, 관리자 계정.

    User model — Customer, provider and staff accounts.
    Email is unique; the role set is never empty after registration.
    The persisted user is not the request principal; see
    ``app.api.deps.AuthenticatedPrincipal``.

    Attributes:
        id: 고유 식별자 (Unique identifier)
        first_name / last_name: 이름 (Given and family names)
        email: 로그인 이메일, 고유 (Login email, unique)
        password_hash: bcrypt 해시 (bcrypt-hashed password)
        phone_number: 전화번호 (E.164-style phone number, optional, unique)
        address / city / state / postal_code / country: 주소 (Postal address)
        latitude / longitude: 좌표 (Optional coordinates for the nearby query)
        is_email_verified / is_phone_verified: 인증 여부 (Verification flags)
        enabled: 계정 사용 가능 여부 (Account enabled flag)
        is_active: 활성 상태 (Soft-delete flag)

    Relationships:
        roles: 역할 목록 (Assigned roles, many-to-many)
        services: 제공 서비스 목록 (Service listings owned as provider)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User identifier (auto-increment)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 이름 — First name
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    # 성 — Last name
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    # 이메일 — Login email (고유, unique)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # 전화번호 — Phone number (optional, unique when present)
    phone_number: Mapped[str | None] = mapped_column(String(20), unique=True, nullable=True)
    # 주소 — Street address
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 도시 — City
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # 주/도 — State or province
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # 우편번호 — Postal code
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    # 국가 — Country
    country: Mapped[str | None] = mapped_column(String(100), nullable=True, default="India")
    # 위도 — Latitude (-90 ~ 90)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    # 경도 — Longitude (-180 ~ 180)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    # 프로필 이미지 URL — Profile image URL
    profile_image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 이메일 인증 여부 — Email verified flag
    is_email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 전화번호 인증 여부 — Phone verified flag
    is_phone_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 계정 사용 가능 여부 — Account enabled flag (관리자가 토글, toggled by admins)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 활성 상태 — Soft-delete flag
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    roles = relationship("Role", secondary=user_roles, back_populates="users", lazy="selectin")
    services = relationship("Service", back_populates="provider")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def role_names(self) -> list[str]:
        return sorted(role.name for role in self.roles)

    def has_role(self, role_name: str) -> bool:
        return any(role.name == role_name for role in self.roles)
