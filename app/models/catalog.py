"""카탈로그 SQLAlchemy ORM 모델 — 카테고리 및 서비스 등록 정보.

Catalog SQLAlchemy ORM models — Categories and service listings.

Tables:
    - categories: 서비스 카테고리, 자기참조 부모 (Service categories with optional parent)
    - services: 제공자가 등록한 서비스 (Service listings owned by a provider)
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class PricingType:
    """가격 유형 상수 — Pricing type vocabulary."""

    FIXED = "FIXED"
    HOURLY = "HOURLY"
    NEGOTIABLE = "NEGOTIABLE"
    QUOTE_BASED = "QUOTE_BASED"
    PACKAGE = "PACKAGE"

    ALL: tuple[str, ...] = (FIXED, HOURLY, NEGOTIABLE, QUOTE_BASED, PACKAGE)


class Category(Base):
    """카테고리 모델 — 서비스 분류 트리.

    Category model — Two-level-in-practice tree of service categories.
    The parent pointer is nullable; children are looked up by parent id.
    Writes go through ``CategoryService`` which refuses parent cycles.

    Attributes:
        id: 고유 식별자 (Unique identifier)
        name: 카테고리 이름 (Display name)
        slug: URL 슬러그, 고유 (Unique slug, derived from name when absent)
        parent_category_id: 상위 카테고리 FK (Parent category, nullable)
        sort_order: 정렬 순서 (Display order)
        is_featured: 추천 여부 (Featured flag)
    """

    __tablename__ = "categories"

    # 카테고리 고유 식별자 — Category identifier
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 카테고리 이름 — Category name
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # 설명 — Description
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 아이콘 URL — Icon URL
    icon_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 대표 이미지 URL — Image URL
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 슬러그 — URL slug (고유, unique)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False, index=True)
    # 정렬 순서 — Display order (낮을수록 먼저, lower first)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # 추천 여부 — Featured flag
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 상위 카테고리 FK — Parent category (SET NULL: 부모 삭제 시 최상위로)
    parent_category_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    # 활성 상태 — Soft-delete flag
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    parent = relationship("Category", remote_side="Category.id", lazy="selectin")
    services = relationship("Service", back_populates="category")


class Service(Base):
    """서비스 모델 — 제공자가 등록한 예약 가능한 서비스.

    Service listing model. Owned by exactly one provider and filed under
    exactly one category. ``average_rating`` and ``total_reviews`` are a
    denormalized aggregate recomputed whenever a review is written.

    Attributes:
        id: 고유 식별자 (Unique identifier)
        provider_id: 제공자 FK (Owning provider)
        category_id: 카테고리 FK (Category)
        title / description: 제목과 설명 (Title and description)
        base_price: 기본 가격 (Base price, Numeric 10,2)
        pricing_type: 가격 유형 (FIXED/HOURLY/NEGOTIABLE/QUOTE_BASED/PACKAGE)
        min_price / max_price: 가격 범위 (Optional price range)
        price_unit: 가격 단위 (e.g. "per service", "per hour")
        is_available: 예약 가능 여부 (Whether new bookings are accepted)
        slug: URL 슬러그, 고유 (Unique slug derived from the title)
        average_rating / total_reviews: 평점 집계 (Rating aggregate)
        total_bookings: 누적 예약 수 (Booking counter)
    """

    __tablename__ = "services"

    # 서비스 고유 식별자 — Service identifier
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 제공자 FK — Owning provider
    provider_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # 카테고리 FK — Category
    category_id: Mapped[int] = mapped_column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    # 제목 — Title
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    # 설명 — Description
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # 기본 가격 — Base price
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # 가격 유형 — Pricing type
    pricing_type: Mapped[str] = mapped_column(String(20), default=PricingType.FIXED, nullable=False)
    # 최소 가격 — Minimum price (범위 표시용, for range display)
    min_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    # 최대 가격 — Maximum price
    max_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    # 가격 단위 — Price unit
    price_unit: Mapped[str] = mapped_column(String(50), default="per service", nullable=False)
    # 예상 소요 시간(분) — Estimated duration in minutes
    estimated_duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # 서비스 지역 — Free-text service area (검색 location 필터 대상)
    service_area: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 예약 가능 여부 — Availability flag
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 추천 여부 — Featured flag
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 슬러그 — URL slug (고유, unique)
    slug: Mapped[str] = mapped_column(String(220), unique=True, nullable=False, index=True)
    # 평균 평점 — Average overall rating (0.00 ~ 5.00)
    average_rating: Mapped[Decimal] = mapped_column(Numeric(3, 2), default=Decimal("0.00"), nullable=False)
    # 리뷰 수 — Review count
    total_reviews: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # 예약 수 — Booking count
    total_bookings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # 활성 상태 — Soft-delete flag
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    provider = relationship("User", back_populates="services", lazy="selectin")
    category = relationship("Category", back_populates="services", lazy="selectin")

    @property
    def price_display(self) -> str:
        """가격 표시 문자열 — Human readable price label."""
        if self.pricing_type == PricingType.NEGOTIABLE:
            return "Negotiable"
        if self.pricing_type == PricingType.QUOTE_BASED:
            return "Quote Required"
        if self.min_price is not None and self.max_price is not None:
            return f"₹{self.min_price} - ₹{self.max_price} {self.price_unit}"
        return f"₹{self.base_price} {self.price_unit}"
