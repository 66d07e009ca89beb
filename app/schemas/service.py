"""서비스(등록 상품) Pydantic 요청/응답 스키마 정의.

Service listing request/response schema definitions.
Money values are exchanged as JSON numbers with two decimals.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from app.schemas.user import UserSummary

# 가격 유형 검증 패턴 — Allowed pricing types
PRICING_TYPE_PATTERN: str = r"^(FIXED|HOURLY|NEGOTIABLE|QUOTE_BASED|PACKAGE)$"


class ServiceCreate(BaseModel):
    """서비스 등록 요청 스키마.

    Attributes:
        title: 제목 (최대 200자)
        description: 설명 (최대 2000자)
        base_price: 기본 가격 (0.01 이상)
        category_id: 카테고리 ID
        price_unit: 가격 단위 (default "per service")
    """

    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
    base_price: Decimal = Field(..., ge=Decimal("0.01"), max_digits=10, decimal_places=2)
    category_id: int
    pricing_type: str = Field(default="FIXED", pattern=PRICING_TYPE_PATTERN)
    min_price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    max_price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    price_unit: str = Field(default="per service", max_length=50)
    estimated_duration_minutes: int | None = Field(default=None, ge=1)
    service_area: str | None = Field(default=None, max_length=255)
    is_available: bool = True

    @model_validator(mode="after")
    def check_price_range(self) -> "ServiceCreate":
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price must not exceed max_price")
        return self


class ServiceUpdate(BaseModel):
    """서비스 수정 요청 (부분 업데이트)."""

    title: str | None = Field(default=None, min_length=3, max_length=200)
    description: str | None = Field(default=None, min_length=10, max_length=2000)
    base_price: Decimal | None = Field(default=None, ge=Decimal("0.01"), max_digits=10, decimal_places=2)
    category_id: int | None = None
    pricing_type: str | None = Field(default=None, pattern=PRICING_TYPE_PATTERN)
    min_price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    max_price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    price_unit: str | None = Field(default=None, max_length=50)
    estimated_duration_minutes: int | None = Field(default=None, ge=1)
    service_area: str | None = Field(default=None, max_length=255)
    is_available: bool | None = None


class ServiceResponse(BaseModel):
    """서비스 응답 스키마."""

    id: int
    title: str
    description: str
    slug: str
    base_price: float
    pricing_type: str
    min_price: float | None = None
    max_price: float | None = None
    price_unit: str
    price_display: str
    estimated_duration_minutes: int | None = None
    service_area: str | None = None
    is_available: bool
    is_featured: bool
    average_rating: float
    total_reviews: int
    total_bookings: int
    category_id: int
    category_name: str
    provider: UserSummary
    created_at: datetime | None = None
