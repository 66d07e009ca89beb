"""리뷰 Pydantic 요청/응답 스키마 정의.

Review request/response schema definitions.
Ratings range from 1.0 to 5.0 with one decimal place.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.schemas.user import UserSummary


def _rating(default: object = ...) -> object:
    return Field(default, ge=Decimal("1.0"), le=Decimal("5.0"), max_digits=2, decimal_places=1)


class ReviewCreate(BaseModel):
    """리뷰 작성 요청 스키마.

    Attributes:
        booking_id: 완료된 예약 ID (Completed booking being reviewed)
        overall_rating: 종합 평점 (1.0 ~ 5.0)
        quality_rating ... value_rating: 세부 평점, 미입력 시 종합 평점 사용
        comment: 본문 (10 ~ 1000자)
        title: 제목, 미입력 시 자동 생성 (Generated when absent)
    """

    booking_id: int
    overall_rating: Decimal = _rating()
    quality_rating: Decimal | None = _rating(None)
    communication_rating: Decimal | None = _rating(None)
    punctuality_rating: Decimal | None = _rating(None)
    value_rating: Decimal | None = _rating(None)
    title: str | None = Field(default=None, max_length=200)
    comment: str = Field(..., min_length=10, max_length=1000)


class ProviderResponseRequest(BaseModel):
    """제공자 답변 요청."""

    response: str = Field(..., min_length=1, max_length=1000)


class ReviewResponse(BaseModel):
    """리뷰 응답 스키마."""

    id: int
    booking_id: int
    service_id: int
    service_title: str
    provider_id: int
    customer: UserSummary
    overall_rating: float
    quality_rating: float
    communication_rating: float
    punctuality_rating: float
    value_rating: float
    rating_description: str
    title: str
    comment: str
    provider_response: str | None = None
    provider_response_at: datetime | None = None
    created_at: datetime | None = None
