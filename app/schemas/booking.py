"""예약 Pydantic 요청/응답 스키마 정의.

Booking request/response schema definitions.
"""

from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from app.schemas.user import UserSummary


class BookingCreate(BaseModel):
    """예약 생성 요청 스키마.

    Attributes:
        service_id: 예약할 서비스 ID
        scheduled_at: 예약 일시, 미래여야 함 (Must be in the future; naive values are UTC)
        customer_notes: 고객 메모 (최대 500자)
        service_address: 서비스 주소 (최대 200자)
    """

    service_id: int
    scheduled_at: datetime
    customer_notes: str | None = Field(default=None, max_length=500)
    service_address: str | None = Field(default=None, max_length=200)

    @field_validator("scheduled_at")
    @classmethod
    def must_be_future(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        if value <= datetime.now(timezone.utc):
            raise ValueError("Scheduled time must be in the future")
        return value


class BookingReasonRequest(BaseModel):
    """거절/취소 사유 요청 — Optional reason for reject and cancel."""

    reason: str | None = Field(default=None, max_length=500)


class BookingCompleteRequest(BaseModel):
    """완료 요청 — 최종 가격 미입력 시 견적 가격 사용."""

    final_price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    provider_notes: str | None = Field(default=None, max_length=1000)


class BookingResponse(BaseModel):
    """예약 응답 스키마."""

    id: int
    status: str
    service_id: int
    service_title: str
    customer: UserSummary
    provider: UserSummary
    scheduled_at: datetime
    estimated_duration_minutes: int | None = None
    actual_start_time: datetime | None = None
    actual_end_time: datetime | None = None
    actual_duration_minutes: int | None = None
    quoted_price: float
    final_price: float | None = None
    currency: str
    service_address: str | None = None
    customer_notes: str | None = None
    provider_notes: str | None = None
    requested_at: datetime | None = None
    accepted_at: datetime | None = None
    rejected_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    cancelled_by: str | None = None
    created_at: datetime | None = None
