"""리뷰 SQLAlchemy ORM 모델.

Review SQLAlchemy ORM model. One review per completed booking, written by
the booking's customer.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


def rating_description(rating: float) -> str:
    """평점 설명 문구 — Label for an overall rating."""
    if rating >= 4.5:
        return "Excellent"
    if rating >= 3.5:
        return "Good"
    if rating >= 2.5:
        return "Average"
    if rating >= 1.5:
        return "Poor"
    return "Terrible"


class Review(Base):
    """리뷰 모델 — 완료된 예약에 대한 고객 평가.

    Review model. ``service_id`` and ``provider_id`` are copied from the
    booking so listing queries avoid a join.

    Attributes:
        booking_id: 예약 FK, 1:1 (Reviewed booking, unique)
        overall_rating: 종합 평점 (1.0 ~ 5.0, one decimal)
        quality_rating / communication_rating / punctuality_rating / value_rating:
            세부 평점 (Detailed ratings, default to the overall rating)
        title: 제목, 미입력 시 자동 생성 (Title, generated when absent)
        comment: 본문 (Comment text)
        provider_response: 제공자 답변 (Provider response)
    """

    __tablename__ = "reviews"

    # 리뷰 고유 식별자 — Review identifier
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 예약 FK — Booking (1:1, unique)
    booking_id: Mapped[int] = mapped_column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), unique=True, nullable=False)
    # 서비스 FK — Service (예약에서 복사, copied from booking)
    service_id: Mapped[int] = mapped_column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    # 고객 FK — Reviewing customer
    customer_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # 제공자 FK — Reviewed provider
    provider_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # 종합 평점 — Overall rating
    overall_rating: Mapped[Decimal] = mapped_column(Numeric(2, 1), nullable=False)
    # 품질 평점 — Quality rating
    quality_rating: Mapped[Decimal] = mapped_column(Numeric(2, 1), nullable=False)
    # 소통 평점 — Communication rating
    communication_rating: Mapped[Decimal] = mapped_column(Numeric(2, 1), nullable=False)
    # 시간 준수 평점 — Punctuality rating
    punctuality_rating: Mapped[Decimal] = mapped_column(Numeric(2, 1), nullable=False)
    # 가성비 평점 — Value-for-money rating
    value_rating: Mapped[Decimal] = mapped_column(Numeric(2, 1), nullable=False)
    # 제목 — Title
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    # 본문 — Comment
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    # 제공자 답변 — Provider response
    provider_response: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 제공자 답변 시각 — Provider response time
    provider_response_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 활성 상태 — Soft-delete flag (평점 집계 대상, counted in the aggregate)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    customer = relationship("User", foreign_keys=[customer_id], lazy="selectin")
    service = relationship("Service", lazy="selectin")
