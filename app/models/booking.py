"""예약 SQLAlchemy ORM 모델.

Booking SQLAlchemy ORM model and its status vocabulary.

Tables:
    - bookings: 고객이 서비스에 대해 생성한 예약 (Customer bookings of a service)

Status machine::

    REQUESTED ──accept──▶ ACCEPTED ──start──▶ IN_PROGRESS ──complete──▶ COMPLETED
        │                    │  └────────────complete───────────────────▲
        ├──reject──▶ REJECTED └──cancel──▶ CANCELLED
        └──cancel──▶ CANCELLED
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class BookingStatus:
    """예약 상태 상수 및 허용 전이 — Booking status vocabulary and transitions."""

    REQUESTED = "REQUESTED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    ALL: tuple[str, ...] = (REQUESTED, ACCEPTED, REJECTED, IN_PROGRESS, COMPLETED, CANCELLED)
    TERMINAL: frozenset[str] = frozenset({COMPLETED, REJECTED, CANCELLED})

    # 상태별 허용 다음 상태 — Allowed target states per source state
    TRANSITIONS: dict[str, frozenset[str]] = {
        REQUESTED: frozenset({ACCEPTED, REJECTED, CANCELLED}),
        ACCEPTED: frozenset({IN_PROGRESS, COMPLETED, CANCELLED}),
        IN_PROGRESS: frozenset({COMPLETED}),
        COMPLETED: frozenset(),
        REJECTED: frozenset(),
        CANCELLED: frozenset(),
    }


class CancelledBy:
    """취소/거절 주체 — Actor tag recorded on cancellation or rejection."""

    CUSTOMER = "CUSTOMER"
    PROVIDER = "PROVIDER"
    ADMIN = "ADMIN"
    SYSTEM = "SYSTEM"


class Booking(Base):
    """예약 모델 — 서비스 예약과 상태 이력.

    Booking model. ``provider_id`` is copied from ``service.provider_id`` at
    creation and must always equal it. Each transition stamps its own
    timestamp column.

    Attributes:
        id: 고유 식별자 (Unique identifier)
        service_id: 서비스 FK (Booked service)
        customer_id: 고객 FK (Booking customer)
        provider_id: 제공자 FK, 서비스에서 복사 (Provider copied from the service)
        status: 예약 상태 (REQUESTED/ACCEPTED/REJECTED/IN_PROGRESS/COMPLETED/CANCELLED)
        scheduled_at: 예약 일시 (Scheduled date and time)
        quoted_price / final_price: 견적/최종 가격 (Quoted and final price)
        requested_at ... cancelled_at: 상태별 전이 시각 (Per-transition timestamps)
        cancellation_reason: 취소/거절 사유 (Cancellation or rejection reason)
        cancelled_by: 취소/거절 주체 (CUSTOMER/PROVIDER/ADMIN/SYSTEM)
    """

    __tablename__ = "bookings"

    # 예약 고유 식별자 — Booking identifier
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 서비스 FK — Booked service
    service_id: Mapped[int] = mapped_column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    # 고객 FK — Customer
    customer_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # 제공자 FK — Provider (service.provider_id 복사본, denormalized copy)
    provider_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # 예약 상태 — Booking status
    status: Mapped[str] = mapped_column(String(20), default=BookingStatus.REQUESTED, nullable=False)
    # 예약 일시 — Scheduled date/time
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # 예상 소요 시간(분) — Estimated duration in minutes
    estimated_duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # 실제 시작 시각 — Actual start time
    actual_start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 실제 종료 시각 — Actual end time
    actual_end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 견적 가격 — Quoted price (예약 시점 기본 가격, base price at booking time)
    quoted_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # 최종 가격 — Final price (완료 시 확정, fixed on completion)
    final_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    # 통화 — Currency code
    currency: Mapped[str] = mapped_column(String(3), default="INR", nullable=False)
    # 서비스 주소 — Service address
    service_address: Mapped[str | None] = mapped_column(String(200), nullable=True)
    # 고객 메모 — Customer notes
    customer_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 제공자 메모 — Provider notes
    provider_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 요청 시각 — Requested at
    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수락 시각 — Accepted at
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 거절 시각 — Rejected at
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 시작 시각 — Started at
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 완료 시각 — Completed at
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 취소 시각 — Cancelled at
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 취소/거절 사유 — Cancellation or rejection reason
    cancellation_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 취소/거절 주체 — Cancellation actor
    cancelled_by: Mapped[str | None] = mapped_column(String(20), nullable=True)
    # 활성 상태 — Soft-delete flag
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    service = relationship("Service", lazy="selectin")
    customer = relationship("User", foreign_keys=[customer_id], lazy="selectin")
    provider = relationship("User", foreign_keys=[provider_id], lazy="selectin")

    def can_transition_to(self, target: str) -> bool:
        return target in BookingStatus.TRANSITIONS.get(self.status, frozenset())

    @property
    def actual_duration_minutes(self) -> int | None:
        """실제 소요 시간(분) — Actual duration computed from start/end times."""
        if self.actual_start_time is None or self.actual_end_time is None:
            return None
        elapsed = _as_utc(self.actual_end_time) - _as_utc(self.actual_start_time)
        return int(elapsed.total_seconds() // 60)


def _as_utc(value: datetime) -> datetime:
    # 일부 드라이버는 tz 정보 없이 반환 — some drivers return naive UTC values
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
