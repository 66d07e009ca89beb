"""결제 SQLAlchemy ORM 모델 — 예약별 수동 결제 원장.

Payment SQLAlchemy ORM model. A passive ledger row attached one-to-one to a
booking; no gateway is called and no booking transition creates one.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class PaymentStatus:
    """결제 상태 상수 — Payment status vocabulary."""

    PENDING = "PENDING"
    AUTHORIZED = "AUTHORIZED"
    CAPTURED = "CAPTURED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"
    PARTIALLY_REFUNDED = "PARTIALLY_REFUNDED"

    CAPTURABLE: frozenset[str] = frozenset({PENDING, AUTHORIZED})
    REFUNDABLE: frozenset[str] = frozenset({CAPTURED, COMPLETED, PARTIALLY_REFUNDED})


class PaymentMethod:
    """결제 수단 상수 — Payment method vocabulary."""

    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    DIGITAL_WALLET = "DIGITAL_WALLET"
    CASH = "CASH"

    ALL: tuple[str, ...] = (CREDIT_CARD, DEBIT_CARD, BANK_TRANSFER, DIGITAL_WALLET, CASH)


class Payment(Base):
    """결제 모델 — 금액, 상태, 수수료 내역.

    Payment model. The fee breakdown is computed once when the row is
    created (see ``PaymentService.calculate_fees``).

    Attributes:
        booking_id: 예약 FK, 1:1 (Booking, unique)
        amount / currency: 결제 금액 (Charged amount and currency)
        status: 결제 상태 (PENDING ... PARTIALLY_REFUNDED)
        processing_fee / platform_fee: 수수료 (Gateway and platform fees)
        net_amount: 결제 수수료 차감 금액 (Amount minus processing fee)
        provider_amount: 제공자 정산 금액 (Net minus platform fee)
        refund_amount: 누적 환불 금액 (Cumulative refunded amount)
    """

    __tablename__ = "payments"

    # 결제 고유 식별자 — Payment identifier
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 예약 FK — Booking (1:1, unique)
    booking_id: Mapped[int] = mapped_column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), unique=True, nullable=False)
    # 결제 금액 — Amount
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # 통화 — Currency code
    currency: Mapped[str] = mapped_column(String(3), default="INR", nullable=False)
    # 결제 상태 — Payment status
    status: Mapped[str] = mapped_column(String(20), default=PaymentStatus.PENDING, nullable=False)
    # 결제 수단 — Payment method
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    # 결제 대행 수수료 — Processing fee
    processing_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"), nullable=False)
    # 플랫폼 수수료 — Platform fee
    platform_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"), nullable=False)
    # 순 금액 — Net amount
    net_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"), nullable=False)
    # 제공자 정산 금액 — Provider payout
    provider_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"), nullable=False)
    # 환불 금액 — Refunded amount (누적, cumulative)
    refund_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"), nullable=False)
    # 환불 사유 — Refund reason
    refund_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 실패 코드 — Failure code
    failure_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # 실패 메시지 — Failure message
    failure_message: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 설명 — Description
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 승인 시각 — Authorized at
    authorized_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 매입 시각 — Captured at
    captured_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 실패 시각 — Failed at
    failed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 환불 시각 — Refunded at
    refunded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 활성 상태 — Soft-delete flag
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    booking = relationship("Booking", lazy="selectin")
