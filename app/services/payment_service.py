"""결제 서비스 — 예약별 결제 원장 기록 및 상태 전이.

Payment Service — A passive payment ledger. No gateway is contacted; the
service records what happened and keeps fees and refunds consistent.

Fee breakdown (fixed when the payment is recorded)::

    processing_fee  = amount × PROCESSING_FEE_RATE + PROCESSING_FEE_FIXED
    platform_fee    = amount × PLATFORM_FEE_RATE
    net_amount      = amount − processing_fee
    provider_amount = net_amount − platform_fee
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.booking import Booking
from app.models.payment import Payment, PaymentMethod, PaymentStatus
from app.repositories.payment_repository import payment_repository
from app.utils.exceptions import BadRequestError, DuplicateError, InvalidStateError, NotFoundError
from app.utils.logger import get_logger

logger = get_logger(__name__)

CENT: Decimal = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FeeBreakdown:
    """수수료 내역 — Fee breakdown for one payment amount."""

    processing_fee: Decimal
    platform_fee: Decimal
    net_amount: Decimal
    provider_amount: Decimal


class PaymentService:
    """결제 원장 비즈니스 로직 — Payment ledger business logic."""

    def calculate_fees(self, amount: Decimal) -> FeeBreakdown:
        """수수료를 계산합니다 (소수점 둘째 자리 반올림)."""
        processing: Decimal = _money(
            amount * Decimal(str(settings.PROCESSING_FEE_RATE)) + Decimal(str(settings.PROCESSING_FEE_FIXED))
        )
        platform: Decimal = _money(amount * Decimal(str(settings.PLATFORM_FEE_RATE)))
        net: Decimal = _money(amount - processing)
        return FeeBreakdown(
            processing_fee=processing,
            platform_fee=platform,
            net_amount=net,
            provider_amount=_money(net - platform),
        )

    async def get_payment(self, db: AsyncSession, payment_id: int) -> Payment:
        payment: Payment | None = await payment_repository.get_by_id(db, payment_id, active_only=True)
        if payment is None:
            raise NotFoundError.for_field("Payment", "id", payment_id)
        return payment

    async def record_payment(
        self,
        db: AsyncSession,
        booking: Booking,
        method: str,
        amount: Decimal | None = None,
    ) -> Payment:
        """예약에 대한 결제를 PENDING 상태로 기록합니다.

        The amount defaults to the booking's final price, falling back to the
        quoted price.

        Raises:
            BadRequestError: 잘못된 결제 수단 또는 금액 (Unknown method or non-positive amount)
            DuplicateError: 이미 결제가 존재 (The booking already has a payment)
        """
        method = method.upper()
        if method not in PaymentMethod.ALL:
            raise BadRequestError(f"Invalid payment method: {method}")
        if await payment_repository.get_by_booking_id(db, booking.id) is not None:
            raise DuplicateError(f"Payment already exists for booking id: {booking.id}")

        if amount is None:
            amount = booking.final_price if booking.final_price is not None else booking.quoted_price
        amount = _money(Decimal(amount))
        if amount <= 0:
            raise BadRequestError("Payment amount must be positive")

        fees: FeeBreakdown = self.calculate_fees(amount)
        payment: Payment = await payment_repository.create(
            db,
            {
                "booking_id": booking.id,
                "amount": amount,
                "currency": booking.currency,
                "status": PaymentStatus.PENDING,
                "payment_method": method,
                "processing_fee": fees.processing_fee,
                "platform_fee": fees.platform_fee,
                "net_amount": fees.net_amount,
                "provider_amount": fees.provider_amount,
                "refund_amount": Decimal("0.00"),
                "description": f"Payment for booking #{booking.id}",
            },
        )
        logger.info("Recorded payment id=%s for booking id=%s amount=%s", payment.id, booking.id, amount)
        return payment

    async def authorize(self, db: AsyncSession, payment: Payment) -> Payment:
        if payment.status != PaymentStatus.PENDING:
            raise InvalidStateError(f"Payment cannot be authorized in current status: {payment.status}")
        payment = await payment_repository.update(
            db, payment, {"status": PaymentStatus.AUTHORIZED, "authorized_at": _now()}
        )
        logger.info("Payment id=%s authorized", payment.id)
        return payment

    async def capture(self, db: AsyncSession, payment: Payment) -> Payment:
        """결제 매입 — Only from PENDING or AUTHORIZED."""
        if payment.status not in PaymentStatus.CAPTURABLE:
            raise InvalidStateError(f"Payment cannot be captured in current status: {payment.status}")
        payment = await payment_repository.update(
            db, payment, {"status": PaymentStatus.CAPTURED, "captured_at": _now()}
        )
        logger.info("Payment id=%s captured", payment.id)
        return payment

    async def complete(self, db: AsyncSession, payment: Payment) -> Payment:
        if payment.status not in PaymentStatus.CAPTURABLE | {PaymentStatus.CAPTURED}:
            raise InvalidStateError(f"Payment cannot be completed in current status: {payment.status}")
        update_data: dict = {"status": PaymentStatus.COMPLETED}
        if payment.captured_at is None:
            update_data["captured_at"] = _now()
        payment = await payment_repository.update(db, payment, update_data)
        logger.info("Payment id=%s completed", payment.id)
        return payment

    async def fail(
        self,
        db: AsyncSession,
        payment: Payment,
        failure_code: str,
        failure_message: str | None = None,
    ) -> Payment:
        if payment.status not in PaymentStatus.CAPTURABLE:
            raise InvalidStateError(f"Payment cannot be failed in current status: {payment.status}")
        payment = await payment_repository.update(
            db,
            payment,
            {
                "status": PaymentStatus.FAILED,
                "failed_at": _now(),
                "failure_code": failure_code,
                "failure_message": failure_message,
            },
        )
        logger.warning("Payment id=%s failed code=%s", payment.id, failure_code)
        return payment

    def refundable_amount(self, payment: Payment) -> Decimal:
        if payment.status not in PaymentStatus.REFUNDABLE:
            return Decimal("0.00")
        return payment.amount - (payment.refund_amount or Decimal("0.00"))

    async def refund(
        self,
        db: AsyncSession,
        payment: Payment,
        amount: Decimal,
        reason: str | None = None,
    ) -> Payment:
        """환불 — Cumulative refund, never more than the paid amount.

        Status becomes REFUNDED once the whole amount is returned, otherwise
        PARTIALLY_REFUNDED.

        Raises:
            InvalidStateError: 환불 불가 상태 (Status does not allow refunds)
            BadRequestError: 금액이 0 이하이거나 잔액 초과 (Non-positive or exceeds remaining amount)
        """
        if payment.status not in PaymentStatus.REFUNDABLE:
            raise InvalidStateError(f"Payment cannot be refunded in current status: {payment.status}")
        amount = _money(Decimal(amount))
        if amount <= 0:
            raise BadRequestError("Refund amount must be positive")

        total_refunded: Decimal = (payment.refund_amount or Decimal("0.00")) + amount
        if total_refunded > payment.amount:
            raise BadRequestError("Refund amount exceeds payment amount")

        status: str = PaymentStatus.REFUNDED if total_refunded == payment.amount else PaymentStatus.PARTIALLY_REFUNDED
        payment = await payment_repository.update(
            db,
            payment,
            {
                "refund_amount": total_refunded,
                "refund_reason": reason,
                "refunded_at": _now(),
                "status": status,
            },
        )
        logger.info("Payment id=%s refunded %s (total %s)", payment.id, amount, total_refunded)
        return payment


# 싱글턴 인스턴스 — Singleton instance
payment_service: PaymentService = PaymentService()
