"""결제 원장 서비스 테스트 — 수수료 계산, 상태 전이, 누적 환불.

Payment ledger service tests — Fee breakdown, status transitions and
cumulative refunds. The ledger has no HTTP surface, so the service is
exercised directly against the test session.
"""

from decimal import Decimal

import pytest
import pytest_asyncio

from app.models.booking import BookingStatus
from app.models.payment import PaymentStatus
from app.services.payment_service import payment_service
from app.utils.exceptions import BadRequestError, DuplicateError, InvalidStateError
from tests.conftest import make_booking


@pytest_asyncio.fixture
async def completed_booking(db, customer, service):
    return await make_booking(db, service, customer, BookingStatus.COMPLETED)


class TestFees:
    """수수료 계산 테스트."""

    def test_fee_breakdown(self):
        """1000원 결제의 수수료 내역."""
        fees = payment_service.calculate_fees(Decimal("1000.00"))
        assert fees.processing_fee == Decimal("31.00")
        assert fees.platform_fee == Decimal("50.00")
        assert fees.net_amount == Decimal("969.00")
        assert fees.provider_amount == Decimal("919.00")

    def test_fee_rounding(self):
        """소수 둘째 자리 반올림."""
        fees = payment_service.calculate_fees(Decimal("99.99"))
        assert fees.processing_fee == Decimal("4.90")
        assert fees.platform_fee == Decimal("5.00")
        assert fees.net_amount == Decimal("95.09")
        assert fees.provider_amount == Decimal("90.09")


class TestRecordPayment:
    """결제 기록 테스트."""

    async def test_record_defaults_to_quoted_price(self, db, completed_booking):
        """금액 미입력 시 견적 가격, PENDING 상태."""
        payment = await payment_service.record_payment(db, completed_booking, "credit_card")
        assert payment.status == PaymentStatus.PENDING
        assert payment.payment_method == "CREDIT_CARD"
        assert payment.amount == Decimal("1000.00")
        assert payment.provider_amount == Decimal("919.00")
        assert payment.description == f"Payment for booking #{completed_booking.id}"

    async def test_record_prefers_final_price(self, db, completed_booking):
        """최종 가격이 있으면 최종 가격 사용."""
        completed_booking.final_price = Decimal("1200.00")
        await db.flush()
        payment = await payment_service.record_payment(db, completed_booking, "CASH")
        assert payment.amount == Decimal("1200.00")

    async def test_invalid_method(self, db, completed_booking):
        """알 수 없는 결제 수단 400."""
        with pytest.raises(BadRequestError):
            await payment_service.record_payment(db, completed_booking, "BARTER")

    async def test_one_payment_per_booking(self, db, completed_booking):
        """예약당 결제 1건."""
        await payment_service.record_payment(db, completed_booking, "CASH")
        with pytest.raises(DuplicateError):
            await payment_service.record_payment(db, completed_booking, "CASH")


class TestTransitions:
    """결제 상태 전이 테스트."""

    async def test_authorize_capture_complete(self, db, completed_booking):
        """승인 → 매입 → 완료."""
        payment = await payment_service.record_payment(db, completed_booking, "DEBIT_CARD")
        payment = await payment_service.authorize(db, payment)
        assert payment.status == PaymentStatus.AUTHORIZED
        payment = await payment_service.capture(db, payment)
        assert payment.status == PaymentStatus.CAPTURED
        assert payment.captured_at is not None
        payment = await payment_service.complete(db, payment)
        assert payment.status == PaymentStatus.COMPLETED

    async def test_complete_from_pending_stamps_capture(self, db, completed_booking):
        """PENDING에서 바로 완료 시 매입 시각 기록."""
        payment = await payment_service.record_payment(db, completed_booking, "CASH")
        payment = await payment_service.complete(db, payment)
        assert payment.captured_at is not None

    async def test_fail_records_code(self, db, completed_booking):
        """실패 코드와 메시지 기록."""
        payment = await payment_service.record_payment(db, completed_booking, "CREDIT_CARD")
        payment = await payment_service.fail(db, payment, "card_declined", "Insufficient funds")
        assert payment.status == PaymentStatus.FAILED
        assert payment.failure_code == "card_declined"

    async def test_cannot_capture_failed(self, db, completed_booking):
        """실패한 결제는 매입 불가."""
        payment = await payment_service.record_payment(db, completed_booking, "CREDIT_CARD")
        payment = await payment_service.fail(db, payment, "card_declined")
        with pytest.raises(InvalidStateError) as exc:
            await payment_service.capture(db, payment)
        assert exc.value.detail == "Payment cannot be captured in current status: FAILED"

    async def test_cannot_authorize_twice(self, db, completed_booking):
        """승인은 PENDING에서만."""
        payment = await payment_service.record_payment(db, completed_booking, "CREDIT_CARD")
        payment = await payment_service.authorize(db, payment)
        with pytest.raises(InvalidStateError):
            await payment_service.authorize(db, payment)


class TestRefunds:
    """환불 테스트."""

    async def _captured(self, db, booking):
        payment = await payment_service.record_payment(db, booking, "CREDIT_CARD")
        return await payment_service.capture(db, payment)

    async def test_partial_then_full_refund(self, db, completed_booking):
        """부분 환불 누적 후 전액 환불."""
        payment = await self._captured(db, completed_booking)

        payment = await payment_service.refund(db, payment, Decimal("400.00"), "Late arrival")
        assert payment.status == PaymentStatus.PARTIALLY_REFUNDED
        assert payment.refund_amount == Decimal("400.00")
        assert payment_service.refundable_amount(payment) == Decimal("600.00")

        payment = await payment_service.refund(db, payment, Decimal("600.00"))
        assert payment.status == PaymentStatus.REFUNDED
        assert payment.refund_amount == Decimal("1000.00")
        assert payment_service.refundable_amount(payment) == Decimal("0.00")

    async def test_refund_exceeding_amount(self, db, completed_booking):
        """누적 환불이 결제 금액 초과 시 400."""
        payment = await self._captured(db, completed_booking)
        await payment_service.refund(db, payment, Decimal("700.00"))
        with pytest.raises(BadRequestError) as exc:
            await payment_service.refund(db, payment, Decimal("400.00"))
        assert exc.value.detail == "Refund amount exceeds payment amount"

    async def test_refund_non_positive(self, db, completed_booking):
        """0 이하 환불 400."""
        payment = await self._captured(db, completed_booking)
        with pytest.raises(BadRequestError):
            await payment_service.refund(db, payment, Decimal("0"))

    async def test_refund_pending_rejected(self, db, completed_booking):
        """매입 전 결제는 환불 불가."""
        payment = await payment_service.record_payment(db, completed_booking, "CASH")
        with pytest.raises(InvalidStateError):
            await payment_service.refund(db, payment, Decimal("10.00"))
