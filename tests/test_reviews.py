"""리뷰 API 테스트 — 작성 규칙, 자동 제목, 평점 집계, 제공자 답변.

Review API tests — Creation preconditions, generated titles, the service
rating aggregate and provider responses.
"""

import logging
from decimal import Decimal

from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.models.booking import BookingStatus
from app.models.catalog import Service
from app.models.review import Review
from app.repositories.review_repository import review_repository
from app.services.review_service import generate_title
from tests.conftest import API, auth_header, make_booking

URL = f"{API}/reviews"


def review_payload(booking_id: int, **overrides) -> dict:
    payload = {
        "booking_id": booking_id,
        "overall_rating": "4.0",
        "comment": "Very thorough and punctual cleaning crew",
    }
    payload.update(overrides)
    return payload


async def review_count(db) -> int:
    return await db.scalar(select(func.count(Review.id)))


class TestGenerateTitle:
    """자동 제목 생성 테스트."""

    def test_short_comment_kept(self):
        """짧은 본문은 그대로 사용."""
        assert generate_title(Decimal("4.8"), "Great job overall") == "Excellent service - Great job overall"

    def test_long_comment_truncated(self):
        """50자를 넘으면 47자 + '...'."""
        comment = "x" * 60
        assert generate_title(Decimal("2.0"), comment) == f"Poor service - {'x' * 47}..."

    def test_exactly_fifty_characters(self):
        """정확히 50자면 자르지 않는다."""
        comment = "y" * 50
        assert generate_title(Decimal("3.0"), comment) == f"Average service - {comment}"


class TestCreateReview:
    """리뷰 작성 테스트."""

    async def test_create_review_defaults(self, client: AsyncClient, db, customer, customer_headers, service):
        """세부 평점 기본값과 자동 제목."""
        booking = await make_booking(db, service, customer, BookingStatus.COMPLETED)
        res = await client.post(URL, json=review_payload(booking.id), headers=customer_headers)
        assert res.status_code == 201
        data = res.json()["data"]
        assert data["quality_rating"] == 4.0
        assert data["value_rating"] == 4.0
        assert data["rating_description"] == "Good"
        assert data["title"] == "Good service - Very thorough and punctual cleaning crew"
        assert data["provider_id"] == service.provider_id
        assert data["customer"]["id"] == customer.id

    async def test_explicit_title_and_ratings(self, client: AsyncClient, db, customer, customer_headers, service):
        """입력한 제목과 세부 평점 사용."""
        booking = await make_booking(db, service, customer, BookingStatus.COMPLETED)
        res = await client.post(URL, json=review_payload(
            booking.id, title="  Spotless  ", punctuality_rating="3.5"
        ), headers=customer_headers)
        data = res.json()["data"]
        assert data["title"] == "Spotless"
        assert data["punctuality_rating"] == 3.5
        assert data["quality_rating"] == 4.0

    async def test_missing_booking(self, client: AsyncClient, customer_headers):
        """없는 예약 404."""
        res = await client.post(URL, json=review_payload(777), headers=customer_headers)
        assert res.status_code == 404

    async def test_not_own_booking(self, client: AsyncClient, db, customer, other_customer, service):
        """다른 고객의 예약 리뷰 불가."""
        booking = await make_booking(db, service, customer, BookingStatus.COMPLETED)
        res = await client.post(URL, json=review_payload(booking.id), headers=auth_header(other_customer))
        assert res.status_code == 400
        assert res.json()["message"] == "You can only review your own bookings"
        await db.rollback()
        assert await review_count(db) == 0

    async def test_not_completed(self, client: AsyncClient, db, customer, customer_headers, service):
        """완료되지 않은 예약 리뷰 불가."""
        booking = await make_booking(db, service, customer, BookingStatus.ACCEPTED)
        res = await client.post(URL, json=review_payload(booking.id), headers=customer_headers)
        assert res.status_code == 400
        assert res.json()["message"] == "You can only review completed bookings"
        await db.rollback()
        assert await review_count(db) == 0

    async def test_duplicate_review(self, client: AsyncClient, db, customer, customer_headers, service):
        """예약당 리뷰 1개."""
        booking = await make_booking(db, service, customer, BookingStatus.COMPLETED)
        await client.post(URL, json=review_payload(booking.id), headers=customer_headers)
        res = await client.post(URL, json=review_payload(booking.id), headers=customer_headers)
        assert res.status_code == 400
        assert res.json()["message"] == "You have already reviewed this booking"
        await db.rollback()
        assert await review_count(db) == 1

    async def test_rating_out_of_range(self, client: AsyncClient, db, customer, customer_headers, service):
        """평점 범위 밖 검증 오류."""
        booking = await make_booking(db, service, customer, BookingStatus.COMPLETED)
        res = await client.post(URL, json=review_payload(booking.id, overall_rating="5.5"), headers=customer_headers)
        assert res.status_code == 400
        assert "overall_rating" in res.json()["data"]

    async def test_provider_cannot_review(self, client: AsyncClient, provider_headers):
        """제공자는 리뷰 작성 불가 (403)."""
        res = await client.post(URL, json=review_payload(1), headers=provider_headers)
        assert res.status_code == 403


class TestRatingAggregate:
    """서비스 평점 집계 테스트."""

    async def test_average_recomputed(self, client: AsyncClient, db, customer, customer_headers, service):
        """리뷰마다 평균 평점과 리뷰 수 갱신 (소수 둘째 자리 반올림)."""
        for rating in ("5.0", "4.0", "4.0"):
            booking = await make_booking(db, service, customer, BookingStatus.COMPLETED)
            res = await client.post(URL, json=review_payload(booking.id, overall_rating=rating),
                                    headers=customer_headers)
            assert res.status_code == 201

        listing = await client.get(f"{API}/services/{service.id}")
        data = listing.json()["data"]
        assert data["total_reviews"] == 3
        assert data["average_rating"] == 4.33

    async def test_recompute_failure_keeps_review(
        self, client: AsyncClient, db, customer, customer_headers, service, monkeypatch, caplog
    ):
        """평점 재계산 실패는 기록만 하고 리뷰는 저장된다."""
        async def broken_aggregate(session, service_id):
            raise OperationalError("SELECT avg(overall_rating)", {}, Exception("database is locked"))

        monkeypatch.setattr(review_repository, "rating_aggregate", broken_aggregate)
        service_id = service.id
        caplog.set_level(logging.ERROR, logger="app.services.review_service")

        booking = await make_booking(db, service, customer, BookingStatus.COMPLETED)
        res = await client.post(URL, json=review_payload(booking.id), headers=customer_headers)
        assert res.status_code == 201

        await db.rollback()
        assert await review_count(db) == 1
        stored = await db.get(Service, service_id)
        assert stored.total_reviews == 0
        assert any("Failed to update rating" in r.getMessage() for r in caplog.records)


class TestConcurrentDuplicate:
    """동시 중복 리뷰 테스트."""

    async def test_unique_booking_constraint_maps_to_400(
        self, client: AsyncClient, db, customer, customer_headers, service, monkeypatch
    ):
        """사전 중복 확인을 통과해도 고유 제약 위반은 400."""
        booking = await make_booking(db, service, customer, BookingStatus.COMPLETED)
        first = await client.post(URL, json=review_payload(booking.id), headers=customer_headers)
        assert first.status_code == 201

        async def no_existing_review(session, booking_id):
            return None

        monkeypatch.setattr(review_repository, "get_by_booking_id", no_existing_review)
        res = await client.post(URL, json=review_payload(booking.id), headers=customer_headers)
        assert res.status_code == 400
        assert res.json()["message"] == "You have already reviewed this booking"

        await db.rollback()
        assert await review_count(db) == 1


class TestReadReviews:
    """리뷰 조회 테스트."""

    async def test_public_listings(self, client: AsyncClient, db, customer, customer_headers, provider, service):
        """서비스/제공자별 리뷰는 공개."""
        booking = await make_booking(db, service, customer, BookingStatus.COMPLETED)
        created = await client.post(URL, json=review_payload(booking.id), headers=customer_headers)
        review_id = created.json()["data"]["id"]

        by_service = await client.get(f"{URL}/service/{service.id}")
        assert [r["id"] for r in by_service.json()["data"]["content"]] == [review_id]

        by_provider = await client.get(f"{URL}/provider/{provider.id}")
        assert by_provider.json()["data"]["total_elements"] == 1

        single = await client.get(f"{URL}/{review_id}")
        assert single.status_code == 200

    async def test_customer_reviews(self, client: AsyncClient, db, customer, customer_headers, service):
        """내 리뷰 목록 (고객 전용)."""
        booking = await make_booking(db, service, customer, BookingStatus.COMPLETED)
        await client.post(URL, json=review_payload(booking.id), headers=customer_headers)
        res = await client.get(f"{URL}/customer", headers=customer_headers)
        assert res.json()["data"]["total_elements"] == 1

    async def test_missing_review(self, client: AsyncClient, roles):
        """없는 리뷰 404."""
        res = await client.get(f"{URL}/55")
        assert res.status_code == 404


class TestProviderResponse:
    """제공자 답변 테스트."""

    async def _review(self, client, db, customer, service) -> int:
        booking = await make_booking(db, service, customer, BookingStatus.COMPLETED)
        res = await client.post(URL, json=review_payload(booking.id), headers=auth_header(customer))
        return res.json()["data"]["id"]

    async def test_respond(self, client: AsyncClient, db, customer, provider_headers, service):
        """리뷰 대상 제공자 답변."""
        review_id = await self._review(client, db, customer, service)
        res = await client.put(f"{URL}/{review_id}/response", json={"response": " Thank you! "},
                               headers=provider_headers)
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["provider_response"] == "Thank you!"
        assert data["provider_response_at"] is not None

    async def test_other_provider_cannot_respond(self, client: AsyncClient, db, customer, other_provider, service):
        """다른 제공자 답변 불가."""
        review_id = await self._review(client, db, customer, service)
        res = await client.put(f"{URL}/{review_id}/response", json={"response": "Hi"},
                               headers=auth_header(other_provider))
        assert res.status_code == 400
        assert res.json()["message"] == "You can only respond to reviews of your own services"
