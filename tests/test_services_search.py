"""서비스 등록 및 검색 API 테스트.

Service listing and search API tests — Provider create/update/delete,
public listings and the combined filter search.
"""

from decimal import Decimal

from httpx import AsyncClient

from tests.conftest import API, auth_header, make_service

URL = f"{API}/services"
SEARCH = f"{API}/search"


def listing_payload(category_id: int, **overrides) -> dict:
    payload = {
        "title": "Bathroom Cleaning",
        "description": "Scrubbing, descaling and disinfecting bathrooms",
        "base_price": "799.00",
        "category_id": category_id,
        "estimated_duration_minutes": 90,
        "service_area": "Bangalore",
    }
    payload.update(overrides)
    return payload


class TestCreateService:
    """서비스 등록 테스트."""

    async def test_create_service(self, client: AsyncClient, provider, provider_headers, category):
        """제공자 서비스 등록 — slug 생성, 집계 0으로 시작."""
        res = await client.post(URL, json=listing_payload(category.id), headers=provider_headers)
        assert res.status_code == 201
        data = res.json()["data"]
        assert data["slug"] == "bathroom-cleaning"
        assert data["base_price"] == 799.0
        assert data["pricing_type"] == "FIXED"
        assert data["average_rating"] == 0.0
        assert data["total_reviews"] == 0
        assert data["total_bookings"] == 0
        assert data["provider"]["id"] == provider.id
        assert data["category_name"] == "Home Cleaning"

    async def test_slug_collision_gets_suffix(self, client: AsyncClient, provider_headers, category):
        """동일 제목은 -2 접미사."""
        await client.post(URL, json=listing_payload(category.id), headers=provider_headers)
        res = await client.post(URL, json=listing_payload(category.id), headers=provider_headers)
        assert res.json()["data"]["slug"] == "bathroom-cleaning-2"

    async def test_customer_cannot_create(self, client: AsyncClient, customer_headers, category):
        """고객은 서비스 등록 불가 (403)."""
        res = await client.post(URL, json=listing_payload(category.id), headers=customer_headers)
        assert res.status_code == 403

    async def test_unknown_category(self, client: AsyncClient, provider_headers, roles):
        """없는 카테고리 404."""
        res = await client.post(URL, json=listing_payload(999), headers=provider_headers)
        assert res.status_code == 404

    async def test_invalid_price(self, client: AsyncClient, provider_headers, category):
        """0원 가격은 검증 오류."""
        res = await client.post(URL, json=listing_payload(category.id, base_price="0"), headers=provider_headers)
        assert res.status_code == 400
        assert "base_price" in res.json()["data"]

    async def test_price_range_check(self, client: AsyncClient, provider_headers, category):
        """최소 가격이 최대 가격보다 크면 검증 오류."""
        res = await client.post(
            URL,
            json=listing_payload(category.id, min_price="900", max_price="500"),
            headers=provider_headers,
        )
        assert res.status_code == 400


class TestModifyService:
    """서비스 수정/삭제 테스트."""

    async def test_owner_updates(self, client: AsyncClient, provider_headers, service):
        """소유자 수정 — 제목 변경 시 slug 재생성."""
        res = await client.put(
            f"{URL}/{service.id}", json={"title": "Premium Home Cleaning"}, headers=provider_headers
        )
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["title"] == "Premium Home Cleaning"
        assert data["slug"] == "premium-home-cleaning"

    async def test_explicit_null_clears_optional_fields(self, client: AsyncClient, provider_headers, service):
        """명시적 null 은 선택 필드를 비우고, 필수 필드는 유지."""
        res = await client.put(
            f"{URL}/{service.id}", json={"min_price": "500", "max_price": "1500"}, headers=provider_headers
        )
        assert res.json()["data"]["max_price"] == 1500.0

        res = await client.put(f"{URL}/{service.id}", json={
            "min_price": None,
            "max_price": None,
            "service_area": None,
            "price_unit": None,
        }, headers=provider_headers)
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["min_price"] is None
        assert data["max_price"] is None
        assert data["service_area"] is None
        assert data["price_unit"] == "per service"
        assert data["title"] == "Deep Home Cleaning"

    async def test_update_inverted_price_range(self, client: AsyncClient, provider_headers, service):
        """기존 최대 가격보다 큰 최소 가격은 400."""
        await client.put(f"{URL}/{service.id}", json={"max_price": "500"}, headers=provider_headers)
        res = await client.put(f"{URL}/{service.id}", json={"min_price": "900"}, headers=provider_headers)
        assert res.status_code == 400
        assert res.json()["message"] == "min_price must not exceed max_price"

    async def test_other_provider_cannot_update(self, client: AsyncClient, other_provider, service):
        """다른 제공자는 수정 불가 (400)."""
        res = await client.put(
            f"{URL}/{service.id}", json={"title": "Hijacked"}, headers=auth_header(other_provider)
        )
        assert res.status_code == 400
        assert res.json()["message"] == "You can only modify your own services"

    async def test_delete_hides_listing(self, client: AsyncClient, provider_headers, service):
        """삭제 후 공개 조회 404."""
        res = await client.delete(f"{URL}/{service.id}", headers=provider_headers)
        assert res.status_code == 200
        assert (await client.get(f"{URL}/{service.id}")).status_code == 404


class TestPublicListings:
    """공개 목록 테스트."""

    async def test_get_by_id_and_slug(self, client: AsyncClient, service):
        """ID와 slug로 조회."""
        by_id = await client.get(f"{URL}/{service.id}")
        assert by_id.status_code == 200
        by_slug = await client.get(f"{URL}/slug/{service.slug}")
        assert by_slug.json()["data"]["id"] == service.id

    async def test_unavailable_excluded_from_list(self, client: AsyncClient, db, provider, category, service):
        """이용 불가 서비스는 목록에서 제외."""
        await make_service(db, provider, category, title="Paused Service", is_available=False)
        res = await client.get(URL)
        assert [s["id"] for s in res.json()["data"]["content"]] == [service.id]

    async def test_by_category(self, client: AsyncClient, category, service):
        """카테고리별 목록."""
        res = await client.get(f"{URL}/category/{category.id}")
        assert res.json()["data"]["total_elements"] == 1

    async def test_by_provider(self, client: AsyncClient, provider, service):
        """제공자별 목록."""
        res = await client.get(f"{URL}/provider/{provider.id}")
        assert [s["id"] for s in res.json()["data"]["content"]] == [service.id]

    async def test_keyword_search(self, client: AsyncClient, service):
        """제목/설명 키워드 검색 (대소문자 무시)."""
        res = await client.get(f"{URL}/search", params={"q": "DEEP"})
        assert res.json()["data"]["total_elements"] == 1
        res = await client.get(f"{URL}/search", params={"q": "plumbing"})
        assert res.json()["data"]["total_elements"] == 0

    async def test_featured(self, client: AsyncClient, db, provider, category, service):
        """추천 서비스만 반환."""
        featured = await make_service(db, provider, category, title="Featured Cleaning", is_featured=True)
        res = await client.get(f"{URL}/featured")
        assert [s["id"] for s in res.json()["data"]["content"]] == [featured.id]


class TestSearch:
    """복합 검색 테스트."""

    async def _seed(self, db, provider, category):
        cheap = await make_service(
            db, provider, category, title="Quick Dusting", base_price="300.00",
            service_area="Mysore", average_rating=Decimal("3.50"), total_reviews=2,
        )
        mid = await make_service(
            db, provider, category, title="Sofa Shampoo", base_price="900.00",
            service_area="Bangalore", average_rating=Decimal("4.80"), total_reviews=5,
        )
        pricey = await make_service(
            db, provider, category, title="Full Villa Cleaning", base_price="5000.00",
            service_area="Bangalore North", average_rating=Decimal("4.80"), total_reviews=9,
        )
        return cheap, mid, pricey

    async def test_price_range(self, client: AsyncClient, db, provider, category):
        """가격 범위 필터 (경계 포함)."""
        cheap, mid, _ = await self._seed(db, provider, category)
        res = await client.get(SEARCH, params={"minPrice": "300", "maxPrice": "900"})
        ids = {s["id"] for s in res.json()["data"]["content"]}
        assert ids == {cheap.id, mid.id}

    async def test_rating_and_location(self, client: AsyncClient, db, provider, category):
        """최소 평점과 지역 필터."""
        _, mid, pricey = await self._seed(db, provider, category)
        res = await client.get(SEARCH, params={"minRating": "4.5", "location": "bangalore"})
        ids = {s["id"] for s in res.json()["data"]["content"]}
        assert ids == {mid.id, pricey.id}

    async def test_category_filter(self, client: AsyncClient, db, provider, category):
        """카테고리 필터 — 다른 카테고리 ID면 결과 없음."""
        await self._seed(db, provider, category)
        res = await client.get(SEARCH, params={"categoryId": category.id + 100})
        assert res.json()["data"]["total_elements"] == 0

    async def test_inverted_price_range(self, client: AsyncClient, roles):
        """최소 가격 > 최대 가격이면 400."""
        res = await client.get(SEARCH, params={"minPrice": "500", "maxPrice": "100"})
        assert res.status_code == 400

    async def test_popular_ordering(self, client: AsyncClient, db, provider, category):
        """인기순 — 평점 내림차순, 동점이면 리뷰 수 내림차순."""
        cheap, mid, pricey = await self._seed(db, provider, category)
        res = await client.get(f"{SEARCH}/popular")
        assert [s["id"] for s in res.json()["data"]["content"]] == [pricey.id, mid.id, cheap.id]
