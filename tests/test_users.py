"""사용자 API 테스트 — 프로필, 비밀번호, 사용자 조회 및 관리자 관리.

User API tests — Profile, password change, directory lookups, nearby
search and admin account management.
"""

from httpx import AsyncClient

from app.models.user import RoleName
from tests.conftest import API, DEFAULT_PASSWORD, auth_header, make_user

URL = f"{API}/users"


class TestProfile:
    """프로필 테스트."""

    async def test_get_profile(self, client: AsyncClient, customer, customer_headers):
        """내 프로필 조회."""
        res = await client.get(f"{URL}/profile", headers=customer_headers)
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["id"] == customer.id
        assert data["full_name"] == "Carol Customer"
        assert data["roles"] == ["CUSTOMER"]

    async def test_update_profile_partial(self, client: AsyncClient, customer_headers):
        """부분 업데이트 — 보낸 필드만 변경."""
        res = await client.put(f"{URL}/profile", json={"city": "Pune"}, headers=customer_headers)
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["city"] == "Pune"
        assert data["first_name"] == "Carol"

    async def test_update_phone_resets_verification(self, client: AsyncClient, db, customer, customer_headers):
        """전화번호 변경 시 인증 플래그 초기화."""
        customer.phone_number = "+919000000001"
        customer.is_phone_verified = True
        await db.commit()

        res = await client.put(f"{URL}/profile", json={"phone_number": "+919000000002"}, headers=customer_headers)
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["phone_number"] == "+919000000002"
        assert data["is_phone_verified"] is False

    async def test_update_phone_taken(self, client: AsyncClient, db, customer_headers, provider):
        """다른 사용자의 전화번호로 변경 시 400."""
        provider.phone_number = "+919000000009"
        await db.commit()
        res = await client.put(f"{URL}/profile", json={"phone_number": "+919000000009"}, headers=customer_headers)
        assert res.status_code == 400
        assert res.json()["message"] == "Phone number is already registered"


class TestChangePassword:
    """비밀번호 변경 테스트."""

    async def test_change_password(self, client: AsyncClient, customer, customer_headers):
        """비밀번호 변경 후 새 비밀번호로 로그인."""
        res = await client.put(f"{URL}/change-password", json={
            "current_password": DEFAULT_PASSWORD,
            "new_password": "N3w@Password",
            "confirm_password": "N3w@Password",
        }, headers=customer_headers)
        assert res.status_code == 200

        login = await client.post(f"{API}/auth/login", json={"email": customer.email, "password": "N3w@Password"})
        assert login.status_code == 200

    async def test_change_password_over_bcrypt_limit(self, client: AsyncClient, customer_headers):
        """72바이트 초과 새 비밀번호는 필드 오류."""
        long_password = "Aa1!" + "a" * 76
        res = await client.put(f"{URL}/change-password", json={
            "current_password": DEFAULT_PASSWORD,
            "new_password": long_password,
            "confirm_password": long_password,
        }, headers=customer_headers)
        assert res.status_code == 400
        assert "new_password" in res.json()["data"]

    async def test_change_password_wrong_current(self, client: AsyncClient, customer_headers):
        """현재 비밀번호 오류 400."""
        res = await client.put(f"{URL}/change-password", json={
            "current_password": "Wrong@Pass1",
            "new_password": "N3w@Password",
            "confirm_password": "N3w@Password",
        }, headers=customer_headers)
        assert res.status_code == 400
        assert res.json()["message"] == "Current password is incorrect"

    async def test_change_password_same_as_current(self, client: AsyncClient, customer_headers):
        """기존과 동일한 비밀번호 400."""
        res = await client.put(f"{URL}/change-password", json={
            "current_password": DEFAULT_PASSWORD,
            "new_password": DEFAULT_PASSWORD,
            "confirm_password": DEFAULT_PASSWORD,
        }, headers=customer_headers)
        assert res.status_code == 400
        assert res.json()["message"] == "New password must be different from current password"

    async def test_change_password_mismatch(self, client: AsyncClient, customer_headers):
        """확인 불일치 400."""
        res = await client.put(f"{URL}/change-password", json={
            "current_password": DEFAULT_PASSWORD,
            "new_password": "N3w@Password",
            "confirm_password": "Other@Pass1",
        }, headers=customer_headers)
        assert res.status_code == 400


class TestDirectory:
    """사용자 조회 테스트."""

    async def test_list_users_paginated(self, client: AsyncClient, admin_headers, customer, provider):
        """사용자 목록 페이지네이션 (0부터 시작)."""
        res = await client.get(URL, params={"page": 0, "size": 2}, headers=admin_headers)
        assert res.status_code == 200
        page = res.json()["data"]
        assert page["page"] == 0
        assert page["size"] == 2
        assert page["total_elements"] == 3
        assert page["total_pages"] == 2
        assert page["first"] is True
        assert page["last"] is False
        assert len(page["content"]) == 2

    async def test_page_params_clamped(self, client: AsyncClient, admin_headers, customer):
        """음수 페이지와 과도한 크기는 보정된다."""
        res = await client.get(URL, params={"page": -3, "size": 1000}, headers=admin_headers)
        assert res.status_code == 200
        page = res.json()["data"]
        assert page["page"] == 0
        assert page["size"] == 100

    async def test_search_users(self, client: AsyncClient, admin_headers, customer, provider):
        """이름/이메일 검색."""
        res = await client.get(f"{URL}/search", params={"searchTerm": "carol"}, headers=admin_headers)
        assert res.status_code == 200
        content = res.json()["data"]["content"]
        assert [u["id"] for u in content] == [customer.id]

    async def test_users_by_role(self, client: AsyncClient, admin_headers, customer, provider):
        """역할별 조회 (대소문자 무시)."""
        res = await client.get(f"{URL}/role/provider", headers=admin_headers)
        assert res.status_code == 200
        assert [u["id"] for u in res.json()["data"]["content"]] == [provider.id]

    async def test_unknown_role(self, client: AsyncClient, admin_headers):
        """존재하지 않는 역할 404."""
        res = await client.get(f"{URL}/role/WIZARD", headers=admin_headers)
        assert res.status_code == 404

    async def test_providers_public(self, client: AsyncClient, provider, customer):
        """제공자 목록은 공개."""
        res = await client.get(f"{URL}/providers")
        assert res.status_code == 200
        assert [u["id"] for u in res.json()["data"]["content"]] == [provider.id]

    async def test_customers_staff_only(self, client: AsyncClient, provider_headers):
        """고객 목록은 STAFF 전용."""
        res = await client.get(f"{URL}/customers", headers=provider_headers)
        assert res.status_code == 403

    async def test_get_user_by_id(self, client: AsyncClient, admin_headers, customer):
        """ID로 사용자 조회."""
        res = await client.get(f"{URL}/{customer.id}", headers=admin_headers)
        assert res.status_code == 200
        assert res.json()["data"]["email"] == customer.email

    async def test_get_missing_user(self, client: AsyncClient, admin_headers):
        """없는 사용자 404."""
        res = await client.get(f"{URL}/9999", headers=admin_headers)
        assert res.status_code == 404
        assert res.json()["message"] == "User not found with id: 9999"

    async def test_stats(self, client: AsyncClient, admin_headers, customer, provider):
        """역할별 통계."""
        res = await client.get(f"{URL}/stats", headers=admin_headers)
        assert res.status_code == 200
        assert res.json()["data"] == {
            "total_users": 3,
            "total_customers": 1,
            "total_providers": 1,
            "total_admins": 1,
            "total_moderators": 0,
        }


class TestAvailability:
    """이메일/전화번호 사용 가능 여부 테스트."""

    async def test_email_taken(self, client: AsyncClient, customer):
        """등록된 이메일은 사용 불가 (대소문자 무시)."""
        res = await client.get(f"{URL}/check-email", params={"email": "CUSTOMER@test.com"})
        assert res.status_code == 200
        assert res.json()["data"]["available"] is False

    async def test_email_free(self, client: AsyncClient, roles):
        """미등록 이메일은 사용 가능."""
        res = await client.get(f"{URL}/check-email", params={"email": "free@test.com"})
        assert res.json()["data"] == {"value": "free@test.com", "available": True}

    async def test_phone_taken(self, client: AsyncClient, db, customer):
        """등록된 전화번호는 사용 불가."""
        customer.phone_number = "+919111111111"
        await db.commit()
        res = await client.get(f"{URL}/check-phone", params={"phoneNumber": "+919111111111"})
        assert res.json()["data"]["available"] is False


class TestNearby:
    """근처 사용자 검색 테스트."""

    async def test_nearby_sorted_by_distance(self, client: AsyncClient, db, roles, customer_headers):
        """반경 내 사용자만 가까운 순으로 반환."""
        near = await make_user(
            db, roles, "near@test.com", [RoleName.PROVIDER], latitude=12.98, longitude=77.60
        )
        nearest = await make_user(
            db, roles, "nearest@test.com", [RoleName.PROVIDER], latitude=12.9717, longitude=77.5947
        )
        await make_user(db, roles, "far@test.com", [RoleName.PROVIDER], latitude=19.07, longitude=72.87)

        res = await client.get(
            f"{URL}/nearby",
            params={"latitude": 12.9716, "longitude": 77.5946, "radiusKm": 5},
            headers=customer_headers,
        )
        assert res.status_code == 200
        assert [u["id"] for u in res.json()["data"]] == [nearest.id, near.id]

    async def test_nearby_requires_auth(self, client: AsyncClient, roles):
        """근처 검색은 인증 필요."""
        res = await client.get(f"{URL}/nearby", params={"latitude": 0, "longitude": 0})
        assert res.status_code == 401


class TestAdminManagement:
    """관리자 사용자 관리 테스트."""

    async def test_verify_email(self, client: AsyncClient, admin_headers, customer):
        """이메일 인증 처리."""
        res = await client.put(f"{URL}/{customer.id}/verify-email", headers=admin_headers)
        assert res.status_code == 200
        assert res.json()["data"]["is_email_verified"] is True

    async def test_verify_phone_without_number(self, client: AsyncClient, admin_headers, customer):
        """전화번호가 없으면 인증 불가."""
        res = await client.put(f"{URL}/{customer.id}/verify-phone", headers=admin_headers)
        assert res.status_code == 400

    async def test_toggle_status_blocks_login(self, client: AsyncClient, admin_headers, customer):
        """비활성화된 계정은 로그인 불가."""
        res = await client.put(
            f"{URL}/{customer.id}/toggle-status", params={"enabled": "false"}, headers=admin_headers
        )
        assert res.status_code == 200
        assert res.json()["data"]["enabled"] is False

        login = await client.post(f"{API}/auth/login", json={"email": customer.email, "password": DEFAULT_PASSWORD})
        assert login.status_code == 401

    async def test_delete_is_soft(self, client: AsyncClient, admin_headers, customer):
        """삭제는 소프트 삭제 — 목록에서 제외되고 로그인 불가."""
        res = await client.delete(f"{URL}/{customer.id}", headers=admin_headers)
        assert res.status_code == 200

        listing = await client.get(URL, headers=admin_headers)
        assert customer.id not in [u["id"] for u in listing.json()["data"]["content"]]

        login = await client.post(f"{API}/auth/login", json={"email": customer.email, "password": DEFAULT_PASSWORD})
        assert login.status_code == 401

    async def test_non_admin_cannot_toggle(self, client: AsyncClient, moderator, customer):
        """모더레이터는 계정 상태 변경 불가."""
        res = await client.put(
            f"{URL}/{customer.id}/toggle-status", params={"enabled": "false"}, headers=auth_header(moderator)
        )
        assert res.status_code == 403
