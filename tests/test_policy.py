"""접근 정책 테스트 — 경로 패턴 매칭과 인증/인가 파이프라인.

Access policy tests — Path pattern matching, first-match ordering and the
authentication/authorization pipeline (401 vs 403, token edge cases).
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.api.deps import api_relative_path, is_bypassed
from app.api.policy import (
    ADMIN_ONLY,
    AUTHENTICATED,
    PUBLIC,
    STAFF,
    RoutePolicy,
    find_policy,
)
from app.utils.jwt import create_access_token
from tests.conftest import API, auth_header, make_refresh_token


class TestPatternMatching:
    """경로 패턴 매칭 테스트."""

    @pytest.mark.parametrize(
        ("pattern", "path", "expected"),
        [
            ("/services/*", "/services/5", True),
            ("/services/*", "/services/5/extra", False),
            ("/services/*", "/services", False),
            ("/auth/**", "/auth", True),
            ("/auth/**", "/auth/login", True),
            ("/reviews/service/**", "/reviews/service/3", True),
            ("/users/*/verify-email", "/users/9/verify-email", True),
            ("/users/*/verify-email", "/users/9/verify-phone", False),
        ],
    )
    def test_segment_patterns(self, pattern: str, path: str, expected: bool):
        """`*` 은 한 세그먼트, `**` 는 0개 이상."""
        assert RoutePolicy(None, pattern, PUBLIC).matches("GET", path) is expected

    def test_method_must_match(self):
        """메서드가 다르면 불일치."""
        policy = RoutePolicy("POST", "/services", PUBLIC)
        assert policy.matches("post", "/services")
        assert not policy.matches("GET", "/services")

    def test_first_match_wins(self):
        """첫 번째 일치 규칙이 적용된다."""
        policies = [
            RoutePolicy("GET", "/users/stats", STAFF),
            RoutePolicy("GET", "/users/*", PUBLIC),
        ]
        assert find_policy("GET", "/users/stats", policies).roles == STAFF
        assert find_policy("GET", "/users/7", policies).roles == PUBLIC

    def test_route_table_ordering(self):
        """실제 정책 테이블의 대표 경로."""
        assert find_policy("GET", "/users/providers").is_public
        assert find_policy("GET", "/users/profile").roles == AUTHENTICATED
        assert find_policy("GET", "/users/search").roles == STAFF
        assert find_policy("DELETE", "/users/4").roles == ADMIN_ONLY
        assert find_policy("GET", "/reviews/customer").roles == {"CUSTOMER"}
        assert find_policy("GET", "/reviews/12").is_public
        assert find_policy("PATCH", "/bookings/1") is None


class TestPathHelpers:
    """경로 헬퍼 테스트."""

    def test_api_relative_path(self):
        """API 접두사 제거."""
        assert api_relative_path("/api/v1/services/3") == "/services/3"
        assert api_relative_path("/api/v1") == "/"
        assert api_relative_path("/health") == "/health"

    def test_bypass_paths(self):
        """허용 목록 경로."""
        assert is_bypassed("/api/v1/auth/login")
        assert is_bypassed("/api/v1/auth/refresh")
        assert is_bypassed("/health")
        assert not is_bypassed("/api/v1/auth/validate")
        assert not is_bypassed("/api/v1/users/profile")


class TestPipeline:
    """인증/인가 파이프라인 테스트."""

    async def test_public_route_anonymous(self, client: AsyncClient, roles):
        """공개 경로는 익명 접근 가능."""
        res = await client.get(f"{API}/categories")
        assert res.status_code == 200

    async def test_protected_route_anonymous(self, client: AsyncClient, roles):
        """보호된 경로 익명 접근 시 401."""
        res = await client.get(f"{API}/users/profile")
        assert res.status_code == 401
        body = res.json()
        assert body["success"] is False
        assert body["path"] == f"{API}/users/profile"

    async def test_wrong_role_forbidden(self, client: AsyncClient, customer_headers):
        """역할 불일치 시 403."""
        res = await client.get(f"{API}/users/stats", headers=customer_headers)
        assert res.status_code == 403
        assert res.json()["message"] == "Access denied"

    async def test_moderator_allowed_on_staff_route(self, client: AsyncClient, moderator):
        """모더레이터는 STAFF 경로 허용."""
        res = await client.get(f"{API}/users/stats", headers=auth_header(moderator))
        assert res.status_code == 200

    async def test_moderator_denied_on_admin_route(self, client: AsyncClient, moderator, customer):
        """모더레이터는 ADMIN 전용 경로 거부."""
        res = await client.delete(f"{API}/users/{customer.id}", headers=auth_header(moderator))
        assert res.status_code == 403

    async def test_refresh_token_as_access(self, client: AsyncClient, customer):
        """리프레시 토큰을 액세스 토큰으로 사용하면 401."""
        res = await client.get(f"{API}/users/profile", headers=auth_header(make_refresh_token(customer)))
        assert res.status_code == 401
        assert res.json()["message"] == "Access token required"

    async def test_refresh_token_on_public_route(self, client: AsyncClient, customer):
        """공개 경로에서도 리프레시 토큰은 거부된다."""
        res = await client.get(f"{API}/categories", headers=auth_header(make_refresh_token(customer)))
        assert res.status_code == 401

    async def test_invalid_token_is_anonymous(self, client: AsyncClient, roles):
        """잘못된 토큰은 익명 처리 — 공개 경로 200."""
        res = await client.get(f"{API}/categories", headers=auth_header("broken.token"))
        assert res.status_code == 200

    async def test_expired_token_on_protected_route(self, client: AsyncClient, customer):
        """만료 토큰으로 보호된 경로 접근 시 401."""
        token = create_access_token(customer.email, customer.role_names, expires_delta=timedelta(seconds=-1))
        res = await client.get(f"{API}/users/profile", headers=auth_header(token))
        assert res.status_code == 401

    async def test_disabled_account_is_anonymous(self, client: AsyncClient, db, customer):
        """비활성 계정 토큰은 익명으로 처리된다."""
        headers = auth_header(customer)
        customer.enabled = False
        await db.commit()
        res = await client.get(f"{API}/users/profile", headers=headers)
        assert res.status_code == 401

    async def test_roles_come_from_database(self, client: AsyncClient, db, customer, roles):
        """토큰의 역할 클레임이 아니라 현재 DB 역할로 인가한다."""
        forged = create_access_token(customer.email, ["ADMIN"])
        res = await client.get(f"{API}/users/stats", headers=auth_header(forged))
        assert res.status_code == 403

    async def test_health_is_open(self, client: AsyncClient):
        """헬스 체크는 인증 없이 접근."""
        res = await client.get("/health")
        assert res.status_code == 200
        body = res.json()
        assert body["success"] is True
        assert body["statusCode"] == 200
        assert body["path"] == "/health"
        assert body["data"]["status"] == "UP"
        assert body["data"]["application"] == "ServeNow API"
        assert body["data"]["version"] == "1.0.0"
