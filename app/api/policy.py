"""경로별 접근 정책 — 선언형 역할 기반 접근 제어 테이블.

Route access policy — A declarative table of (method, path pattern, roles)
rules evaluated for every API request before its handler runs.

Patterns are relative to ``settings.API_PREFIX``:
    ``*``  exactly one path segment
    ``**`` zero or more path segments

The first matching rule wins. Requests that match no rule require an
authenticated principal of any role.
"""

from dataclasses import dataclass

from app.models.user import RoleName

# 특수 역할 집합 — Special role sets
PUBLIC: frozenset[str] = frozenset({"*PUBLIC*"})
AUTHENTICATED: frozenset[str] = frozenset({"*AUTHENTICATED*"})

STAFF: frozenset[str] = frozenset({RoleName.ADMIN, RoleName.MODERATOR})
ADMIN_ONLY: frozenset[str] = frozenset({RoleName.ADMIN})
CUSTOMER_ONLY: frozenset[str] = frozenset({RoleName.CUSTOMER})
PROVIDER_ONLY: frozenset[str] = frozenset({RoleName.PROVIDER})


@dataclass(frozen=True)
class RoutePolicy:
    """단일 접근 규칙 — One access rule.

    Attributes:
        method: HTTP 메서드, None이면 모든 메서드 (HTTP method; None matches any)
        pattern: 경로 패턴 (Path pattern relative to the API prefix)
        roles: 허용 역할 (PUBLIC, AUTHENTICATED, or any-of role names)
    """

    method: str | None
    pattern: str
    roles: frozenset[str]

    def matches(self, method: str, path: str) -> bool:
        if self.method is not None and self.method != method.upper():
            return False
        return _match_segments(_segments(self.pattern), _segments(path))

    @property
    def is_public(self) -> bool:
        return self.roles == PUBLIC

    @property
    def any_role(self) -> bool:
        return self.roles == AUTHENTICATED


def _segments(path: str) -> list[str]:
    return [part for part in path.strip("/").split("/") if part]


def _match_segments(pattern: list[str], path: list[str]) -> bool:
    if not pattern:
        return not path
    head: str = pattern[0]
    if head == "**":
        return any(_match_segments(pattern[1:], path[i:]) for i in range(len(path) + 1))
    if not path:
        return False
    if head != "*" and head != path[0]:
        return False
    return _match_segments(pattern[1:], path[1:])


# 접근 정책 테이블 (순서 중요) — Policy table, order matters
ROUTE_POLICIES: list[RoutePolicy] = [
    # 인증 — Auth
    RoutePolicy(None, "/auth/**", PUBLIC),
    # 사용자 — Users
    RoutePolicy("GET", "/users/providers", PUBLIC),
    RoutePolicy("GET", "/users/check-email", PUBLIC),
    RoutePolicy("GET", "/users/check-phone", PUBLIC),
    RoutePolicy(None, "/users/profile", AUTHENTICATED),
    RoutePolicy("PUT", "/users/change-password", AUTHENTICATED),
    RoutePolicy("GET", "/users/nearby", AUTHENTICATED),
    RoutePolicy("GET", "/users/search", STAFF),
    RoutePolicy("GET", "/users/stats", STAFF),
    RoutePolicy("GET", "/users/customers", STAFF),
    RoutePolicy("GET", "/users/role/*", STAFF),
    RoutePolicy("PUT", "/users/*/verify-email", ADMIN_ONLY),
    RoutePolicy("PUT", "/users/*/verify-phone", ADMIN_ONLY),
    RoutePolicy("PUT", "/users/*/toggle-status", ADMIN_ONLY),
    RoutePolicy("DELETE", "/users/**", ADMIN_ONLY),
    RoutePolicy("GET", "/users", STAFF),
    RoutePolicy("GET", "/users/*", STAFF),
    # 카테고리 — Categories
    RoutePolicy("GET", "/categories/**", PUBLIC),
    RoutePolicy("POST", "/categories", ADMIN_ONLY),
    RoutePolicy("PUT", "/categories/*", ADMIN_ONLY),
    # 서비스 — Service listings
    RoutePolicy("GET", "/services/**", PUBLIC),
    RoutePolicy("POST", "/services", PROVIDER_ONLY),
    RoutePolicy("PUT", "/services/*", PROVIDER_ONLY),
    RoutePolicy("DELETE", "/services/*", PROVIDER_ONLY),
    # 검색 — Search
    RoutePolicy("GET", "/search/**", PUBLIC),
    # 예약 — Bookings
    RoutePolicy("POST", "/bookings", CUSTOMER_ONLY),
    RoutePolicy("GET", "/bookings/customer", CUSTOMER_ONLY),
    RoutePolicy("GET", "/bookings/provider", PROVIDER_ONLY),
    RoutePolicy("PUT", "/bookings/*/accept", PROVIDER_ONLY),
    RoutePolicy("PUT", "/bookings/*/reject", PROVIDER_ONLY),
    RoutePolicy("PUT", "/bookings/*/start", PROVIDER_ONLY),
    RoutePolicy("PUT", "/bookings/*/complete", PROVIDER_ONLY),
    RoutePolicy("PUT", "/bookings/*/cancel", frozenset({RoleName.CUSTOMER, RoleName.ADMIN})),
    RoutePolicy("GET", "/bookings/*", frozenset(RoleName.ALL)),
    # 리뷰 — Reviews
    RoutePolicy("GET", "/reviews/customer", CUSTOMER_ONLY),
    RoutePolicy("GET", "/reviews/service/**", PUBLIC),
    RoutePolicy("GET", "/reviews/provider/**", PUBLIC),
    RoutePolicy("GET", "/reviews/*", PUBLIC),
    RoutePolicy("POST", "/reviews", CUSTOMER_ONLY),
    RoutePolicy("PUT", "/reviews/*/response", PROVIDER_ONLY),
]


def find_policy(method: str, path: str, policies: list[RoutePolicy] | None = None) -> RoutePolicy | None:
    """첫 번째 일치 규칙 — First rule matching the request, or None."""
    for policy in policies if policies is not None else ROUTE_POLICIES:
        if policy.matches(method, path):
            return policy
    return None
