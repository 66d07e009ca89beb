"""인증 주체(Principal) 정의.

Authenticated request principal. A transient value built once per request
by the authentication pipeline, deliberately separate from the persisted
``User`` row; handlers that need the row load it through
``app.api.deps.get_current_user``.
"""

from dataclasses import dataclass, field

from app.models.user import RoleName, User


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """요청 범위 인증 주체 — Request-scoped authenticated principal.

    Attributes:
        user_id: 사용자 ID (Authenticated user id)
        email: 토큰 주체 이메일 (Token subject)
        roles: 역할 이름 집합 (Role names)
    """

    user_id: int
    email: str
    roles: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_user(cls, user: User) -> "AuthenticatedPrincipal":
        return cls(user_id=user.id, email=user.email, roles=frozenset(user.role_names))

    @property
    def authorities(self) -> list[str]:
        """ROLE_ 접두 권한 목록 — Role-derived authorities."""
        return sorted(f"ROLE_{role}" for role in self.roles)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_any_role(self, roles: frozenset[str] | set[str]) -> bool:
        return bool(self.roles & roles)

    @property
    def is_admin(self) -> bool:
        return RoleName.ADMIN in self.roles

    @property
    def is_staff(self) -> bool:
        """관리자 또는 모더레이터 — Admin or moderator."""
        return bool(self.roles & {RoleName.ADMIN, RoleName.MODERATOR})
