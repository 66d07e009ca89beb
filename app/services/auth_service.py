"""인증 서비스 — 회원가입, 로그인, 토큰 갱신/검증 비즈니스 로직.

Auth Service — Business logic for registration, login, token refresh and
token validation. Tokens are stateless: nothing is stored server side and
logout only records the event.
"""

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.user_repository import user_repository
from app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from app.schemas.user import UserResponse
from app.services.user_service import user_service
from app.utils.exceptions import UnauthorizedError
from app.utils.jwt import (
    access_token_expires_in,
    create_access_token,
    create_refresh_token,
    extract_subject,
    is_access_token,
    is_refresh_token,
    is_token_valid,
)
from app.utils.logger import get_logger
from app.utils.password import verify_password

logger = get_logger(__name__)


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    """

    def _build_auth_response(self, user: User, refresh_token: str | None = None) -> AuthResponse:
        """토큰 응답을 생성합니다.

        Issue a fresh access token and wrap it with the user profile.
        When ``refresh_token`` is given it is returned unchanged instead of
        issuing a new one.
        """
        access_token: str = create_access_token(user.email, user.role_names)
        return AuthResponse(
            access_token=access_token,
            refresh_token=refresh_token or create_refresh_token(user.email),
            expires_in=access_token_expires_in(),
            user=user_service.to_response(user),
            login_time=datetime.now(timezone.utc),
        )

    async def register(self, db: AsyncSession, data: RegisterRequest) -> AuthResponse:
        """회원가입 후 토큰을 발급합니다."""
        user: User = await user_service.register_user(db, data)
        return self._build_auth_response(user)

    async def login(self, db: AsyncSession, data: LoginRequest) -> AuthResponse:
        """로그인을 처리합니다.

        Raises:
            UnauthorizedError: 잘못된 인증 정보 또는 비활성 계정
                               (Invalid credentials or disabled account)
        """
        user: User | None = await user_repository.get_active_by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            logger.warning("Failed login attempt for %s", data.email)
            raise UnauthorizedError("Invalid email or password")

        if not user.enabled:
            logger.warning("Login attempt on disabled account id=%s", user.id)
            raise UnauthorizedError("Account is disabled")

        logger.info("User id=%s logged in", user.id)
        return self._build_auth_response(user)

    async def _load_token_user(self, db: AsyncSession, token: str) -> User:
        """토큰 주체의 활성 사용자를 조회하고 토큰을 검증합니다."""
        if not is_token_valid(token):
            raise UnauthorizedError("Invalid or expired token")
        email: str | None = extract_subject(token)
        if email is None:
            raise UnauthorizedError("Invalid token")

        user: User | None = await user_repository.get_active_by_email(db, email)
        if user is None or not user.enabled or not is_token_valid(token, user.email):
            raise UnauthorizedError("Invalid or expired token")
        return user

    async def refresh(self, db: AsyncSession, refresh_token: str) -> AuthResponse:
        """리프레시 토큰으로 새 액세스 토큰을 발급합니다.

        The same refresh token is returned; only the access token is renewed.

        Raises:
            UnauthorizedError: 리프레시 토큰이 아니거나 유효하지 않을 때
                               (Not a refresh token, or invalid/expired)
        """
        user: User = await self._load_token_user(db, refresh_token)
        if not is_refresh_token(refresh_token):
            raise UnauthorizedError("Refresh token required")
        logger.info("Access token refreshed for user id=%s", user.id)
        return self._build_auth_response(user, refresh_token=refresh_token)

    async def validate(self, db: AsyncSession, access_token: str) -> UserResponse:
        """액세스 토큰을 검증하고 사용자 정보를 반환합니다."""
        user: User = await self._load_token_user(db, access_token)
        if not is_access_token(access_token):
            raise UnauthorizedError("Access token required")
        return user_service.to_response(user)

    async def logout(self, email: str | None) -> None:
        """로그아웃 — 토큰은 무상태이므로 기록만 남깁니다."""
        logger.info("Logout requested by %s", email or "anonymous")


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
