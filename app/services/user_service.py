"""사용자 서비스 — 회원가입, 프로필, 사용자 관리 비즈니스 로직.

User Service — Registration, profile maintenance and administrative
user management.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.user import Role, RoleName, User
from app.repositories.role_repository import role_repository
from app.repositories.user_repository import user_repository
from app.schemas.auth import RegisterRequest
from app.schemas.user import (
    ChangePasswordRequest,
    UpdateProfileRequest,
    UserResponse,
    UserStatsResponse,
    UserSummary,
)
from app.utils.exceptions import BadRequestError, NotFoundError
from app.utils.logger import get_logger
from app.utils.pagination import Page
from app.utils.password import hash_password, verify_password

logger = get_logger(__name__)


class UserService:
    """사용자 관련 비즈니스 로직을 처리하는 서비스.

    Service handling user registration, profile and admin operations.
    """

    def to_response(self, user: User) -> UserResponse:
        """User 모델을 응답 스키마로 변환합니다 — Map a User row to its response."""
        return UserResponse(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=user.full_name,
            email=user.email,
            phone_number=user.phone_number,
            address=user.address,
            city=user.city,
            state=user.state,
            postal_code=user.postal_code,
            country=user.country,
            latitude=user.latitude,
            longitude=user.longitude,
            profile_image_url=user.profile_image_url,
            is_email_verified=user.is_email_verified,
            is_phone_verified=user.is_phone_verified,
            enabled=user.enabled,
            is_active=user.is_active,
            roles=user.role_names,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def to_summary(self, user: User) -> UserSummary:
        return UserSummary(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            phone_number=user.phone_number,
        )

    def _page(self, users: list[User] | tuple, total: int, page: int, size: int) -> Page:
        return Page.build([self.to_response(u) for u in users], total, page, size)

    async def register_user(self, db: AsyncSession, data: RegisterRequest) -> User:
        """새 사용자를 등록합니다.

        Register a new user. Preconditions are checked in order and each
        failure raises before anything is written:
        password confirmation, email uniqueness, phone uniqueness, user type.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 회원가입 요청 (Registration request)

        Returns:
            User: 생성된 사용자 (Created user with its role attached)

        Raises:
            BadRequestError: 전제 조건 위반 시 (Any failed precondition)
        """
        if data.password != data.confirm_password:
            raise BadRequestError("Password and confirm password do not match")

        email: str = data.email.lower()
        if await user_repository.email_exists(db, email):
            raise BadRequestError("Email address is already registered")

        if data.phone_number and await user_repository.phone_exists(db, data.phone_number):
            raise BadRequestError("Phone number is already registered")

        user_type: str = data.user_type.upper()
        role: Role | None = None
        if user_type in RoleName.SELF_REGISTERED:
            role = await role_repository.get_by_name(db, user_type)
        if role is None:
            raise BadRequestError(f"Invalid user type: {data.user_type}")

        user: User = User(
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            email=email,
            password_hash=hash_password(data.password),
            phone_number=data.phone_number,
            address=data.address,
            city=data.city,
            state=data.state,
            postal_code=data.postal_code,
            country=data.country,
            latitude=data.latitude,
            longitude=data.longitude,
            is_email_verified=False,
            is_phone_verified=False,
            enabled=True,
            is_active=True,
        )
        user.roles = [role]
        try:
            # 동시 가입 요청은 email/phone 고유 제약에서 걸림 (a concurrent registration trips the unique constraints)
            async with db.begin_nested():
                db.add(user)
                await db.flush()
        except IntegrityError as exc:
            logger.warning("Concurrent registration conflict for %s", email)
            if await user_repository.get_by_email(db, email) is not None:
                raise BadRequestError("Email address is already registered") from exc
            raise BadRequestError("Phone number is already registered") from exc
        await db.refresh(user)

        logger.info("Registered user id=%s role=%s", user.id, role.name)
        return user

    async def get_user(self, db: AsyncSession, user_id: int) -> User:
        """ID로 사용자를 조회합니다. 없으면 404."""
        user: User | None = await user_repository.get_by_id(db, user_id)
        if user is None:
            raise NotFoundError.for_field("User", "id", user_id)
        return user

    async def get_active_user(self, db: AsyncSession, user_id: int) -> User:
        user: User | None = await user_repository.get_by_id(db, user_id, active_only=True)
        if user is None:
            raise NotFoundError.for_field("User", "id", user_id)
        return user

    async def get_profile(self, db: AsyncSession, user_id: int) -> UserResponse:
        return self.to_response(await self.get_active_user(db, user_id))

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: int,
        data: UpdateProfileRequest,
    ) -> UserResponse:
        """프로필을 수정합니다.

        Update profile fields. A changed phone number must be unused and
        resets the phone verification flag.
        """
        user: User = await self.get_active_user(db, user_id)
        update_data: dict = data.model_dump(exclude_unset=True)

        new_phone: str | None = update_data.get("phone_number")
        if new_phone and new_phone != user.phone_number:
            if await user_repository.phone_exists(db, new_phone):
                raise BadRequestError("Phone number is already registered")
            update_data["is_phone_verified"] = False

        user = await user_repository.update(db, user, update_data)
        logger.info("Updated profile for user id=%s", user.id)
        return self.to_response(user)

    async def change_password(
        self,
        db: AsyncSession,
        user_id: int,
        data: ChangePasswordRequest,
    ) -> None:
        """비밀번호를 변경합니다.

        Raises:
            BadRequestError: 확인 불일치, 기존과 동일, 현재 비밀번호 오류
                             (Confirmation mismatch, unchanged password, wrong current password)
        """
        if data.new_password != data.confirm_password:
            raise BadRequestError("New password and confirm password do not match")
        if data.new_password == data.current_password:
            raise BadRequestError("New password must be different from current password")

        user: User = await self.get_active_user(db, user_id)
        if not verify_password(data.current_password, user.password_hash):
            raise BadRequestError("Current password is incorrect")

        await user_repository.update(db, user, {"password_hash": hash_password(data.new_password)})
        logger.info("Password changed for user id=%s", user.id)

    async def list_users(self, db: AsyncSession, page: int, size: int) -> Page:
        users, total = await user_repository.get_paginated(db, user_repository.active_query(), page, size)
        return self._page(users, total, page, size)

    async def search_users(self, db: AsyncSession, term: str, page: int, size: int) -> Page:
        users, total = await user_repository.get_paginated(db, user_repository.search_query(term), page, size)
        return self._page(users, total, page, size)

    async def get_users_by_role(self, db: AsyncSession, role_name: str, page: int, size: int) -> Page:
        if role_name.upper() not in RoleName.ALL:
            raise NotFoundError.for_field("Role", "name", role_name)
        users, total = await user_repository.get_paginated(db, user_repository.by_role_query(role_name), page, size)
        return self._page(users, total, page, size)

    async def get_providers(self, db: AsyncSession, page: int, size: int) -> Page:
        return await self.get_users_by_role(db, RoleName.PROVIDER, page, size)

    async def get_customers(self, db: AsyncSession, page: int, size: int) -> Page:
        return await self.get_users_by_role(db, RoleName.CUSTOMER, page, size)

    async def get_users_nearby(
        self,
        db: AsyncSession,
        latitude: float,
        longitude: float,
        radius_km: float | None = None,
    ) -> list[UserResponse]:
        """반경 내 사용자 목록 — Users within ``radius_km`` of a point, nearest first."""
        radius: float = radius_km if radius_km is not None else settings.DEFAULT_SEARCH_RADIUS_KM
        users: list[User] = await user_repository.list_nearby(db, latitude, longitude, radius)
        return [self.to_response(u) for u in users]

    async def verify_email(self, db: AsyncSession, user_id: int) -> UserResponse:
        user: User = await self.get_user(db, user_id)
        user = await user_repository.update(db, user, {"is_email_verified": True})
        logger.info("Email verified for user id=%s", user.id)
        return self.to_response(user)

    async def verify_phone(self, db: AsyncSession, user_id: int) -> UserResponse:
        user: User = await self.get_user(db, user_id)
        if not user.phone_number:
            raise BadRequestError("User has no phone number to verify")
        user = await user_repository.update(db, user, {"is_phone_verified": True})
        logger.info("Phone verified for user id=%s", user.id)
        return self.to_response(user)

    async def toggle_status(self, db: AsyncSession, user_id: int, enabled: bool) -> UserResponse:
        """계정 사용 가능 여부를 설정합니다 — Enable or disable an account."""
        user: User = await self.get_user(db, user_id)
        user = await user_repository.update(db, user, {"enabled": enabled})
        logger.info("User id=%s enabled=%s", user.id, enabled)
        return self.to_response(user)

    async def delete_user(self, db: AsyncSession, user_id: int) -> None:
        """사용자를 소프트 삭제합니다 — Soft delete: inactive and disabled."""
        user: User = await self.get_active_user(db, user_id)
        await user_repository.update(db, user, {"is_active": False, "enabled": False})
        logger.info("Soft-deleted user id=%s", user_id)

    async def is_email_available(self, db: AsyncSession, email: str) -> bool:
        return not await user_repository.email_exists(db, email)

    async def is_phone_available(self, db: AsyncSession, phone_number: str) -> bool:
        return not await user_repository.phone_exists(db, phone_number)

    async def get_user_stats(self, db: AsyncSession) -> UserStatsResponse:
        return UserStatsResponse(
            total_users=await user_repository.count_active(db),
            total_customers=await user_repository.count_by_role(db, RoleName.CUSTOMER),
            total_providers=await user_repository.count_by_role(db, RoleName.PROVIDER),
            total_admins=await user_repository.count_by_role(db, RoleName.ADMIN),
            total_moderators=await user_repository.count_by_role(db, RoleName.MODERATOR),
        )


# 싱글턴 인스턴스 — Singleton instance
user_service: UserService = UserService()
