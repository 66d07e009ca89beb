"""사용자 관련 Pydantic 요청/응답 스키마 정의.

User-related Pydantic request/response schema definitions.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.utils.password import PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH, is_strong_password

# 전화번호 형식 — E.164 style phone number
PHONE_PATTERN: str = r"^\+?[1-9]\d{1,14}$"


def check_password_strength(value: str) -> str:
    """비밀번호 정책 검증기 — Shared validator for new passwords."""
    if not is_strong_password(value):
        raise ValueError(
            "Password must contain at least one lowercase letter, one uppercase letter, "
            "one digit and one special character (@$!%*?&)"
        )
    return value


class UserResponse(BaseModel):
    """사용자 응답 스키마 — 비밀번호 해시는 절대 포함하지 않음.

    User response schema. Never carries the password hash.
    """

    id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone_number: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    profile_image_url: str | None = None
    is_email_verified: bool
    is_phone_verified: bool
    enabled: bool
    is_active: bool
    roles: list[str]
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserSummary(BaseModel):
    """사용자 요약 — Embedded user reference (bookings, reviews, services)."""

    id: int
    full_name: str
    email: str
    phone_number: str | None = None


class UpdateProfileRequest(BaseModel):
    """프로필 수정 요청 스키마 (부분 업데이트).

    Profile update request; only supplied fields change.
    Changing the phone number resets its verification flag.
    """

    first_name: str | None = Field(default=None, min_length=2, max_length=50)
    last_name: str | None = Field(default=None, min_length=2, max_length=50)
    phone_number: str | None = Field(default=None, pattern=PHONE_PATTERN)
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)
    country: str | None = Field(default=None, max_length=100)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    profile_image_url: str | None = Field(default=None, max_length=500)


class ChangePasswordRequest(BaseModel):
    """비밀번호 변경 요청 스키마."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    confirm_password: str = Field(..., min_length=1)

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        return check_password_strength(value)


class UserStatsResponse(BaseModel):
    """사용자 통계 응답 — Active user counts by role."""

    total_users: int
    total_customers: int
    total_providers: int
    total_admins: int
    total_moderators: int


class AvailabilityResponse(BaseModel):
    """이메일/전화번호 사용 가능 여부 응답."""

    value: str
    available: bool
