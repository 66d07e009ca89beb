"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers registration, login and token issuance/refresh.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.user import PHONE_PATTERN, UserResponse, check_password_strength
from app.utils.password import PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH


class RegisterRequest(BaseModel):
    """회원가입 요청 스키마.

    Self-registration request. ``user_type`` selects the initial role
    (CUSTOMER or PROVIDER). Password/confirm equality is checked by the
    service so it can fail with a business error.

    Attributes:
        first_name / last_name: 이름 (2~50자)
        email: 로그인 이메일 (Login email)
        password: 비밀번호 (8~72자, 대소문자/숫자/특수문자 포함)
        confirm_password: 비밀번호 확인 (Must equal password)
        phone_number: 전화번호 (E.164 style, optional)
        user_type: 사용자 유형 (CUSTOMER or PROVIDER)
    """

    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    confirm_password: str = Field(..., min_length=1)
    phone_number: str | None = Field(default=None, pattern=PHONE_PATTERN)
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)
    country: str = Field(default="India", max_length=100)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    user_type: str = Field(default="CUSTOMER", max_length=20)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password_strength(value)


class LoginRequest(BaseModel):
    """로그인 요청 스키마."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    """인증 응답 스키마 — 로그인, 회원가입, 토큰 갱신 결과.

    Attributes:
        access_token: JWT 액세스 토큰 (Short-lived access token)
        refresh_token: JWT 리프레시 토큰 (Long-lived refresh token)
        token_type: 토큰 유형 (Always "Bearer")
        expires_in: 액세스 토큰 만료까지 초 (Access token lifetime in seconds)
        user: 사용자 정보 (Authenticated user)
        login_time: 발급 시각 (Issue time)
    """

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserResponse
    login_time: datetime
