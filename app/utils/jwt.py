"""JWT 토큰 발급 및 검증 유틸리티 모듈.

JWT token issuance and verification utility module.
Tokens are stateless and self-contained; nothing is persisted server side.

JWT Payload Structure:
    {
        "sub": "user@example.com",   # 사용자 이메일 (Subject = user email)
        "roles": ["CUSTOMER"],        # 역할 이름 목록, 액세스 토큰만 (Role names, access tokens only)
        "type": "access"|"refresh",  # 토큰 유형 (Token type discriminator)
        "iat": 1234567890,            # 발급 시각 (Issued at)
        "exp": 1234567890             # 만료 시각 (Expiration)
    }

Decoding helpers raise ``jwt.InvalidTokenError`` (or a subclass) for
malformed, mis-signed or expired tokens. ``is_token_valid`` never raises.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

import jwt

from app.config import settings

ACCESS_TOKEN_TYPE: str = "access"
REFRESH_TOKEN_TYPE: str = "refresh"


def _encode(claims: dict[str, Any], expires_delta: timedelta) -> str:
    """공통 클레임(iat, exp)을 추가해 서명합니다."""
    now: datetime = datetime.now(timezone.utc)
    to_encode: dict[str, Any] = {**claims, "iat": now, "exp": now + expires_delta}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(
    subject: str,
    roles: Iterable[str],
    expires_delta: timedelta | None = None,
) -> str:
    """JWT 액세스 토큰을 생성합니다.

    Issue a short-lived access token carrying the user's role claims.

    Args:
        subject: 토큰 주체, 사용자 이메일 (Token subject, the user's email)
        roles: 역할 이름 목록 (Role names, e.g. ["CUSTOMER"])
        expires_delta: 만료 기간 재정의 (Override of the configured TTL)

    Returns:
        str: 인코딩된 JWT 문자열 (Encoded JWT string)
    """
    delta: timedelta = expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    claims: dict[str, Any] = {"sub": subject, "roles": sorted(roles), "type": ACCESS_TOKEN_TYPE}
    return _encode(claims, delta)


def create_refresh_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """JWT 리프레시 토큰을 생성합니다.

    Issue a long-lived refresh token. It carries no role claims and is only
    accepted by the token refresh endpoint.
    """
    delta: timedelta = expires_delta or timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode({"sub": subject, "type": REFRESH_TOKEN_TYPE}, delta)


def decode_token(token: str) -> dict[str, Any]:
    """JWT 토큰을 디코딩하고 서명/만료를 검증합니다.

    Raises:
        jwt.ExpiredSignatureError: 토큰 만료 시 (When token has expired)
        jwt.InvalidTokenError: 유효하지 않은 토큰 (Any other validation failure)
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


def extract_subject(token: str) -> str | None:
    """토큰의 주체(이메일)를 반환합니다."""
    return decode_token(token).get("sub")


def extract_roles(token: str) -> list[str]:
    """토큰의 역할 클레임을 반환합니다. 리프레시 토큰은 빈 목록입니다."""
    roles: Any = decode_token(token).get("roles") or []
    return [str(role) for role in roles]


def extract_token_type(token: str) -> str | None:
    return decode_token(token).get("type")


def is_access_token(token: str) -> bool:
    return extract_token_type(token) == ACCESS_TOKEN_TYPE


def is_refresh_token(token: str) -> bool:
    return extract_token_type(token) == REFRESH_TOKEN_TYPE


def is_token_valid(token: str, expected_subject: str | None = None) -> bool:
    """토큰 유효성 검사 — 서명, 만료, (선택) 주체 일치.

    Check signature authenticity and expiry and, when ``expected_subject``
    is given, that the token was issued for that subject.
    Any decoding failure counts as invalid.
    """
    try:
        payload: dict[str, Any] = decode_token(token)
    except jwt.InvalidTokenError:
        return False
    if expected_subject is not None and payload.get("sub") != expected_subject:
        return False
    return True


def access_token_expires_in() -> int:
    """액세스 토큰 유효 기간(초) — Access token lifetime in seconds."""
    return settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60


def refresh_token_expires_in() -> int:
    """리프레시 토큰 유효 기간(초) — Refresh token lifetime in seconds."""
    return settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60


def token_remaining_seconds(token: str) -> int:
    """만료까지 남은 시간(초). 만료되었거나 유효하지 않으면 0."""
    try:
        payload: dict[str, Any] = decode_token(token)
    except jwt.InvalidTokenError:
        return 0
    remaining: float = payload["exp"] - datetime.now(timezone.utc).timestamp()
    return max(int(remaining), 0)
