"""비밀번호 해싱 및 정책 검사 유틸리티 모듈.

Password hashing, verification and strength-policy helpers.
Passwords are hashed with bcrypt and are never stored, logged or returned in plain text.
"""

import re

import bcrypt

from app.config import settings

# 비밀번호 정책 — 대문자, 소문자, 숫자, 특수문자(@$!%*?&) 각 1개 이상
# Password policy: at least one lowercase, uppercase, digit and special character
PASSWORD_PATTERN: re.Pattern[str] = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]+$"
)
PASSWORD_MIN_LENGTH: int = 8
# bcrypt 는 72바이트까지만 해싱 (bcrypt>=5 rejects longer input with ValueError)
PASSWORD_MAX_BYTES: int = 72
PASSWORD_MAX_LENGTH: int = PASSWORD_MAX_BYTES


def hash_password(password: str) -> str:
    """평문 비밀번호를 bcrypt 해시로 변환합니다.

    Hash a plain text password with a fresh bcrypt salt.
    The cost factor comes from ``settings.BCRYPT_ROUNDS``.

    Args:
        password: 평문 비밀번호 (Plain text password)

    Returns:
        str: bcrypt 해시 문자열 (Bcrypt hash string, ~60 chars)
    """
    salt: bytes = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """평문 비밀번호와 bcrypt 해시를 비교 검증합니다.

    Verify a plain text password against a stored bcrypt hash.
    A malformed stored hash is treated as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def is_strong_password(password: str) -> bool:
    """비밀번호가 길이 및 문자 구성 정책을 만족하는지 확인합니다."""
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        return False
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        return False
    return PASSWORD_PATTERN.match(password) is not None
