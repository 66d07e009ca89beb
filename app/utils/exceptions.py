"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Services raise these directly; ``app.api.errors`` renders every one of them
inside the standard response envelope with ``success: false``.

Usage:
    from app.utils.exceptions import NotFoundError, InvalidStateError
    raise NotFoundError.for_field("Service", "id", service_id)
    raise InvalidStateError("Booking cannot be accepted in current status: COMPLETED")
"""

from typing import Any

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    Raised when a requested resource (user, service, booking, review...) does not exist.
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

    @classmethod
    def for_field(cls, resource: str, field: str, value: Any) -> "NotFoundError":
        """'<Resource> not found with <field>: <value>' 형식 메시지로 생성합니다."""
        return cls(f"{resource} not found with {field}: {value}")


class DuplicateError(HTTPException):
    """409 Conflict 예외 — 고유 제약 조건 위반 시 사용.

    Raised when a write would violate a uniqueness constraint outside of
    user registration (e.g. a category slug already in use).
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidStateError(HTTPException):
    """409 Conflict 예외 — 현재 상태에서 허용되지 않는 전이 시도.

    Raised when a booking or payment transition is attempted from a status
    that does not allow it. The message always names the current status.
    """

    def __init__(self, detail: str = "Operation not allowed in current status") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 역할 불일치 시 사용."""

    def __init__(self, detail: str = "Access denied") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    Raised for bad credentials, missing/invalid/expired tokens and
    refresh tokens presented as access credentials.
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 비즈니스 규칙 검증 실패 시 사용.

    Raised for rule violations Pydantic cannot catch: password mismatch,
    ownership mismatch, duplicate email/phone/review, reviewing an
    unfinished booking.
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
