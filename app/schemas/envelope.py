"""표준 응답 봉투 스키마.

Standard response envelope wrapping every API response body, success or error::

    {"success": true, "message": "...", "data": {...},
     "timestamp": "...", "path": "/api/v1/...", "statusCode": 200}
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from starlette.requests import Request


class ApiResponse(BaseModel):
    """응답 봉투 — Uniform wrapper around every payload.

    Attributes:
        success: 성공 여부 (False for every error response)
        message: 사용자 메시지 (Human readable message)
        data: 실제 페이로드 (Payload; a field map for validation errors)
        timestamp: 응답 시각 UTC (Response time)
        path: 요청 경로 (Request path)
        status_code: HTTP 상태 코드, JSON 키는 statusCode (HTTP status, serialized as statusCode)
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    data: Any = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    path: str = ""
    status_code: int = Field(default=200, alias="statusCode")

    @classmethod
    def ok(
        cls,
        request: Request,
        data: Any = None,
        message: str = "Success",
        status_code: int = 200,
    ) -> "ApiResponse":
        """성공 응답 생성 — Build a success envelope for the current request."""
        return cls(
            success=True,
            message=message,
            data=data,
            path=request.url.path,
            status_code=status_code,
        )

    @classmethod
    def error(
        cls,
        request: Request,
        message: str,
        status_code: int,
        data: Any = None,
    ) -> "ApiResponse":
        """오류 응답 생성 — Build an error envelope (``success: false``)."""
        return cls(
            success=False,
            message=message,
            data=data,
            path=request.url.path,
            status_code=status_code,
        )
