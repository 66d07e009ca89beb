"""예외 핸들러 — 모든 오류를 표준 응답 봉투로 변환.

Exception handlers rendering every error inside the standard response
envelope with ``success: false``.

    HTTPException           → its own status, detail as message
    RequestValidationError  → 400 "Validation failed", data = {field: message}
    Exception               → 500, generic message, traceback logged
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.schemas.envelope import ApiResponse
from app.utils.logger import get_logger

logger = get_logger(__name__)

# 요청 위치 접두사 — Location prefixes stripped from validation error paths
_LOCATIONS: frozenset[str] = frozenset({"body", "query", "path", "header", "cookie"})


def _envelope(request: Request, status_code: int, message: str, data: Any = None) -> JSONResponse:
    body: ApiResponse = ApiResponse.error(request, message, status_code, data)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


def validation_errors(exc: RequestValidationError) -> dict[str, str]:
    """필드별 검증 오류 — Map each invalid field to its first error message."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        location: list[str] = [str(part) for part in error.get("loc", ())]
        if location and location[0] in _LOCATIONS:
            location = location[1:]
        field: str = ".".join(location) or "request"
        message: str = str(error.get("msg", "Invalid value"))
        # pydantic 은 "Value error, " 접두사를 붙임 — strip pydantic's ValueError prefix
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response: JSONResponse = _envelope(request, exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, str] = validation_errors(exc)
    logger.info("Validation failed on %s %s: %s", request.method, request.url.path, sorted(errors))
    return _envelope(request, 400, "Validation failed", errors)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _envelope(request, 500, "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    """애플리케이션에 예외 핸들러를 등록합니다."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
