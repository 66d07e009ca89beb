"""요청 로깅 미들웨어 — 표준 로거 기록 및 Axiom 전송.

Request logging middleware.
Every API request is logged through the ``app.http`` logger (method, path,
status, duration) and, when Axiom is configured, the same structured event
is shipped to the Axiom dataset. Sensitive fields (password, token, secret,
authorization) are masked in bodies and query parameters. Logging problems
never fail a request.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings
from app.utils.logger import get_logger

logger = get_logger("app.http")

# 마스킹 대상 필드 패턴 — Fields to mask in request bodies and query params
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
SKIP_PATHS: frozenset[str] = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})

MASK: str = "***"


def mask_sensitive(data: Any, depth: int = 0) -> Any:
    """민감 필드 자동 마스킹 — Recursively mask sensitive keys in dicts/lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: MASK if _SENSITIVE_KEYS.search(str(k)) else mask_sensitive(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive(item, depth + 1) for item in data[:20]]
    return data


def _truncate(value: str, max_len: int = 500) -> str:
    if len(value) > max_len:
        return value[:max_len] + "..."
    return value


def _error_message(body: bytes) -> str:
    """오류 응답 본문에서 메시지 추출 — Error message from an envelope body."""
    try:
        data: Any = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _truncate(body.decode("utf-8", errors="replace"))
    if isinstance(data, dict):
        return _truncate(str(data.get("message") or data.get("detail") or data))
    return _truncate(str(data))


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 기록하는 미들웨어.

    Middleware that logs every request and response. ``client`` and
    ``dataset`` default to the Axiom settings; with no token configured
    events are only written to the standard logger.
    """

    def __init__(self, app: Any, client: Any | None = None, dataset: str | None = None) -> None:
        super().__init__(app)
        self._dataset: str = dataset if dataset is not None else settings.AXIOM_DATASET
        self._client: Any | None = client
        if self._client is None and settings.AXIOM_API_TOKEN and self._dataset:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def _read_body(self, request: Request) -> Any:
        if request.method not in ("POST", "PUT", "PATCH"):
            return None
        body_bytes: bytes = await request.body()
        if not body_bytes:
            return None
        try:
            return mask_sensitive(json.loads(body_bytes))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "(non-json body)"

    def _ship(self, event: dict[str, Any]) -> None:
        if self._client is None:
            return
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:  # 로깅 실패가 요청 처리에 영향 주지 않도록
            logger.warning("Failed to ship request log to Axiom", exc_info=True)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # 제외 경로 스킵 — Skip excluded paths
        if request.url.path in SKIP_PATHS:
            return await call_next(request)

        start_time: float = time.perf_counter()
        query_params: dict[str, str] | None = dict(request.query_params) if request.query_params else None
        request_body: Any = await self._read_body(request)

        error_detail: str | None = None
        status_code: int = 500
        try:
            response: Response = await call_next(request)
            status_code = response.status_code

            # 오류 응답 본문에서 사유 추출 — Pull the reason out of error responses
            if status_code >= 400:
                resp_body: bytes = b""
                async for chunk in response.body_iterator:
                    resp_body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                error_detail = _error_message(resp_body)
                response = Response(
                    content=resp_body,
                    status_code=status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            error_detail = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            duration_ms: float = round((time.perf_counter() - start_time) * 1000, 2)
            event: dict[str, Any] = {
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "duration_ms": duration_ms,
            }
            if query_params:
                event["query_params"] = mask_sensitive(query_params)
            if request_body is not None:
                event["request_body"] = request_body
            if error_detail:
                event["error"] = error_detail

            level: int = logging.WARNING if status_code >= 400 else logging.INFO
            logger.log(
                level,
                "%s %s -> %s (%.2f ms)",
                request.method,
                request.url.path,
                status_code,
                duration_ms,
            )
            self._ship(event)

        return response
