"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어 및 라우터 등록.

FastAPI application entry point — Logging, middleware, exception handlers
and router registration.
"""

from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.errors import register_exception_handlers
from app.api.v1 import api_router
from app.config import settings
from app.middleware.request_logging import RequestLoggingMiddleware
from app.schemas.envelope import ApiResponse
from app.utils.logger import configure_logging

configure_logging()

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# 요청 로깅 미들웨어 — Request logging (standard logger + Axiom)
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(RequestLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 예외 핸들러 — Every error rendered in the response envelope
register_exception_handlers(app)


@app.get("/health", response_model=ApiResponse)
async def health_check(request: Request) -> ApiResponse:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring, wrapped in the
    standard response envelope.
    """
    data: dict[str, str] = {
        "status": "UP",
        "application": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    return ApiResponse.ok(request, data, "Service is healthy")


# 라우터 등록 — All API endpoints under the configured prefix
app.include_router(api_router, prefix=settings.API_PREFIX)
