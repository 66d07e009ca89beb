"""FastAPI 의존성 주입 모듈 — 인증 및 권한 검사.

FastAPI dependency injection module — Authentication and authorization.

Authentication Flow (authenticate_request):
    1. 허용 목록 경로(로그인/가입/갱신, 헬스, 문서)는 건너뜀
       (Bypass list: login, register, refresh, health and docs)
    2. Authorization: Bearer <token> 헤더가 없으면 익명
       (No bearer header means anonymous)
    3. 토큰 주체(이메일)로 활성 사용자를 조회하고 토큰을 검증
       (Subject email loads the active user; token is validated for that user)
    4. 리프레시 토큰이면 즉시 401 "Access token required"
       (A refresh token presented here is rejected immediately)
    5. AuthenticatedPrincipal을 request.state.principal에 부착
       (The principal is attached to the request)
    기타 오류는 기록 후 익명으로 진행 (Any other failure is logged; the request proceeds anonymously)

Authorization Flow (authorize_request):
    ``app.api.policy.ROUTE_POLICIES`` 의 첫 일치 규칙을 평가합니다.
    Missing principal on a protected route gives 401, a role mismatch 403.
"""

from dataclasses import dataclass
from typing import Annotated

import jwt
from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.policy import RoutePolicy, find_policy
from app.config import settings
from app.database import get_db
from app.models.user import User
from app.repositories.user_repository import user_repository
from app.schemas.principal import AuthenticatedPrincipal
from app.services.user_service import user_service
from app.utils.exceptions import ForbiddenError, UnauthorizedError
from app.utils.jwt import extract_subject, is_access_token, is_token_valid
from app.utils.logger import get_logger
from app.utils.pagination import clamp_page_params

logger = get_logger(__name__)

# HTTP Bearer 토큰 추출기 — 헤더가 없어도 오류를 내지 않음
# (Bearer extractor; a missing header yields None instead of an error)
security: HTTPBearer = HTTPBearer(auto_error=False)

# 인증을 건너뛰는 경로 (API 접두사 기준) — Paths relative to API_PREFIX that skip authentication
BYPASS_API_PATHS: frozenset[str] = frozenset({"/auth/login", "/auth/register", "/auth/refresh"})
# 인증을 건너뛰는 절대 경로 — Absolute paths that skip authentication
BYPASS_PATHS: frozenset[str] = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def api_relative_path(path: str) -> str:
    """API 접두사를 제거한 경로 — Request path with the API prefix removed."""
    prefix: str = settings.API_PREFIX.rstrip("/")
    if prefix and (path == prefix or path.startswith(prefix + "/")):
        path = path[len(prefix):]
    return "/" + path.strip("/")


def is_bypassed(path: str) -> bool:
    if path.rstrip("/") in BYPASS_PATHS:
        return True
    return api_relative_path(path) in BYPASS_API_PATHS


async def authenticate_request(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AuthenticatedPrincipal | None:
    """요청의 Bearer 토큰으로 인증 주체를 결정합니다.

    Resolve the request principal from its bearer token.

    Returns:
        AuthenticatedPrincipal | None: 인증 주체 또는 익명(None)
                                       (Principal, or None for anonymous)

    Raises:
        UnauthorizedError(401): 리프레시 토큰을 액세스 토큰으로 사용
                                (Refresh token presented as an access credential)
    """
    request.state.principal = None
    if is_bypassed(request.url.path) or credentials is None:
        return None

    token: str = credentials.credentials
    try:
        email: str | None = extract_subject(token)
        if email is None:
            return None

        user: User | None = await user_repository.get_active_by_email(db, email)
        if user is None or not is_token_valid(token, user.email):
            return None
        if not user.enabled:
            logger.warning("Token presented for disabled account id=%s", user.id)
            return None

        if not is_access_token(token):
            logger.warning("Refresh token used as access credential by user id=%s", user.id)
            raise UnauthorizedError("Access token required")

        principal: AuthenticatedPrincipal = AuthenticatedPrincipal.from_user(user)
    except jwt.InvalidTokenError:
        logger.debug("Ignoring invalid bearer token on %s", request.url.path)
        return None
    except SQLAlchemyError:
        logger.exception("Could not authenticate request to %s", request.url.path)
        return None

    request.state.principal = principal
    return principal


async def authorize_request(
    request: Request,
    principal: Annotated[AuthenticatedPrincipal | None, Depends(authenticate_request)],
) -> AuthenticatedPrincipal | None:
    """경로 정책에 따라 접근을 허용하거나 거부합니다.

    Evaluate the route policy table for the request. Used as a router-level
    dependency so it runs before every API handler.

    Raises:
        UnauthorizedError(401): 보호된 경로에 인증 정보 없음 (No principal on a protected route)
        ForbiddenError(403): 역할 불일치 (Principal lacks every allowed role)
    """
    policy: RoutePolicy | None = find_policy(request.method, api_relative_path(request.url.path))
    if policy is not None and policy.is_public:
        return principal

    if principal is None:
        raise UnauthorizedError()

    if policy is not None and not policy.any_role and not principal.has_any_role(policy.roles):
        logger.warning(
            "Access denied for user id=%s on %s %s", principal.user_id, request.method, request.url.path
        )
        raise ForbiddenError()
    return principal


async def get_principal(
    principal: Annotated[AuthenticatedPrincipal | None, Depends(authorize_request)],
) -> AuthenticatedPrincipal:
    """인증 주체 필수 의존성 — Principal required by the handler."""
    if principal is None:
        raise UnauthorizedError()
    return principal


async def get_current_user(
    principal: Annotated[AuthenticatedPrincipal, Depends(get_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """인증 주체의 사용자 엔티티 — The persisted User row behind the principal."""
    return await user_service.get_active_user(db, principal.user_id)


@dataclass(frozen=True)
class PageParams:
    """페이지 요청 파라미터 (0부터 시작) — 0-based page request."""

    page: int
    size: int


def get_page_params(
    page: Annotated[int, Query(description="페이지 번호 (0부터 시작)")] = 0,
    size: Annotated[int, Query(description="페이지 크기")] = settings.DEFAULT_PAGE_SIZE,
) -> PageParams:
    """페이지 파라미터 보정 — Clamp page to >= 0 and size to [1, MAX_PAGE_SIZE]."""
    page, size = clamp_page_params(page, size)
    return PageParams(page=page, size=size)
