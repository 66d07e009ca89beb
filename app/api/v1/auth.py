"""인증 라우터 — 회원가입, 로그인, 토큰 갱신/검증, 로그아웃.

Auth Router — Registration, login, token refresh and validation, logout.
Refresh and validate read the token from ``Authorization: Bearer <token>``.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import authorize_request, security
from app.database import get_db
from app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from app.schemas.envelope import ApiResponse
from app.schemas.principal import AuthenticatedPrincipal
from app.schemas.user import UserResponse
from app.services.auth_service import auth_service
from app.utils.exceptions import UnauthorizedError

router: APIRouter = APIRouter()


def _bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Bearer token required")
    return credentials.credentials


@router.post("/register", response_model=ApiResponse, status_code=201)
async def register(
    request: Request,
    data: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    """회원가입 — 계정을 만들고 토큰을 발급합니다.

    Register a customer or provider account and issue a token pair.
    """
    result: AuthResponse = await auth_service.register(db, data)
    await db.commit()
    return ApiResponse.ok(request, result, "User registered successfully", 201)


@router.post("/login", response_model=ApiResponse)
async def login(
    request: Request,
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    """로그인 — Authenticate with email and password."""
    result: AuthResponse = await auth_service.login(db, data)
    return ApiResponse.ok(request, result, "Login successful")


@router.post("/refresh", response_model=ApiResponse)
async def refresh_token(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> ApiResponse:
    """토큰 갱신 — 리프레시 토큰으로 새 액세스 토큰 발급.

    Issue a new access token. The refresh token itself is returned unchanged.
    """
    result: AuthResponse = await auth_service.refresh(db, _bearer_token(credentials))
    return ApiResponse.ok(request, result, "Token refreshed successfully")


@router.post("/validate", response_model=ApiResponse)
async def validate_token(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> ApiResponse:
    """토큰 검증 — Validate an access token and return its user."""
    result: UserResponse = await auth_service.validate(db, _bearer_token(credentials))
    return ApiResponse.ok(request, result, "Token is valid")


@router.post("/logout", response_model=ApiResponse)
async def logout(
    request: Request,
    principal: Annotated[AuthenticatedPrincipal | None, Depends(authorize_request)],
) -> ApiResponse:
    """로그아웃 — 토큰은 무상태이므로 클라이언트가 폐기합니다.

    Logout. Tokens are stateless; the client discards them.
    """
    await auth_service.logout(principal.email if principal is not None else None)
    return ApiResponse.ok(request, None, "Logged out successfully")
