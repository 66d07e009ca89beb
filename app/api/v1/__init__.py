"""API v1 라우터 패키지 — 모든 엔드포인트 통합.

API v1 Router package — Aggregates every endpoint into one router mounted
under ``settings.API_PREFIX``. ``authorize_request`` is attached at this
level so the route policy is evaluated before any handler runs.

Included routers:
    - auth: 인증 (Registration, login, tokens)
    - users: 사용자 (Profiles and user management)
    - categories: 카테고리 (Category tree)
    - services: 서비스 (Service listings)
    - search: 검색 (Service search)
    - bookings: 예약 (Booking lifecycle)
    - reviews: 리뷰 (Reviews and ratings)
"""

from fastapi import APIRouter, Depends

from app.api.deps import authorize_request
from app.api.v1.auth import router as auth_router
from app.api.v1.bookings import router as bookings_router
from app.api.v1.categories import router as categories_router
from app.api.v1.reviews import router as reviews_router
from app.api.v1.search import router as search_router
from app.api.v1.services import router as services_router
from app.api.v1.users import router as users_router

api_router: APIRouter = APIRouter(dependencies=[Depends(authorize_request)])

api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(categories_router, prefix="/categories", tags=["Categories"])
api_router.include_router(services_router, prefix="/services", tags=["Services"])
api_router.include_router(search_router, prefix="/search", tags=["Search"])
api_router.include_router(bookings_router, prefix="/bookings", tags=["Bookings"])
api_router.include_router(reviews_router, prefix="/reviews", tags=["Reviews"])
