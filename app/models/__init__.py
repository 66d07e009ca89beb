"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package registers every model with the metadata,
which Alembic and relationship resolution rely on.

Modules:
    user: 역할, 사용자, 사용자-역할 연결 (Role, User, user_roles)
    catalog: 카테고리 및 서비스 (Category, Service)
    booking: 예약 (Booking)
    payment: 결제 원장 (Payment)
    review: 리뷰 (Review)
"""

from app.models.user import Role, RoleName, User, user_roles
from app.models.catalog import Category, PricingType, Service
from app.models.booking import Booking, BookingStatus, CancelledBy
from app.models.payment import Payment, PaymentMethod, PaymentStatus
from app.models.review import Review

__all__ = [
    "Role", "RoleName", "User", "user_roles",
    "Category", "PricingType", "Service",
    "Booking", "BookingStatus", "CancelledBy",
    "Payment", "PaymentMethod", "PaymentStatus",
    "Review",
]
