"""카테고리 Pydantic 요청/응답 스키마 정의.

Category request/response schema definitions.
"""

from pydantic import BaseModel, Field


class CategoryResponse(BaseModel):
    """카테고리 응답 스키마.

    Attributes:
        parent_category_id / parent_category_name: 상위 카테고리 (Parent, if any)
        service_count: 활성 서비스 수 (Active services filed under this category)
    """

    id: int
    name: str
    description: str | None = None
    icon_url: str | None = None
    image_url: str | None = None
    slug: str
    sort_order: int
    is_featured: bool
    parent_category_id: int | None = None
    parent_category_name: str | None = None
    service_count: int = 0


class CategoryCreate(BaseModel):
    """카테고리 생성 요청 — slug 미입력 시 이름에서 생성."""

    name: str = Field(..., min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    icon_url: str | None = Field(default=None, max_length=500)
    image_url: str | None = Field(default=None, max_length=500)
    slug: str | None = Field(default=None, max_length=120)
    sort_order: int = 0
    is_featured: bool = False
    parent_category_id: int | None = None


class CategoryUpdate(BaseModel):
    """카테고리 수정 요청 (부분 업데이트)."""

    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    icon_url: str | None = Field(default=None, max_length=500)
    image_url: str | None = Field(default=None, max_length=500)
    slug: str | None = Field(default=None, max_length=120)
    sort_order: int | None = None
    is_featured: bool | None = None
    parent_category_id: int | None = None
