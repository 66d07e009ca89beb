"""URL 슬러그 생성 유틸리티.

Slug helpers shared by categories and service listings.
"""

import re

_INVALID_CHARS: re.Pattern[str] = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE: re.Pattern[str] = re.compile(r"\s+")
_DASHES: re.Pattern[str] = re.compile(r"-+")


def slugify(value: str) -> str:
    """문자열을 URL 슬러그로 변환합니다.

    Lowercase, drop anything that is not alphanumeric, whitespace or a dash,
    turn whitespace runs into single dashes and trim leading/trailing dashes.

    Example:
        slugify("Home Cleaning & Repairs!")  # "home-cleaning-repairs"
    """
    slug: str = _INVALID_CHARS.sub("", value.strip().lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _DASHES.sub("-", slug)
    return slug.strip("-")


def with_suffix(slug: str, attempt: int) -> str:
    """충돌 시 숫자 접미사를 붙입니다 (home-cleaning-2)."""
    return slug if attempt <= 1 else f"{slug}-{attempt}"
