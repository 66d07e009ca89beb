"""로깅 설정 유틸리티 — 표준 logging 기반.

Logging helpers built on the standard library ``logging`` module.
``configure_logging`` is called once at startup; modules obtain their
logger through ``get_logger(__name__)``.
"""

import logging

from app.config import settings

LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured: bool = False


def configure_logging(level: str | None = None) -> None:
    """루트 로거에 스트림 핸들러를 한 번만 설치합니다.

    Install a single stream handler on the ``app`` logger hierarchy.
    Calling it again only updates the level.
    """
    global _configured
    app_logger: logging.Logger = logging.getLogger("app")
    app_logger.setLevel((level or settings.LOG_LEVEL).upper())
    if _configured:
        return
    handler: logging.StreamHandler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    app_logger.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
