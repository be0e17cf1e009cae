"""
설정 검증 모듈

페이지 캐시 설정의 유효성을 검증합니다.
"""

import logging
from typing import List, Tuple

import structlog

from .settings import SUPPORTED_BACKENDS, Settings

logger = structlog.get_logger(__name__)


def validate_config(settings: Settings) -> Tuple[bool, List[str]]:
    """
    전체 설정 검증

    Args:
        settings: 검증할 설정

    Returns:
        (유효 여부, 오류 메시지 목록)
    """
    errors: List[str] = []
    errors.extend(_validate_cache_settings(settings))
    errors.extend(_validate_logging_settings(settings))

    is_valid = len(errors) == 0
    if not is_valid:
        logger.error("설정 검증 실패", error_count=len(errors), errors=errors[:5])
    else:
        logger.debug("설정 검증 성공")

    return is_valid, errors


def _validate_cache_settings(settings: Settings) -> List[str]:
    """캐시 설정 검증"""
    errors = []
    cache = settings.cache

    if cache.backend not in SUPPORTED_BACKENDS:
        errors.append(
            f"지원되지 않는 캐시 백엔드: {cache.backend} "
            f"(사용 가능: {', '.join(SUPPORTED_BACKENDS)})"
        )

    if cache.backend == "redis":
        if not cache.redis_url:
            errors.append("Redis 백엔드가 선택되었지만 REDIS_URL이 설정되지 않음")
        elif not cache.redis_url.startswith(("redis://", "rediss://", "unix://")):
            errors.append(f"잘못된 Redis URL 형식: {cache.redis_url}")

    if not cache.key_prefix or not cache.key_prefix.strip():
        errors.append("저장소 키 접두사가 비어있음")

    if not cache.page_prefix or not cache.page_prefix.strip():
        errors.append("페이지 캐시 키 접두사가 비어있음")

    if cache.default_ttl < 0:
        errors.append(f"기본 TTL은 음수일 수 없음: {cache.default_ttl}")

    return errors


def _validate_logging_settings(settings: Settings) -> List[str]:
    """로깅 설정 검증"""
    errors = []
    level = settings.logging.log_level
    if not isinstance(logging.getLevelName(level), int):
        errors.append(f"알 수 없는 로그 레벨: {level}")
    return errors
