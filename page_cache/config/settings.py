"""
페이지 캐시 설정 클래스

저장소 백엔드, 키 접두사, TTL 정책, 로깅 설정을 관리합니다.
모든 값은 기본값을 가지며 환경 변수로 오버라이드할 수 있습니다.

환경 변수:
    PAGE_CACHE_BACKEND       저장소 백엔드 ("memory" | "redis")
    REDIS_URL                Redis 연결 URL
    PAGE_CACHE_KEY_PREFIX    저장소 네임스페이스 접두사
    PAGE_CACHE_DEFAULT_TTL   expire=DEFAULT일 때의 TTL (초)
    PAGE_CACHE_PAGE_PREFIX   페이지 캐시 키 접두사
    PAGE_CACHE_EXPIRE        전략에 전달할 expire 값 (0 = 저장소 기본값, 음수 = 만료 없음)
    LOG_LEVEL                로그 레벨
    LOG_JSON                 JSON 로그 출력 여부
"""

import os
from dataclasses import dataclass, field
from typing import Any

import structlog

from page_cache.cache.keys import PAGE_CACHE_PREFIX
from page_cache.cache.store import DEFAULT

logger = structlog.get_logger(__name__)

SUPPORTED_BACKENDS = ("memory", "redis")


@dataclass
class CacheConfig:
    """
    캐시 저장소 설정

    backend가 "redis"일 때만 redis_url이 사용됩니다.
    """

    backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "page_cache"
    default_ttl: int = 300  # 5분
    page_prefix: str = PAGE_CACHE_PREFIX
    expire: int = DEFAULT

    @classmethod
    def from_env(cls) -> "CacheConfig":
        """환경 변수에서 캐시 설정 로드"""
        return cls(
            backend=os.getenv("PAGE_CACHE_BACKEND", "memory").lower(),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            key_prefix=os.getenv("PAGE_CACHE_KEY_PREFIX", "page_cache"),
            default_ttl=int(os.getenv("PAGE_CACHE_DEFAULT_TTL", "300")),
            page_prefix=os.getenv("PAGE_CACHE_PAGE_PREFIX", PAGE_CACHE_PREFIX),
            expire=int(os.getenv("PAGE_CACHE_EXPIRE", str(DEFAULT))),
        )


@dataclass
class LoggingConfig:
    """
    로깅 설정

    구조화된 로깅 출력 형식과 레벨을 제어합니다.
    """

    log_level: str = "INFO"
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """환경 변수에서 로깅 설정 로드"""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            json_logs=os.getenv("LOG_JSON", "false").lower() == "true",
        )


@dataclass
class Settings:
    """
    페이지 캐시 통합 설정

    사용 예시:
        settings = Settings.from_env()
        store = create_store(settings.cache)
    """

    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "Settings":
        """환경 변수에서 전체 설정 로드"""
        settings = cls(cache=CacheConfig.from_env(), logging=LoggingConfig.from_env())
        logger.info(
            "환경 변수 기반 설정 로드 완료",
            backend=settings.cache.backend,
            default_ttl=settings.cache.default_ttl,
            log_level=settings.logging.log_level,
        )
        return settings

    def to_dict(self) -> dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        return {
            "cache": self.cache.__dict__.copy(),
            "logging": self.logging.__dict__.copy(),
        }
