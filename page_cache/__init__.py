"""
page_cache: HTTP 핸들러용 응답 캐싱 계층

요청 URI로 캐시 키를 만들어 플러그형 저장소를 조회하고,
히트면 저장된 응답을 재생하며 미스면 핸들러 출력을 캡처해 저장합니다.

하위 패키지:
    - page_cache.cache: 저장소 계약, 참조 저장소, 키 생성, 응답 스냅샷
    - page_cache.middleware: 가로채기 전략, writer, 요청 컨텍스트, FastAPI 어댑터
    - page_cache.config: 설정 및 검증
    - page_cache.logging_config: structlog 설정

시작 예시:
    ```python
    settings = Settings.from_env()
    configure_logging(settings.logging)
    is_valid, errors = validate_config(settings)
    page_cache = PageCache.from_config(settings.cache)
    ```
"""

from .cache import (
    DEFAULT,
    FOREVER,
    CacheStore,
    InMemoryStore,
    RedisStore,
    ResponseSnapshot,
    create_store,
    url_escape,
)
from .config import CacheConfig, LoggingConfig, Settings, validate_config
from .exceptions import CacheMiss, NotStored, NotSupport, PageCacheError, StoreNotRegistered
from .logging_config import configure_logging
from .middleware import (
    CACHE_MIDDLEWARE_KEY,
    PageCache,
    cache_endpoint,
    cache_middleware,
    cache_page,
    cached,
    get_cache,
    must_get_cache,
    site_cache,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT",
    "FOREVER",
    "CacheStore",
    "InMemoryStore",
    "RedisStore",
    "ResponseSnapshot",
    "create_store",
    "url_escape",
    "CacheConfig",
    "LoggingConfig",
    "Settings",
    "validate_config",
    "configure_logging",
    "CacheMiss",
    "NotStored",
    "NotSupport",
    "PageCacheError",
    "StoreNotRegistered",
    "CACHE_MIDDLEWARE_KEY",
    "PageCache",
    "cache_endpoint",
    "cache_middleware",
    "cache_page",
    "cached",
    "get_cache",
    "must_get_cache",
    "site_cache",
]
