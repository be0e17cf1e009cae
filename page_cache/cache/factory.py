"""
캐시 저장소 팩토리

설정의 backend 이름으로 CacheStore 구현체를 생성합니다.
커스텀 백엔드는 register_store()로 등록할 수 있습니다.
"""

from typing import TYPE_CHECKING, Callable, Dict

import structlog

from page_cache.cache.memory_store import InMemoryStore
from page_cache.cache.redis_store import RedisStore, RedisStoreConfig
from page_cache.cache.store import CacheStore

if TYPE_CHECKING:
    from page_cache.config.settings import CacheConfig

logger = structlog.get_logger(__name__)

StoreBuilder = Callable[["CacheConfig"], CacheStore]


def _build_memory(config: "CacheConfig") -> CacheStore:
    return InMemoryStore(default_ttl=config.default_ttl)


def _build_redis(config: "CacheConfig") -> CacheStore:
    return RedisStore(
        RedisStoreConfig(
            redis_url=config.redis_url,
            key_prefix=config.key_prefix,
            default_ttl=config.default_ttl,
        )
    )


_builders: Dict[str, StoreBuilder] = {
    "memory": _build_memory,
    "redis": _build_redis,
}


def register_store(backend: str, builder: StoreBuilder) -> None:
    """커스텀 저장소 백엔드 등록 (같은 이름이면 덮어씀)"""
    _builders[backend.lower()] = builder
    logger.info("캐시 저장소 백엔드 등록", backend=backend)


def create_store(config: "CacheConfig") -> CacheStore:
    """
    설정에 맞는 저장소 인스턴스 생성

    Redis 저장소는 생성만 하며, 사용 전에 connect()를 호출해야 합니다.

    Raises:
        ValueError: 등록되지 않은 백엔드
    """
    builder = _builders.get(config.backend.lower())
    if builder is None:
        raise ValueError(
            f"Unknown cache backend: {config.backend}. "
            f"Available: {', '.join(sorted(_builders))}"
        )

    store = builder(config)
    logger.info("캐시 저장소 생성", backend=config.backend, store=type(store).__name__)
    return store
