"""
페이지 캐시 저장소 모듈

가로채기 계층이 의존하는 저장소 계약과 참조 구현체, 키 생성,
응답 스냅샷 모델을 제공합니다.

주요 컴포넌트:
    CacheStore: 플러그형 저장소 추상 기본 클래스
        - get / set / add / replace / delete
        - increment / decrement (원자적 카운터)
        - flush (네임스페이스 전체 삭제)

    InMemoryStore: asyncio 잠금 기반 단일 프로세스 저장소
    RedisStore: Redis 기반 분산 저장소
    ResponseSnapshot: 캡처된 응답 (status, headers, body)
    url_escape: 요청 URI → 캐시 키

사용 예시:
    ```python
    from page_cache.cache import InMemoryStore, ResponseSnapshot, page_key

    store = InMemoryStore(default_ttl=300)
    key = page_key("/widgets?id=5")
    await store.set(key, ResponseSnapshot(status=200, body=b"hello"), expire=60)
    snapshot = await store.get(key, ResponseSnapshot)
    ```
"""

from .store import DEFAULT, FOREVER, CacheStore
from .keys import PAGE_CACHE_PREFIX, page_key, url_escape
from .snapshot import ResponseSnapshot
from .memory_store import InMemoryStore
from .redis_store import RedisStore, RedisStoreConfig
from .factory import create_store, register_store

__all__ = [
    "DEFAULT",
    "FOREVER",
    "CacheStore",
    "PAGE_CACHE_PREFIX",
    "page_key",
    "url_escape",
    "ResponseSnapshot",
    "InMemoryStore",
    "RedisStore",
    "RedisStoreConfig",
    "create_store",
    "register_store",
]
