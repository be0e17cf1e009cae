"""
응답 캐싱 가로채기 전략

요청 URI로 캐시 키를 만들고 저장소를 조회한 뒤, 히트면 저장된 응답을
그대로 재생하고 미스면 핸들러를 실행합니다. 전략마다 미스일 때의 동작과
저장소를 얻는 방법이 다릅니다.

전략:
    site_cache(store, expire):
        히트 → 재생 후 체인 중단
        미스 → 캡처 없이 다음 핸들러 실행 (외부에서 채운 항목의 읽기 전용 앞단)

    cache_page(store, expire, handler):
        히트 → 재생, 감싼 핸들러는 실행되지 않음
        미스 → CachedWriter 설치 후 핸들러 실행 (다음 요청을 위해 캐시 채움)

    cached(expire):
        저장소를 요청 컨텍스트 슬롯("gincontrib.cache")에서 찾음
        저장소 없음 → 캐싱 없이 다음 핸들러 실행
        히트 → "Access-Control"로 시작하는 헤더를 제외하고 재생 후 체인 중단
        미스 → CachedWriter 설치 후 다음 핸들러 실행

    PageCache.from_config(config):
        CacheConfig의 page_prefix와 expire로 위 전략들을 생성

요청별 상태 전이:
    START → KEY_DERIVED → {HIT → REPLAYED → DONE}
                        | {MISS → CAPTURING_INSTALLED → HANDLER_RUNNING → DONE}

에러 처리 (fail open):
    조회 중 발생한 모든 저장소 오류는 미스와 같이 처리되어 핸들러가 실행됩니다.
    캡처 중 저장 실패는 CachedWriter가 로깅 후 무시합니다.
    캐시 계층의 오류가 요청 실패로 이어지는 경우는 없습니다.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog

from page_cache.cache.factory import create_store
from page_cache.cache.keys import PAGE_CACHE_PREFIX, page_key
from page_cache.cache.snapshot import ResponseSnapshot
from page_cache.cache.store import DEFAULT, CacheStore
from page_cache.config.settings import CacheConfig
from page_cache.exceptions import CacheMiss, ErrorHandler, StoreNotRegistered
from page_cache.middleware.context import Handler, RequestContext
from page_cache.middleware.writer import CachedWriter, ResponseWriter

logger = structlog.get_logger(__name__)

CACHE_MIDDLEWARE_KEY = "gincontrib.cache"

# 재생 시 제외할 CORS 헤더 접두사 (대소문자 구분)
CORS_HEADER_PREFIX = "Access-Control"


class LookupOutcome(Enum):
    """캐시 조회 결과 종류"""

    HIT = "hit"
    MISS = "miss"
    UNAVAILABLE = "unavailable"  # 저장소 오류 또는 손상된 항목


@dataclass(frozen=True)
class CacheLookup:
    """캐시 조회 결과"""

    outcome: LookupOutcome
    key: str
    snapshot: Optional[ResponseSnapshot] = None

    @property
    def hit(self) -> bool:
        return self.outcome is LookupOutcome.HIT


async def lookup(store: CacheStore, key: str) -> CacheLookup:
    """
    저장소에서 스냅샷 조회

    CacheMiss는 MISS로, 그 외 모든 예외는 로깅 후 UNAVAILABLE로 반환합니다.
    예외를 밖으로 던지지 않습니다.
    """
    try:
        snapshot = await store.get(key, ResponseSnapshot)
    except CacheMiss:
        logger.debug("캐시 미스", key=key)
        return CacheLookup(LookupOutcome.MISS, key)
    except Exception as e:
        logger.warning(
            "캐시 조회 실패, 캐시 없이 진행",
            **ErrorHandler.create_error_context(e, key=key, operation="get"),
        )
        return CacheLookup(LookupOutcome.UNAVAILABLE, key)

    logger.debug("캐시 히트", key=key, status=snapshot.status)
    return CacheLookup(LookupOutcome.HIT, key, snapshot)


async def replay(
    writer: ResponseWriter,
    snapshot: ResponseSnapshot,
    skip_header_prefix: Optional[str] = None,
) -> None:
    """
    스냅샷을 writer에 재생 (상태 코드 → 헤더 → 본문 순서)

    Args:
        writer: 실제 출력 싱크
        snapshot: 재생할 스냅샷
        skip_header_prefix: 이 접두사로 시작하는 헤더 이름은 제외 (대소문자 구분)
    """
    writer.write_header(snapshot.status)
    for name, values in snapshot.headers.items():
        if skip_header_prefix and name.startswith(skip_header_prefix):
            continue
        for value in values:
            writer.headers.add(name, value)
    await writer.write(snapshot.body)


def cache_middleware(store: CacheStore) -> Handler:
    """요청 컨텍스트 슬롯에 저장소를 등록하는 미들웨어"""

    async def register_store(ctx: RequestContext) -> None:
        ctx.set(CACHE_MIDDLEWARE_KEY, store)
        await ctx.next()

    return register_store


def get_cache(ctx: RequestContext) -> Optional[CacheStore]:
    """컨텍스트에 등록된 저장소 반환, 없으면 None"""
    return ctx.get(CACHE_MIDDLEWARE_KEY)


def must_get_cache(ctx: RequestContext) -> CacheStore:
    """
    컨텍스트에 등록된 저장소 반환

    Raises:
        StoreNotRegistered: 저장소가 등록되지 않음
    """
    store = get_cache(ctx)
    if store is None:
        raise StoreNotRegistered(CACHE_MIDDLEWARE_KEY)
    return store


def site_cache(store: CacheStore, expire: int, prefix: str = PAGE_CACHE_PREFIX) -> Handler:
    """
    사이트 전체 읽기 전용 캐시 미들웨어

    미스일 때는 캡처하지 않으므로 expire는 사용되지 않습니다.
    다른 전략과 같은 호출 형태를 유지하기 위해 받습니다.
    """

    async def site_cache_handler(ctx: RequestContext) -> None:
        result = await lookup(store, page_key(ctx.request.uri, prefix))
        if not result.hit:
            await ctx.next()
            return

        await replay(ctx.writer, result.snapshot)
        ctx.abort()

    return site_cache_handler


def cache_page(
    store: CacheStore,
    expire: int,
    handle: Handler,
    prefix: str = PAGE_CACHE_PREFIX,
) -> Handler:
    """
    핸들러 하나를 감싸는 캡처 캐시 데코레이터

    사용 예시:
        ```python
        router_handlers = [cache_page(store, 60, list_widgets)]
        ```
    """

    async def cache_page_handler(ctx: RequestContext) -> None:
        result = await lookup(store, page_key(ctx.request.uri, prefix))
        if result.hit:
            await replay(ctx.writer, result.snapshot)
            return

        ctx.writer = CachedWriter(store, expire, ctx.writer, result.key)
        await handle(ctx)

    return cache_page_handler


def cached(expire: int, prefix: str = PAGE_CACHE_PREFIX) -> Handler:
    """
    컨텍스트에 등록된 저장소를 사용하는 캡처 캐시 미들웨어

    cache_middleware(store)가 체인 앞쪽에 있어야 캐싱이 동작합니다.
    등록된 저장소가 없으면 오류 없이 캐싱을 건너뜁니다.
    """

    async def cached_handler(ctx: RequestContext) -> None:
        store = get_cache(ctx)
        if store is None:
            await ctx.next()
            return

        result = await lookup(store, page_key(ctx.request.uri, prefix))
        if not result.hit:
            ctx.writer = CachedWriter(store, expire, ctx.writer, result.key)
            await ctx.next()
            return

        # 오래된 CORS 헤더가 재생되지 않도록 제외
        await replay(ctx.writer, result.snapshot, skip_header_prefix=CORS_HEADER_PREFIX)
        ctx.abort()

    return cached_handler


class PageCache:
    """
    설정 기반 전략 생성기

    저장소, expire, 키 접두사를 한 곳에 묶어 세 전략을 같은 설정으로 만듭니다.
    CacheConfig의 page_prefix와 expire(PAGE_CACHE_PAGE_PREFIX, PAGE_CACHE_EXPIRE)는
    from_config()를 통해 적용됩니다.

    사용 예시:
        ```python
        settings = Settings.from_env()
        page_cache = PageCache.from_config(settings.cache)

        app.add_api_route(
            "/widgets",
            cache_endpoint(page_cache.middleware(), page_cache.cached(), list_widgets),
        )
        ```
    """

    def __init__(
        self,
        store: CacheStore,
        expire: int = DEFAULT,
        prefix: str = PAGE_CACHE_PREFIX,
    ):
        self.store = store
        self.expire = expire
        self.prefix = prefix

    @classmethod
    def from_config(
        cls, config: CacheConfig, store: Optional[CacheStore] = None
    ) -> "PageCache":
        """
        캐시 설정으로 생성

        Args:
            config: 캐시 설정
            store: 이미 만든 저장소 (없으면 create_store(config)로 생성)
        """
        page_cache = cls(
            store if store is not None else create_store(config),
            expire=config.expire,
            prefix=config.page_prefix,
        )
        logger.info(
            "페이지 캐시 전략 설정",
            store=type(page_cache.store).__name__,
            expire=page_cache.expire,
            prefix=page_cache.prefix,
        )
        return page_cache

    def middleware(self) -> Handler:
        return cache_middleware(self.store)

    def site_cache(self) -> Handler:
        return site_cache(self.store, self.expire, prefix=self.prefix)

    def cache_page(self, handle: Handler) -> Handler:
        return cache_page(self.store, self.expire, handle, prefix=self.prefix)

    def cached(self) -> Handler:
        return cached(self.expire, prefix=self.prefix)
