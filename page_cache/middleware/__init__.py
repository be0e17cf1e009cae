"""
응답 캐싱 미들웨어 컴포넌트 모음

이 패키지는 HTTP 핸들러 앞에서 응답을 캐싱하는 가로채기 계층을 제공합니다.
웹 프레임워크에는 요청 기술자와 감쌀 수 있는 출력 싱크만 요구합니다.

미들웨어 컴포넌트:
    site_cache: 사이트 전체 읽기 전용 캐시
        - 히트 시 재생 후 체인 중단
        - 미스 시 캡처 없이 다음 핸들러 실행

    cache_page: 핸들러 단위 캡처 캐시
        - 히트 시 핸들러를 실행하지 않고 재생
        - 미스 시 CachedWriter로 응답을 캡처

    cache_middleware / cached: 컨텍스트 기반 캡처 캐시
        - cache_middleware가 요청 컨텍스트에 저장소 등록
        - cached가 등록된 저장소를 찾아 캐싱 (없으면 건너뜀)
        - 히트 시 CORS 헤더 제외 후 재생

    PageCache: 설정(CacheConfig)의 키 접두사와 expire로 위 전략들을 생성

    cache_endpoint: 핸들러 체인을 FastAPI 엔드포인트로 변환

사용 패턴:
    ```python
    from fastapi import FastAPI
    from page_cache.cache import InMemoryStore
    from page_cache.middleware import cache_endpoint, cache_middleware, cached

    store = InMemoryStore()
    app = FastAPI()

    async def widgets(ctx):
        ctx.writer.write_header(201)
        await ctx.writer.write(b'{"id":5}')

    app.add_api_route("/widgets", cache_endpoint(cache_middleware(store), cached(60), widgets))
    ```
"""

from .writer import BufferedResponseWriter, CachedWriter, HeaderMap, ResponseWriter
from .context import Handler, Request, RequestContext
from .caching import (
    CACHE_MIDDLEWARE_KEY,
    CacheLookup,
    LookupOutcome,
    PageCache,
    cache_middleware,
    cache_page,
    cached,
    get_cache,
    lookup,
    must_get_cache,
    replay,
    site_cache,
)
from .fastapi_adapter import cache_endpoint

__all__ = [
    "BufferedResponseWriter",
    "CachedWriter",
    "HeaderMap",
    "ResponseWriter",
    "Handler",
    "Request",
    "RequestContext",
    "CACHE_MIDDLEWARE_KEY",
    "CacheLookup",
    "LookupOutcome",
    "PageCache",
    "cache_middleware",
    "cache_page",
    "cached",
    "get_cache",
    "lookup",
    "must_get_cache",
    "replay",
    "site_cache",
    "cache_endpoint",
]
