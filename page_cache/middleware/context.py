"""
요청 컨텍스트와 핸들러 체인

가로채기 전략은 요청마다 생성되는 RequestContext를 명시적으로 전달받습니다.
컨텍스트는 요청 기술자, 교체 가능한 writer, 요청 범위 키-값 슬롯,
그리고 순서대로 실행되는 핸들러 체인을 가집니다.

핸들러 체인 실행 규칙:
    - run()은 첫 핸들러부터 실행
    - 미들웨어는 await ctx.next()로 나머지 체인을 실행
    - next()를 호출하지 않고 반환하면 다음 핸들러가 이어서 실행됨
    - abort()를 호출하면 남은 핸들러는 실행되지 않음

사용 예시:
    ```python
    async def hello(ctx: RequestContext) -> None:
        ctx.writer.headers.set("Content-Type", "text/plain")
        await ctx.writer.write(b"hello")

    ctx = RequestContext(
        Request.from_url("/hello"),
        BufferedResponseWriter(),
        [cache_middleware(store), cached(60), hello],
    )
    await ctx.run()
    ```
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlsplit

from page_cache.middleware.writer import HeaderMap, ResponseWriter

# abort() 이후 인덱스, 어떤 체인 길이보다도 큼
_ABORT_INDEX = 1 << 30


@dataclass
class Request:
    """
    요청 기술자

    Attributes:
        method (str): HTTP 메서드
        uri (str): 요청 URI (경로 + 쿼리 문자열, 호스트 제외)
        headers (HeaderMap): 요청 헤더
    """

    method: str = "GET"
    uri: str = "/"
    headers: HeaderMap = field(default_factory=HeaderMap)

    @classmethod
    def from_url(
        cls,
        url: str,
        method: str = "GET",
        headers: Optional[Iterable[Tuple[str, str]]] = None,
    ) -> "Request":
        """절대 URL이나 경로에서 요청 URI를 추출해 요청 생성"""
        parts = urlsplit(url)
        uri = parts.path or "/"
        if parts.query:
            uri = f"{uri}?{parts.query}"
        return cls(method=method.upper(), uri=uri, headers=HeaderMap(headers))


Handler = Callable[["RequestContext"], Awaitable[None]]


class RequestContext:
    """
    요청 하나의 처리 상태

    Attributes:
        request (Request): 요청 기술자
        writer (ResponseWriter): 현재 출력 싱크. 미들웨어가 캡처 writer로 교체할 수 있음
    """

    def __init__(
        self,
        request: Request,
        writer: ResponseWriter,
        handlers: Iterable[Handler] = (),
    ):
        self.request = request
        self.writer = writer
        self._handlers: List[Handler] = list(handlers)
        self._index = -1
        self._keys: Dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        """요청 범위 슬롯에 값 저장"""
        self._keys[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """요청 범위 슬롯 값 조회 (없으면 default)"""
        return self._keys.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    async def next(self) -> None:
        """현재 핸들러 이후의 체인을 순서대로 실행"""
        self._index += 1
        while self._index < len(self._handlers):
            await self._handlers[self._index](self)
            self._index += 1

    def abort(self) -> None:
        """남은 핸들러 실행 중단"""
        self._index = _ABORT_INDEX

    @property
    def is_aborted(self) -> bool:
        return self._index >= _ABORT_INDEX

    async def run(self) -> None:
        """체인을 처음부터 실행"""
        self._index = -1
        await self.next()
