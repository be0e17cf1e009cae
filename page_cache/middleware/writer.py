"""
응답 출력 싱크와 캡처 래퍼

가로채기 전략은 구체적인 웹 프레임워크 대신 ResponseWriter 추상화에만
의존합니다. 캐시 미스일 때는 실제 writer를 CachedWriter로 감싸서
핸들러가 쓰는 모든 바이트를 클라이언트로 즉시 전달하는 동시에
저장소에 스냅샷으로 기록합니다.

주요 구성요소:
    - HeaderMap: 순서를 유지하는 헤더 멀티맵 (이름 정규화)
    - ResponseWriter: 출력 싱크 추상 기본 클래스
    - BufferedResponseWriter: 보낸 내용을 메모리에 기록하는 싱크
    - CachedWriter: 쓰기마다 스냅샷을 저장하는 캡처 래퍼
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import structlog

from page_cache.cache.snapshot import ResponseSnapshot
from page_cache.cache.store import CacheStore
from page_cache.exceptions import ErrorHandler

logger = structlog.get_logger(__name__)


def canonical_header_name(name: str) -> str:
    """
    헤더 이름 정규화

    하이픈으로 구분된 각 단어의 첫 글자만 대문자로 바꿉니다.
    예: "content-type" → "Content-Type", "x-foo" → "X-Foo"
    """
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


class HeaderMap:
    """
    헤더 이름 → 값 목록 멀티맵

    이름은 정규화되어 저장되며 처음 추가된 순서를 유지합니다.
    같은 이름의 헤더를 여러 번 추가할 수 있습니다 (예: Set-Cookie).
    """

    def __init__(self, items: Optional[Iterable[Tuple[str, str]]] = None):
        self._values: Dict[str, List[str]] = {}
        for name, value in items or ():
            self.add(name, value)

    def add(self, name: str, value: str) -> None:
        self._values.setdefault(canonical_header_name(name), []).append(value)

    def set(self, name: str, value: str) -> None:
        self._values[canonical_header_name(name)] = [value]

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        values = self._values.get(canonical_header_name(name))
        return values[0] if values else default

    def get_all(self, name: str) -> List[str]:
        return list(self._values.get(canonical_header_name(name), []))

    def delete(self, name: str) -> None:
        self._values.pop(canonical_header_name(name), None)

    def items(self) -> Iterator[Tuple[str, List[str]]]:
        for name, values in self._values.items():
            yield name, list(values)

    def pairs(self) -> List[Tuple[str, str]]:
        """(이름, 값) 쌍을 평탄화한 목록"""
        return [(name, value) for name, values in self._values.items() for value in values]

    def to_dict(self) -> Dict[str, List[str]]:
        """값 목록까지 복사한 딕셔너리"""
        return {name: list(values) for name, values in self._values.items()}

    def copy(self) -> "HeaderMap":
        return HeaderMap(self.pairs())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and canonical_header_name(name) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderMap):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"HeaderMap({self._values!r})"


class ResponseWriter(ABC):
    """
    응답 출력 싱크 추상 기본 클래스

    상태 코드와 헤더는 첫 write 전까지 변경할 수 있습니다.
    """

    @property
    @abstractmethod
    def status(self) -> int:
        """현재 상태 코드 (write_header 호출 전에는 200)"""

    @property
    @abstractmethod
    def headers(self) -> HeaderMap:
        """변경 가능한 응답 헤더"""

    @property
    @abstractmethod
    def written(self) -> bool:
        """본문 쓰기가 한 번이라도 일어났는지 여부"""

    @abstractmethod
    def write_header(self, status: int) -> None:
        """상태 코드 설정"""

    @abstractmethod
    async def write(self, data: bytes) -> int:
        """본문 청크 쓰기, 쓴 바이트 수 반환"""


class BufferedResponseWriter(ResponseWriter):
    """
    보낸 응답을 메모리에 기록하는 writer

    프레임워크 어댑터가 핸들러 체인 실행 후 실제 응답 객체를 만들 때 사용합니다.
    """

    def __init__(self) -> None:
        self._status = 200
        self._headers = HeaderMap()
        self._chunks: List[bytes] = []
        self._written = False

    @property
    def status(self) -> int:
        return self._status

    @property
    def headers(self) -> HeaderMap:
        return self._headers

    @property
    def written(self) -> bool:
        return self._written

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)

    @property
    def chunks(self) -> List[bytes]:
        return list(self._chunks)

    def write_header(self, status: int) -> None:
        if self._written:
            logger.warning(
                "본문 전송 후 상태 코드 변경 시도 무시",
                current=self._status,
                requested=status,
            )
            return
        self._status = status

    async def write(self, data: bytes) -> int:
        self._written = True
        self._chunks.append(bytes(data))
        return len(data)


class CachedWriter(ResponseWriter):
    """
    쓰기를 캐시에 미러링하는 캡처 writer

    모든 호출을 감싼 writer에 위임하고, write가 성공할 때마다
    그 시점의 상태 코드와 헤더, 지금까지 쓴 본문 전체로 스냅샷을 만들어
    바인딩된 키와 만료 시간으로 저장합니다.

    처리 규칙:
        - 바이트는 버퍼링 없이 즉시 실제 writer로 전달됨
        - 헤더는 감쌀 때가 아니라 쓰기 시점에 캡처됨
        - 여러 청크를 쓰면 누적된 본문 전체가 저장됨
        - 저장 실패는 로깅만 하고 응답에는 영향 없음
        - 실제 writer의 쓰기 실패는 그대로 전파되며 저장하지 않음
    """

    def __init__(self, store: CacheStore, expire: int, writer: ResponseWriter, key: str):
        self.store = store
        self.expire = expire
        self.writer = writer
        self.key = key
        self._body = bytearray()

    @property
    def status(self) -> int:
        return self.writer.status

    @property
    def headers(self) -> HeaderMap:
        return self.writer.headers

    @property
    def written(self) -> bool:
        return self.writer.written

    def write_header(self, status: int) -> None:
        self.writer.write_header(status)

    async def write(self, data: bytes) -> int:
        written = await self.writer.write(data)
        self._body += data

        snapshot = ResponseSnapshot(
            status=self.status,
            headers=self.headers.to_dict(),
            body=bytes(self._body),
        )
        try:
            await self.store.set(self.key, snapshot, self.expire)
        except Exception as e:
            logger.warning(
                "응답 캐시 저장 실패",
                **ErrorHandler.create_error_context(e, key=self.key, operation="set"),
            )
        return written
