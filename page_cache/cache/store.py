"""
캐시 저장소 계약 모듈

가로채기 계층이 의존하는 유일한 저장소 추상화입니다. 구체적인 저장 엔진
(메모리, Redis 등)은 이 인터페이스를 상속받아 구현합니다.

만료(expire) 규칙 (초 단위):
    - DEFAULT (0): 저장소의 기본 TTL 사용
    - FOREVER (-1, 모든 음수): 만료되지 않음
    - 양수: 지금부터 해당 초 후 만료

동시성:
    모든 연산은 여러 요청에서 동시에 호출되어도 안전해야 합니다.
    잠금과 원자성은 저장소 구현체의 책임입니다.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Type

from pydantic import BaseModel

DEFAULT = 0
FOREVER = -1


class CacheStore(ABC):
    """
    플러그형 키-값 캐시 저장소의 추상 기본 클래스

    실패는 page_cache.exceptions의 CacheMiss / NotStored / NotSupport로 알립니다.
    백엔드 자체의 오류(연결 실패 등)는 그대로 전파되며, 가로채기 계층이
    fail open 정책으로 처리합니다.
    """

    @abstractmethod
    async def get(self, key: str, model: Optional[Type[BaseModel]] = None) -> Any:
        """
        저장된 값 조회

        Args:
            key: 캐시 키
            model: 지정하면 값을 해당 pydantic 모델로 검증해서 반환

        Raises:
            CacheMiss: 키가 없거나 만료됨
        """

    @abstractmethod
    async def set(self, key: str, value: Any, expire: int = DEFAULT) -> None:
        """기존 값을 덮어쓰며 무조건 저장"""

    @abstractmethod
    async def add(self, key: str, value: Any, expire: int = DEFAULT) -> None:
        """
        키가 없을 때만 저장

        같은 키에 대한 동시 호출 중 정확히 하나만 성공해야 합니다.

        Raises:
            NotStored: 키가 이미 존재함
        """

    @abstractmethod
    async def replace(self, key: str, value: Any, expire: int = DEFAULT) -> None:
        """
        키가 이미 있을 때만 저장

        Raises:
            NotStored: 키가 존재하지 않음
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        항목 삭제

        Raises:
            CacheMiss: 키가 존재하지 않음
        """

    @abstractmethod
    async def increment(self, key: str, delta: int) -> int:
        """
        저장된 정수 카운터를 원자적으로 증가

        Returns:
            증가 후 값

        Raises:
            CacheMiss: 키가 존재하지 않음
            NotSupport: 저장된 값이 정수가 아님
            ValueError: delta가 음수
        """

    @abstractmethod
    async def decrement(self, key: str, delta: int) -> int:
        """
        저장된 정수 카운터를 원자적으로 감소

        결과는 0 아래로 내려가지 않습니다. delta가 현재 값보다 크면 0이 됩니다.

        Raises:
            CacheMiss: 키가 존재하지 않음
            NotSupport: 저장된 값이 정수가 아님
            ValueError: delta가 음수
        """

    @abstractmethod
    async def flush(self) -> None:
        """저장소 네임스페이스의 모든 항목 삭제"""


def check_delta(delta: int) -> int:
    """increment/decrement의 delta 검증 (음이 아닌 정수만 허용)"""
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise ValueError(f"delta must be an integer, got {type(delta).__name__}")
    if delta < 0:
        raise ValueError(f"delta must be non-negative, got {delta}")
    return delta
