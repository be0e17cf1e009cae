"""
페이지 캐시 예외 및 에러 처리 모듈

이 모듈은 캐시 저장소 계약(CacheStore)과 요청 가로채기 계층에서 사용하는
모든 예외를 정의합니다. 저장소 구현체는 이 예외들로 실패를 알리고,
가로채기 전략은 이를 "캐시 없이 진행" 신호로 해석합니다(fail open).

주요 구성요소:
    - ErrorCode: 캐시 에러 코드 열거형
    - PageCacheError: 모든 캐시 예외의 기본 클래스
    - CacheMiss: 키가 없거나 만료됨
    - NotStored: add/replace 전제 조건 실패
    - NotSupport: 저장된 값의 타입에 맞지 않는 연산
    - StoreNotRegistered: 요청 컨텍스트에 저장소가 등록되지 않음
    - ErrorHandler: 로깅용 에러 컨텍스트 생성기
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(Enum):
    """
    캐시 에러 코드 열거형

    저장소 계약이 정의하는 실패 종류와 설정/내부 오류를 구분합니다.
    """

    CACHE_MISS = "cache_miss"  # 키 없음 또는 만료
    NOT_STORED = "not_stored"  # add/replace 전제 조건 실패
    NOT_SUPPORT = "not_support"  # 값 타입에 맞지 않는 연산
    STORE_NOT_REGISTERED = "store_not_registered"  # 컨텍스트에 저장소 없음
    INTERNAL_ERROR = "internal_error"  # 기타 내부 오류


class PageCacheError(Exception):
    """
    모든 페이지 캐시 에러의 기본 예외 클래스

    Attributes:
        message (str): 에러 메시지
        code (ErrorCode): 에러 코드
        data (dict): 추가 에러 정보 (선택사항)
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        data: Optional[Dict[str, Any]] = None,
    ):
        """
        캐시 에러 초기화

        Args:
            message: 에러 메시지
            code: 에러 코드 (기본값: INTERNAL_ERROR)
            data: 디버깅에 유용한 추가 정보 (예: 캐시 키)
        """
        self.message = message
        self.code = code
        self.data = data or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        에러를 직렬화 가능한 딕셔너리로 변환

        data 필드는 값이 있을 때만 포함됩니다.

        Returns:
            Dict[str, Any]: code, message, data(선택)
        """
        error_dict = {"code": self.code.value, "message": self.message}
        if self.data:
            error_dict["data"] = self.data
        return error_dict


class CacheMiss(PageCacheError):
    """
    캐시 미스 에러

    키가 존재하지 않거나 이미 만료된 경우 발생합니다.
    가로채기 전략에서는 항상 치명적이지 않으며 "핸들러 실행"으로 처리됩니다.
    """

    def __init__(self, key: Optional[str] = None, message: str = "cache: key not found."):
        data = {"key": key} if key is not None else None
        super().__init__(message=message, code=ErrorCode.CACHE_MISS, data=data)


class NotStored(PageCacheError):
    """
    저장 실패 에러

    add는 키가 이미 있을 때, replace는 키가 없을 때 발생합니다.
    재시도 정책은 호출자가 결정합니다.
    """

    def __init__(self, key: Optional[str] = None, message: str = "cache: not stored."):
        data = {"key": key} if key is not None else None
        super().__init__(message=message, code=ErrorCode.NOT_STORED, data=data)


class NotSupport(PageCacheError):
    """
    지원하지 않는 연산 에러

    숫자가 아닌 값에 increment/decrement를 시도하는 경우처럼
    저장된 값의 타입에 맞지 않는 연산에서 발생합니다.
    """

    def __init__(
        self,
        key: Optional[str] = None,
        operation: Optional[str] = None,
        message: str = "cache: not support.",
    ):
        data: Dict[str, Any] = {}
        if key is not None:
            data["key"] = key
        if operation:
            data["operation"] = operation
        super().__init__(message=message, code=ErrorCode.NOT_SUPPORT, data=data)


class StoreNotRegistered(PageCacheError):
    """
    저장소 미등록 에러

    must_get_cache()가 저장소가 등록되지 않은 요청 컨텍스트에서 호출될 때 발생합니다.
    """

    def __init__(self, slot: str):
        super().__init__(
            message=f"no cache store registered under {slot!r}",
            code=ErrorCode.STORE_NOT_REGISTERED,
            data={"slot": slot},
        )


class ErrorHandler:
    """
    구조화된 로깅을 위한 에러 컨텍스트 생성 유틸리티
    """

    @staticmethod
    def create_error_context(
        error: Exception,
        key: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        로깅을 위한 에러 컨텍스트 생성

        Args:
            error: 발생한 예외
            key: 관련 캐시 키 (선택사항)
            operation: 실패한 저장소 연산 (예: "get", "set")

        Returns:
            Dict[str, Any]: error_type, error_message 및 선택 필드들
        """
        context: Dict[str, Any] = {
            "error_type": type(error).__name__,
            "error_message": str(error),
        }

        if key is not None:
            # 해시 키는 출력 불가능한 문자를 포함할 수 있음
            context["key"] = key if key.isprintable() else repr(key)
        if operation:
            context["operation"] = operation

        if isinstance(error, PageCacheError):
            context["error_code"] = error.code.value
            if error.data:
                context["error_data"] = error.data

        return context
