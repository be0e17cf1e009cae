"""
요청 식별자 → 캐시 키 변환

요청 URI(경로 + 쿼리 문자열, 호스트 제외)를 저장소 키로 변환합니다.
순수 함수이며 프로세스 재시작과 관계없이 같은 입력은 항상 같은 키가 됩니다.

키 형식:
    "{prefix}:{component}"
    - component: 쿼리 이스케이프된 URI
    - 이스케이프 결과가 200자를 넘으면 원본 URI의 SHA-1 다이제스트(20바이트)

예시:
    ```python
    url_escape("gincontrib.page.cache", "/widgets?id=5")
    # → "gincontrib.page.cache:%2Fwidgets%3Fid%3D5"
    ```
"""

import hashlib
from urllib.parse import quote_plus

PAGE_CACHE_PREFIX = "gincontrib.page.cache"

MAX_ESCAPED_KEY_LENGTH = 200


def url_escape(prefix: str, uri: str) -> str:
    """
    네임스페이스 접두사와 요청 URI로 캐시 키 생성

    Args:
        prefix: 키 네임스페이스 접두사
        uri: 요청 URI (예: "/widgets?id=5")

    Returns:
        str: "{prefix}:{component}" 형식의 캐시 키

    긴 URI 처리:
        거대한 쿼리 문자열 등으로 이스케이프 결과가 200자를 넘으면
        원본 URI의 SHA-1 다이제스트 원시 바이트를 키 구성요소로 사용합니다.
        각 바이트는 같은 값의 코드 포인트 문자 하나로 표현되므로
        구성요소 길이는 항상 20입니다.
    """
    key = quote_plus(uri, safe="")
    if len(key) > MAX_ESCAPED_KEY_LENGTH:
        digest = hashlib.sha1(uri.encode("utf-8")).digest()
        key = digest.decode("latin-1")
    return f"{prefix}:{key}"


def page_key(uri: str, prefix: str = PAGE_CACHE_PREFIX) -> str:
    """가로채기 전략이 사용하는 페이지 캐시 키"""
    return url_escape(prefix, uri)
