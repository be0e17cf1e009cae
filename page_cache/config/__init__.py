"""
설정 관리 모듈

페이지 캐시의 저장소/로깅 설정을 중앙에서 관리합니다.

주요 구성요소:
    - Settings: 통합 설정 클래스
    - CacheConfig: 저장소 백엔드와 TTL 설정
    - LoggingConfig: 로깅 설정
    - validate_config: 설정 검증기
"""

from .settings import CacheConfig, LoggingConfig, Settings
from .validators import validate_config

__all__ = [
    "CacheConfig",
    "LoggingConfig",
    "Settings",
    "validate_config",
]
