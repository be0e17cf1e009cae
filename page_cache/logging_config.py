"""
구조화된 로깅 설정

표준 logging 위에 structlog 처리기 체인을 설치합니다.
애플리케이션 시작 시 한 번 호출합니다.
"""

import logging
import sys

import structlog

from page_cache.config.settings import LoggingConfig


def configure_logging(config: LoggingConfig | None = None) -> None:
    """
    structlog 설정

    Args:
        config: 로깅 설정 (기본값: LoggingConfig())
            json_logs=True면 JSON, 아니면 콘솔 렌더러 사용
    """
    config = config or LoggingConfig()
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if config.json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
