"""
Redis 기반 캐시 저장소

CacheStore 계약을 Redis로 구현한 어댑터입니다. 여러 프로세스/서버가
같은 캐시를 공유해야 하는 분산 환경을 위한 저장소입니다.

주요 기능:
    - 비동기 Redis 클라이언트 사용 (redis.asyncio)
    - 키 접두사 기반 네임스페이스 격리 ({key_prefix}:{key})
    - SET NX / SET XX로 add / replace 원자성 보장
    - Lua 스크립트로 increment / decrement 원자성 보장
    - JSON 직렬화 (pydantic 모델은 model_dump_json 사용)
    - SCAN 기반 flush

의존성:
    - redis: Redis 비동기 클라이언트
    - pydantic: 설정 검증 및 모델 직렬화
    - structlog: 구조화된 로깅
"""

import json
from typing import Any, Optional, Type

import redis.asyncio as redis
from redis.exceptions import NoScriptError
from pydantic import BaseModel
import structlog

from page_cache.cache.store import DEFAULT, CacheStore, check_delta
from page_cache.exceptions import CacheMiss, NotStored, NotSupport

logger = structlog.get_logger(__name__)

# 카운터 스크립트 결과 상태
_COUNTER_MISS = 0
_COUNTER_NOT_INTEGER = 1
_COUNTER_OK = 2


class RedisStoreConfig(BaseModel):
    """
    Redis 저장소 설정 모델

    Attributes:
        redis_url (str): Redis 서버 연결 URL (예: "redis://localhost:6379/0")
        key_prefix (str): 모든 키 앞에 붙는 네임스페이스. flush는 이 범위만 삭제
        default_ttl (int): expire=DEFAULT일 때 사용할 TTL (초). 0 이하면 만료 없음
        scan_batch_size (int): flush 시 SCAN 한 번에 조회할 키 수
    """

    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "page_cache"
    default_ttl: int = 300
    scan_batch_size: int = 100


class RedisStore(CacheStore):
    """
    Redis 기반 CacheStore 구현체

    사용 예시:
        ```python
        store = RedisStore(RedisStoreConfig(redis_url="redis://localhost:6379/0"))
        await store.connect()

        await store.set("greeting", {"text": "hello"}, expire=60)
        value = await store.get("greeting")
        ```

    테스트나 기존 연결 재사용을 위해 client를 직접 주입할 수도 있습니다.
    """

    # Lua 스크립트: 존재 확인, 정수 확인, 0 하한, 증감을 한 번에 수행
    COUNTER_SCRIPT = """
    local current = redis.call('GET', KEYS[1])
    if not current then
        return {0, 0}
    end
    if not string.match(current, '^%-?%d+$') then
        return {1, 0}
    end
    local value = tonumber(current)
    local delta = tonumber(ARGV[1])
    -- 카운터는 0 아래로 내려가지 않음
    if value + delta < 0 then
        delta = -value
    end
    -- INCRBY는 기존 TTL을 유지함
    local result = redis.call('INCRBY', KEYS[1], delta)
    return {2, result}
    """

    def __init__(
        self,
        config: Optional[RedisStoreConfig] = None,
        client: Optional[redis.Redis] = None,
    ):
        """
        Args:
            config: 저장소 설정 (기본값: RedisStoreConfig())
            client: 이미 생성된 Redis 클라이언트 (선택사항).
                주입하면 connect() 없이 바로 사용할 수 있음
        """
        self.config = config or RedisStoreConfig()
        self._client: Optional[redis.Redis] = client
        self._script_sha: Optional[str] = None

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise RuntimeError("RedisStore is not connected; call connect() first")
        return self._client

    async def connect(self) -> None:
        """
        Redis 서버에 연결하고 ping으로 확인

        Raises:
            redis.ConnectionError: Redis 서버 연결 실패
        """
        try:
            self._client = redis.from_url(self.config.redis_url, decode_responses=True)
            await self._client.ping()
            logger.info("Redis 캐시 저장소 연결 성공", redis_url=self.config.redis_url)
        except Exception as e:
            logger.error(
                "Redis 캐시 저장소 연결 실패",
                error=str(e),
                redis_url=self.config.redis_url,
            )
            self._client = None
            raise

    async def disconnect(self) -> None:
        """Redis 연결 해제 (중복 호출 안전)"""
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._script_sha = None
            logger.info("Redis 캐시 저장소 연결 해제")

    def _key(self, key: str) -> str:
        return f"{self.config.key_prefix}:{key}"

    def _ttl(self, expire: int) -> Optional[int]:
        """expire 값을 Redis EX 인자로 변환 (None이면 만료 없음)"""
        ttl = self.config.default_ttl if expire == DEFAULT else expire
        return ttl if ttl > 0 else None

    @staticmethod
    def _dumps(value: Any) -> str:
        if isinstance(value, BaseModel):
            return value.model_dump_json()
        return json.dumps(value, ensure_ascii=False)

    async def get(self, key: str, model: Optional[Type[BaseModel]] = None) -> Any:
        raw = await self.client.get(self._key(key))
        if raw is None:
            raise CacheMiss(key)

        if model is not None:
            return model.model_validate_json(raw)
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            # 외부에서 기록된 일반 문자열은 그대로 반환
            return raw

    async def set(self, key: str, value: Any, expire: int = DEFAULT) -> None:
        await self.client.set(self._key(key), self._dumps(value), ex=self._ttl(expire))
        logger.debug("캐시 저장", key=key, ttl=self._ttl(expire))

    async def add(self, key: str, value: Any, expire: int = DEFAULT) -> None:
        stored = await self.client.set(
            self._key(key), self._dumps(value), ex=self._ttl(expire), nx=True
        )
        if not stored:
            raise NotStored(key)

    async def replace(self, key: str, value: Any, expire: int = DEFAULT) -> None:
        stored = await self.client.set(
            self._key(key), self._dumps(value), ex=self._ttl(expire), xx=True
        )
        if not stored:
            raise NotStored(key)

    async def delete(self, key: str) -> None:
        removed = await self.client.delete(self._key(key))
        if not removed:
            raise CacheMiss(key)

    async def increment(self, key: str, delta: int) -> int:
        check_delta(delta)
        return await self._run_counter(key, delta, "increment")

    async def decrement(self, key: str, delta: int) -> int:
        check_delta(delta)
        return await self._run_counter(key, -delta, "decrement")

    async def _ensure_script_loaded(self) -> str:
        """Lua 스크립트가 Redis에 로드되었는지 확인"""
        if self._script_sha is None:
            self._script_sha = await self.client.script_load(self.COUNTER_SCRIPT)
        return self._script_sha

    async def _run_counter(self, key: str, delta: int, operation: str) -> int:
        script_sha = await self._ensure_script_loaded()
        try:
            result = await self.client.evalsha(script_sha, 1, self._key(key), str(delta))
        except NoScriptError:
            # 서버의 스크립트 캐시가 비워진 경우 다시 로드
            self._script_sha = None
            script_sha = await self._ensure_script_loaded()
            result = await self.client.evalsha(script_sha, 1, self._key(key), str(delta))

        status, value = int(result[0]), int(result[1])
        if status == _COUNTER_MISS:
            raise CacheMiss(key)
        if status == _COUNTER_NOT_INTEGER:
            raise NotSupport(key, operation)
        return value

    async def flush(self) -> None:
        """
        {key_prefix}:* 패턴의 모든 키 삭제

        SCAN으로 점진적으로 조회하므로 Redis를 블로킹하지 않습니다.
        다른 접두사의 키에는 영향이 없습니다.
        """
        pattern = f"{self.config.key_prefix}:*"
        removed = 0
        cursor = 0
        while True:
            cursor, keys = await self.client.scan(
                cursor, match=pattern, count=self.config.scan_batch_size
            )
            if keys:
                removed += await self.client.delete(*keys)
            if cursor == 0:
                break

        logger.info("캐시 네임스페이스 비움", key_prefix=self.config.key_prefix, removed=removed)
