"""
캐시된 응답 스냅샷 모델

핸들러가 보낸 응답의 상태 코드, 헤더, 본문을 저장소 경계를 넘길 수 있는
형태로 표현합니다. 한 번 저장된 스냅샷은 변경되지 않으며, 새 캡처로
덮어쓰이거나 delete/flush로 삭제될 뿐입니다.

와이어 형식 (JSON):
    {"status": 201, "headers": {"Content-Type": ["application/json"]}, "body": "<base64>"}
"""

import base64
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_serializer, field_validator


class ResponseSnapshot(BaseModel):
    """
    캡처된 HTTP 응답

    Attributes:
        status (int): HTTP 상태 코드
        headers (dict[str, list[str]]): 헤더 이름 → 값 목록 (중복 헤더 보존, 순서 유지)
        body (bytes): 응답 본문 원시 바이트
    """

    model_config = ConfigDict(frozen=True)

    status: int
    headers: dict[str, list[str]] = Field(default_factory=dict)
    body: bytes = b""

    @field_serializer("body", when_used="json")
    def _encode_body(self, body: bytes) -> str:
        # 임의 바이트가 JSON을 왕복할 수 있도록 base64 사용
        return base64.b64encode(body).decode("ascii")

    @field_validator("body", mode="before")
    @classmethod
    def _decode_body(cls, value: Any, info: ValidationInfo) -> Any:
        if info.mode == "json" and isinstance(value, str):
            return base64.b64decode(value)
        return value
