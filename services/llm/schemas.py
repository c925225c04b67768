"""
Chat API Schemas

Pydantic 스키마 정의 (요청 JSON은 camelCase 필드명 사용)
"""

from __future__ import annotations

from typing import Any
from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Chat Schemas
# =============================================================================

class ChatRequest(BaseModel):
    """
    답변 생성 요청

    입력:
    - query: 사용자 질문 (필수)
    - context: 검색 결과 목록 [{title, content}, ...]
    - userInfo: 사용자 정보 (아기 월령 등, 형식 무관, 시스템 프롬프트에 포함)
    """
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "query": "아기가 젖을 안 물어요",
                    "context": [
                        {"title": "젖 거부 대처법", "content": "아기가 젖을 거부할 때는..."}
                    ],
                    "userInfo": {"babyAgeWeeks": 6},
                }
            ]
        },
    )

    query: str | None = Field(None, description="사용자 질문")
    # 배열이 아니면 "관련 정보 없음"으로 처리
    context: Any = Field(None, description="참고 정보 목록")
    # 객체가 아니어도 그대로 JSON 직렬화하여 프롬프트에 포함
    user_info: Any = Field(None, alias="userInfo", description="사용자 정보")


class ChatResponse(BaseModel):
    """답변 생성 응답"""
    success: bool = True
    answer: str
    model: str
