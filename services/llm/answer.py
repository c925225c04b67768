"""
답변 생성

질문 + 검색 결과(context) + 사용자 정보 → 프롬프트 구성 → LLM 호출
"""

from __future__ import annotations

import logging

from services.errors import InvalidInput

from .client import GenerationClient
from .prompts import build_system_prompt, build_user_prompt
from .schemas import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)


async def generate_answer(request: ChatRequest, client: GenerationClient) -> ChatResponse:
    """
    답변 생성 메인 함수

    Args:
        request: ChatRequest
        client: 답변 생성 클라이언트

    Returns:
        ChatResponse

    Raises:
        InvalidInput: query 누락
        UpstreamUnavailable / UpstreamRejected: LLM 호출 실패
    """
    query = (request.query or "").strip()
    if not query:
        raise InvalidInput("query required", error="query required")

    system_prompt = build_system_prompt(request.user_info)
    user_prompt = build_user_prompt(query, request.context)

    result = await client.generate(system_prompt, user_prompt)
    return ChatResponse(answer=result.answer, model=result.model)
