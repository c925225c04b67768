"""
Chat API Router

POST /api/chat - 질문 + 검색 결과로 상담 답변 생성

- Anthropic 우선, 미설정/연결 불가 시 OpenAI
- 재시도 없음
"""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends

from api.dependencies import get_generation_client
from services.errors import CompanionError
from services.llm import ChatRequest, ChatResponse, GenerationClient, generate_answer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    client: GenerationClient = Depends(get_generation_client),
) -> ChatResponse:
    """
    상담 답변 생성

    입력:
    - query: 사용자 질문 (필수)
    - context: 검색 결과 [{title, content}, ...]
    - userInfo: 사용자 정보

    출력:
    - answer: 생성된 답변
    - model: 사용된 모델명
    """
    start_time = time.time()

    try:
        response = await generate_answer(request, client)
    except CompanionError:
        raise
    except Exception as e:
        logger.error(f"Chat error: {e}")
        raise CompanionError(str(e), error="Chat failed") from e

    latency_ms = (time.time() - start_time) * 1000
    context_count = len(request.context) if isinstance(request.context, list) else 0
    logger.info(
        f"[CHAT] model={response.model} context={context_count} "
        f"latency={latency_ms:.0f}ms"
    )

    return response
