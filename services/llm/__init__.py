"""
LLM 답변 생성 모듈

모유수유 상담 답변을 외부 LLM(Anthropic 우선, OpenAI 대체)으로 생성.

핵심 원칙:
- 검색 결과는 참고 정보로만 전달
- provider 연결 불가 시에만 다음 provider 사용
- 재시도 없음
"""

from .schemas import ChatRequest, ChatResponse
from .client import (
    GenerationClient,
    GenerationResult,
    AnthropicGenerationClient,
    OpenAIGenerationClient,
    FakeGenerationClient,
    FallbackGenerationClient,
    build_generation_client,
)
from .prompts import build_system_prompt, build_user_prompt, format_context
from .answer import generate_answer

__all__ = [
    # Schemas
    "ChatRequest",
    "ChatResponse",
    # Clients
    "GenerationClient",
    "GenerationResult",
    "AnthropicGenerationClient",
    "OpenAIGenerationClient",
    "FakeGenerationClient",
    "FallbackGenerationClient",
    "build_generation_client",
    # Prompts
    "build_system_prompt",
    "build_user_prompt",
    "format_context",
    # Functions
    "generate_answer",
]
