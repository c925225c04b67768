"""
LLM Generation Client

답변 생성용 LLM provider wrapper

핵심 원칙:
- Anthropic 우선, OpenAI 대체 (설정된 provider만 사용)
- provider 연결 불가(UpstreamUnavailable) 시에만 다음 provider로 넘어감
- 실패 응답(UpstreamRejected)은 그대로 전달
- 재시도 없음, 호출마다 타임아웃 적용
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections import deque
from dataclasses import dataclass
from typing import Protocol, Sequence, runtime_checkable

import anthropic
import openai

from services.errors import CompanionError, UpstreamRejected, UpstreamUnavailable
from services.settings import Settings

logger = logging.getLogger(__name__)


# 응답에 표시할 모델명 (날짜 suffix 제거: claude-3-haiku-20240307 → claude-3-haiku)
_MODEL_DATE_SUFFIX = re.compile(r"-\d{8}$")

METRICS_HISTORY_SIZE = 100


def display_model_name(model: str) -> str:
    return _MODEL_DATE_SUFFIX.sub("", model)


# =============================================================================
# Metrics
# =============================================================================

@dataclass
class GenerationMetrics:
    """LLM 호출 메트릭"""
    call_id: str
    provider: str
    start_time: float = 0.0
    end_time: float = 0.0
    latency_ms: float = 0.0
    success: bool = False
    error: str | None = None

    def finish(self, success: bool, error: str | None = None) -> None:
        """호출 완료 처리"""
        self.end_time = time.time()
        self.latency_ms = (self.end_time - self.start_time) * 1000
        self.success = success
        self.error = error


@dataclass
class GenerationResult:
    """LLM 응답"""
    answer: str
    model: str


@runtime_checkable
class GenerationClient(Protocol):
    """답변 생성 클라이언트 프로토콜"""

    name: str

    async def generate(self, system_prompt: str, user_prompt: str) -> GenerationResult:
        """
        답변 생성

        Raises:
            UpstreamUnavailable: provider 연결 불가 / 타임아웃 / 미설정
            UpstreamRejected: provider 실패 응답
        """
        ...


# =============================================================================
# Providers
# =============================================================================

class AnthropicGenerationClient:
    """Anthropic Messages API 클라이언트"""

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-haiku-20240307",
        max_tokens: int = 1024,
        timeout: float = 10.0,
        client: anthropic.AsyncAnthropic | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> anthropic.AsyncAnthropic:
        """Anthropic 클라이언트 lazy 초기화"""
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key, max_retries=0)
        return self._client

    async def generate(self, system_prompt: str, user_prompt: str) -> GenerationResult:
        client = self._get_client()

        try:
            response = await asyncio.wait_for(
                client.messages.create(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    system=system_prompt,
                    messages=[{"role": "user", "content": user_prompt}],
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamUnavailable(
                f"Claude API timed out after {self.timeout}s", error="Chat failed"
            ) from e
        except anthropic.APIConnectionError as e:
            raise UpstreamUnavailable(
                f"Claude API unreachable: {e}", error="Chat failed"
            ) from e
        except anthropic.APIStatusError as e:
            raise UpstreamRejected(
                "Claude API failed", error="Chat failed", upstream_status=e.status_code
            ) from e

        answer = "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )
        if not answer:
            raise UpstreamRejected("Empty response from Claude API", error="Chat failed")

        return GenerationResult(answer=answer, model=display_model_name(self.model))


class OpenAIGenerationClient:
    """OpenAI Chat Completions 클라이언트"""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_tokens: int = 1024,
        timeout: float = 10.0,
        client: openai.AsyncOpenAI | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> openai.AsyncOpenAI:
        """OpenAI 클라이언트 lazy 초기화"""
        if self._client is None:
            self._client = openai.AsyncOpenAI(api_key=self.api_key, max_retries=0)
        return self._client

    async def generate(self, system_prompt: str, user_prompt: str) -> GenerationResult:
        client = self._get_client()

        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamUnavailable(
                f"OpenAI API timed out after {self.timeout}s", error="Chat failed"
            ) from e
        except openai.APIConnectionError as e:
            raise UpstreamUnavailable(
                f"OpenAI API unreachable: {e}", error="Chat failed"
            ) from e
        except openai.APIStatusError as e:
            raise UpstreamRejected(
                "OpenAI API failed", error="Chat failed", upstream_status=e.status_code
            ) from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise UpstreamRejected("Empty response from OpenAI API", error="Chat failed")

        return GenerationResult(answer=content, model=display_model_name(self.model))


class FakeGenerationClient:
    """
    테스트용 Fake 클라이언트

    고정 응답 반환 또는 지정된 오류 발생
    """

    name = "fake"

    def __init__(
        self,
        answer: str = "테스트 답변입니다.",
        model: str = "fake-model",
        error: CompanionError | None = None,
    ):
        self.answer = answer
        self.model = model
        self.error = error
        self.call_count = 0
        self.call_history: list[dict[str, str]] = []

    async def generate(self, system_prompt: str, user_prompt: str) -> GenerationResult:
        self.call_count += 1
        self.call_history.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
        })
        if self.error is not None:
            raise self.error
        return GenerationResult(answer=self.answer, model=self.model)


# =============================================================================
# Fallback chain
# =============================================================================

class FallbackGenerationClient:
    """
    provider 순서대로 시도

    - UpstreamUnavailable → 다음 provider
    - UpstreamRejected → 즉시 전달
    - provider 없음 → UpstreamUnavailable (미설정)
    """

    name = "fallback"

    def __init__(
        self,
        providers: Sequence[GenerationClient],
        history_size: int = METRICS_HISTORY_SIZE,
    ):
        self.providers = list(providers)
        # 최근 호출만 보관
        self.metrics_history: deque[GenerationMetrics] = deque(maxlen=history_size)
        self._call_counter = 0

    async def generate(self, system_prompt: str, user_prompt: str) -> GenerationResult:
        if not self.providers:
            raise UpstreamUnavailable(
                "No AI API configured",
                error="No AI API configured",
                misconfigured=True,
            )

        last_error: UpstreamUnavailable | None = None

        for provider in self.providers:
            self._call_counter += 1
            metrics = GenerationMetrics(
                call_id=f"chat_{self._call_counter}",
                provider=provider.name,
                start_time=time.time(),
            )

            try:
                result = await provider.generate(system_prompt, user_prompt)
            except UpstreamUnavailable as e:
                metrics.finish(success=False, error=e.message)
                self.metrics_history.append(metrics)
                logger.warning(f"LLM provider unavailable: {provider.name}: {e.message}")
                last_error = e
                continue
            except UpstreamRejected as e:
                metrics.finish(success=False, error=e.message)
                self.metrics_history.append(metrics)
                logger.error(f"LLM provider rejected: {provider.name}: {e.message}")
                raise

            metrics.finish(success=True)
            self.metrics_history.append(metrics)
            logger.info(
                f"LLM call success: {provider.name} "
                f"latency={metrics.latency_ms:.0f}ms"
            )
            return result

        raise last_error


def build_generation_client(settings: Settings) -> FallbackGenerationClient:
    """설정된 provider로 fallback 체인 구성 (Anthropic → OpenAI)"""
    providers: list[GenerationClient] = []

    if settings.anthropic_api_key:
        providers.append(AnthropicGenerationClient(
            settings.anthropic_api_key,
            model=settings.anthropic_model,
            max_tokens=settings.max_tokens,
            timeout=settings.upstream_timeout,
        ))

    if settings.openai_api_key:
        providers.append(OpenAIGenerationClient(
            settings.openai_api_key,
            model=settings.openai_model,
            max_tokens=settings.max_tokens,
            timeout=settings.upstream_timeout,
        ))

    if not providers:
        logger.warning("No LLM provider configured (ANTHROPIC_API_KEY / OPENAI_API_KEY)")

    return FallbackGenerationClient(providers)
